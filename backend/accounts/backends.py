"""
E-mail authentication backend.

Users sign in with ``email`` + ``password``.  The lookup is
case-insensitive because addresses are stored lower-cased.

This backend is registered in ``settings.AUTHENTICATION_BACKENDS``
so that Django's ``authenticate()`` call dispatches to it.
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend

User = get_user_model()


class EmailAuthBackend(ModelBackend):
    """
    Authenticate against the ``email`` field.

    Accepts either ``email=`` or Django's conventional ``username=``
    keyword so the admin login form keeps working.
    """

    def authenticate(self, request, email=None, password=None, username=None, **kwargs):
        """
        Resolve the user by e-mail and verify *password*.

        Returns
        -------
        User | None
            The authenticated user, or ``None`` on failure.
        """
        email = email or username
        if email is None or password is None:
            return None

        try:
            user = User.objects.get(email__iexact=email.strip())
        except User.DoesNotExist:
            # Run the default password hasher to mitigate timing attacks
            User().set_password(password)
            return None

        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        return None
