"""
Accounts app models.

Defines the four fixed roles and a custom ``User`` model that extends
Django's ``AbstractUser``.  Users log in with their e-mail address;
``username`` is dropped.

Department membership depends on the role:
    • employee / manager → must belong to a department.
    • client / admin     → never carry a department.
"""

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models

from core.models import TimeStampedModel


class UserRole(models.TextChoices):
    CLIENT = "client", "Client"
    EMPLOYEE = "employee", "Employee"
    MANAGER = "manager", "Manager"
    ADMIN = "admin", "Admin"


# Roles whose members are attached to a department.
DEPARTMENT_ROLES = frozenset({UserRole.EMPLOYEE, UserRole.MANAGER})


def default_notification_preferences() -> dict:
    return {"email": True, "whatsapp": True}


class UserManager(BaseUserManager):
    """Manager for the e-mail-keyed ``User`` model."""

    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError("The email address must be set.")
        email = self.normalize_email(email).lower()
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        extra_fields.setdefault("role", UserRole.CLIENT)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields["role"] = UserRole.ADMIN
        extra_fields.pop("department", None)
        return self._create_user(email, password, **extra_fields)


class User(AbstractUser, TimeStampedModel):
    """
    Application user.

    ``name`` is the display name used throughout the UI and inside
    WhatsApp messages.  ``phone`` is optional; users without one are
    simply skipped by the notification fan-out.
    """

    username = None
    first_name = None
    last_name = None

    email = models.EmailField(
        unique=True,
        verbose_name="Email Address",
    )
    name = models.CharField(
        max_length=150,
        verbose_name="Full Name",
    )
    role = models.CharField(
        max_length=20,
        choices=UserRole.choices,
        default=UserRole.CLIENT,
        db_index=True,
        verbose_name="Role",
    )
    department = models.ForeignKey(
        "departments.Department",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="members",
        verbose_name="Department",
    )
    phone = models.CharField(
        max_length=32,
        blank=True,
        default="",
        verbose_name="Phone Number",
    )
    address = models.CharField(
        max_length=255,
        blank=True,
        default="",
        verbose_name="Address",
    )
    bio = models.TextField(
        blank=True,
        default="",
        verbose_name="Bio",
    )
    profile_image = models.CharField(
        max_length=500,
        blank=True,
        default="",
        verbose_name="Profile Image URL",
    )
    notification_preferences = models.JSONField(
        default=default_notification_preferences,
        blank=True,
        verbose_name="Notification Preferences",
    )

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["name"]

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["role", "is_active"]),
        ]

    def __str__(self):
        return f"{self.name} <{self.email}> ({self.role})"

    def get_full_name(self):
        return self.name

    def get_short_name(self):
        return self.name

    # ── Helper predicates for role checks ────────────────────────────

    def has_role(self, *roles: str) -> bool:
        """Check whether the user's role is one of ``roles``."""
        return self.role in roles

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_client(self) -> bool:
        return self.role == UserRole.CLIENT
