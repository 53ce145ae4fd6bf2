"""
Accounts app views.

All views follow the **Thin View** pattern: validate input via
serializers, delegate to the service layer, and return the result
wrapped in a DRF ``Response``.  **No business logic** resides here.

View Map
--------
- ``LoginView``          — POST /auth/login/
- ``MeView``             — GET / PATCH /me/
- ``PasswordChangeView`` — POST /me/password/
- ``UserViewSet``        — /users/  (list, create, retrieve, partial
                           update, destroy, bulk, team)
"""

from __future__ import annotations

from django.contrib.auth import login as django_login
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.authentication import JWTAuthentication

from .serializers import (
    EmailTokenObtainPairSerializer,
    PasswordChangeSerializer,
    ProfileUpdateSerializer,
    TeamMemberSerializer,
    UserBulkActionSerializer,
    UserCreateSerializer,
    UserDetailSerializer,
    UserFilterSerializer,
    UserUpdateSerializer,
)
from .services import CurrentUserService, UserManagementService


# ═══════════════════════════════════════════════════════════════════
#  Authentication Views
# ═══════════════════════════════════════════════════════════════════


class LoginView(APIView):
    """
    POST /api/accounts/auth/login/

    Public endpoint.  Authenticates by e-mail + password, issues a JWT
    pair and also opens a Django session so browser clients can rely on
    the session cookie.

    Flow:
        1. Validate credentials via ``EmailTokenObtainPairSerializer``
           (401 on failure or inactive account).
        2. Attach the session.
        3. Return tokens + ``UserDetailSerializer`` payload.
    """

    permission_classes = [AllowAny]
    authentication_classes = [JWTAuthentication]

    @extend_schema(
        summary="Log in",
        description="Authenticate with email and password. Returns a JWT pair and the user profile.",
        request=EmailTokenObtainPairSerializer,
        responses={
            200: OpenApiResponse(description="Tokens and user profile."),
            401: OpenApiResponse(description="Invalid credentials or inactive account."),
        },
        tags=["Auth"],
    )
    def post(self, request: Request) -> Response:
        serializer = EmailTokenObtainPairSerializer(
            data=request.data,
            context={"request": request},
        )
        serializer.is_valid(raise_exception=True)

        user = serializer.user
        django_login(request._request, user, backend="accounts.backends.EmailAuthBackend")

        payload = dict(serializer.validated_data)
        payload["user"] = UserDetailSerializer(user).data
        return Response(payload, status=status.HTTP_200_OK)


# ═══════════════════════════════════════════════════════════════════
#  Current User ("Me") Views
# ═══════════════════════════════════════════════════════════════════


class MeView(APIView):
    """
    GET   /api/accounts/me/  → Retrieve current user profile.
    PATCH /api/accounts/me/  → Update own profile fields.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Get my profile",
        responses={200: UserDetailSerializer},
        tags=["Profile"],
    )
    def get(self, request: Request) -> Response:
        user = CurrentUserService.get_profile(request.user)
        return Response(UserDetailSerializer(user).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Update my profile",
        description=(
            "Only name, phone, address, bio, profile_image and "
            "notification_preferences can be changed here."
        ),
        request=ProfileUpdateSerializer,
        responses={200: UserDetailSerializer},
        tags=["Profile"],
    )
    def patch(self, request: Request) -> Response:
        serializer = ProfileUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        user = CurrentUserService.update_profile(request.user, serializer.validated_data)
        return Response(UserDetailSerializer(user).data, status=status.HTTP_200_OK)


class PasswordChangeView(APIView):
    """POST /api/accounts/me/password/"""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Change my password",
        request=PasswordChangeSerializer,
        responses={
            200: OpenApiResponse(description="Password updated."),
            400: OpenApiResponse(description="Wrong current password or weak new password."),
        },
        tags=["Profile"],
    )
    def post(self, request: Request) -> Response:
        serializer = PasswordChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        CurrentUserService.change_password(
            request.user,
            serializer.validated_data["current_password"],
            serializer.validated_data["new_password"],
        )
        return Response({"message": "Password updated successfully"}, status=status.HTTP_200_OK)


# ═══════════════════════════════════════════════════════════════════
#  User Management ViewSet
# ═══════════════════════════════════════════════════════════════════


class UserViewSet(viewsets.ViewSet):
    """
    /api/accounts/users/

    Administrative user management.  Access rules are enforced inside
    ``UserManagementService``; the view only checks authentication.
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    @extend_schema(
        summary="List users",
        parameters=[UserFilterSerializer],
        responses={200: UserDetailSerializer(many=True)},
        tags=["Users"],
    )
    def list(self, request: Request) -> Response:
        filters = UserFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        users = UserManagementService.list_users(request.user, filters.validated_data)
        return Response(UserDetailSerializer(users, many=True).data)

    @extend_schema(
        summary="Create user",
        request=UserCreateSerializer,
        responses={
            201: UserDetailSerializer,
            409: OpenApiResponse(description="Email already exists."),
        },
        tags=["Users"],
    )
    def create(self, request: Request) -> Response:
        serializer = UserCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = UserManagementService.create_user(request.user, serializer.validated_data)
        return Response(UserDetailSerializer(user).data, status=status.HTTP_201_CREATED)

    @extend_schema(summary="Get user", responses={200: UserDetailSerializer}, tags=["Users"])
    def retrieve(self, request: Request, pk: str = None) -> Response:
        user = UserManagementService.get_user(request.user, pk)
        return Response(UserDetailSerializer(user).data)

    @extend_schema(
        summary="Update user",
        request=UserUpdateSerializer,
        responses={200: UserDetailSerializer},
        tags=["Users"],
    )
    def partial_update(self, request: Request, pk: str = None) -> Response:
        serializer = UserUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        user = UserManagementService.update_user(request.user, pk, serializer.validated_data)
        return Response(UserDetailSerializer(user).data)

    @extend_schema(summary="Delete user", responses={204: None}, tags=["Users"])
    def destroy(self, request: Request, pk: str = None) -> Response:
        UserManagementService.delete_user(request.user, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        summary="Bulk user action",
        description="`delete` deactivates, `activate` reactivates, `export` returns the rows.",
        request=UserBulkActionSerializer,
        tags=["Users"],
    )
    @action(detail=False, methods=["post"], url_path="bulk")
    def bulk(self, request: Request) -> Response:
        serializer = UserBulkActionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = UserManagementService.bulk_action(
            request.user,
            serializer.validated_data["action"],
            serializer.validated_data["user_ids"],
        )
        return Response(result)

    @extend_schema(
        summary="Team roster",
        description="Active employees and managers (managers see their own department).",
        responses={200: TeamMemberSerializer(many=True)},
        tags=["Users"],
    )
    @action(detail=False, methods=["get"], url_path="team")
    def team(self, request: Request) -> Response:
        members = UserManagementService.list_team(request.user)
        return Response(TeamMemberSerializer(members, many=True).data)
