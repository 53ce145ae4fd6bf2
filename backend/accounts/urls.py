"""
Accounts app URL configuration.

All routes are namespaced under ``accounts`` and included in the
project-level ``urls.py`` as::

    path('api/accounts/', include('accounts.urls')),

Endpoint Map
------------
Authentication
    POST   /auth/login/                 → LoginView
    POST   /auth/token/refresh/         → TokenRefreshView (SimpleJWT)

Current User Profile ("Me")
    GET    /me/                         → MeView  (retrieve)
    PATCH  /me/                         → MeView  (partial update)
    POST   /me/password/                → PasswordChangeView

User Management (admin; team also for managers)
    GET    /users/                      → UserViewSet.list
    POST   /users/                      → UserViewSet.create
    GET    /users/{id}/                 → UserViewSet.retrieve
    PATCH  /users/{id}/                 → UserViewSet.partial_update
    DELETE /users/{id}/                 → UserViewSet.destroy
    POST   /users/bulk/                 → UserViewSet.bulk
    GET    /users/team/                 → UserViewSet.team
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView

from .views import LoginView, MeView, PasswordChangeView, UserViewSet

app_name = "accounts"

router = DefaultRouter()
router.register(r"users", UserViewSet, basename="user")

urlpatterns = [
    # ── Authentication ───────────────────────────────────────────────
    path("auth/login/", LoginView.as_view(), name="login"),
    path(
        "auth/token/refresh/",
        TokenRefreshView.as_view(),
        name="token-refresh",
    ),

    # ── Current User (Me) ───────────────────────────────────────────
    path("me/", MeView.as_view(), name="me"),
    path("me/password/", PasswordChangeView.as_view(), name="me-password"),

    # ── Router-registered viewsets (users/) ──────────────────────────
    path("", include(router.urls)),
]
