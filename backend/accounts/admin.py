from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("email", "name", "role", "department", "phone", "is_active")
    search_fields = ("email", "name", "phone")
    list_filter = ("is_active", "role", "department")
    ordering = ("email",)
    filter_horizontal = ("groups", "user_permissions")
    fieldsets = (
        (None, {"fields": ("email", "password")}),
        ("Profile", {"fields": ("name", "phone", "address", "bio",
                                "profile_image", "notification_preferences")}),
        ("Access", {"fields": ("role", "department", "is_active",
                               "is_staff", "is_superuser")}),
        ("Important dates", {"fields": ("last_login", "date_joined")}),
    )
    add_fieldsets = (
        (None, {
            "classes": ("wide",),
            "fields": ("email", "name", "role", "department",
                       "password1", "password2"),
        }),
    )
