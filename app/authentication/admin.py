"""
Django admin configuration for authentication models.

This module registers User and Profile with the Django admin site.

Related files:
    - models.py: Model definitions
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from authentication.models import Profile, User


class ProfileInline(admin.StackedInline):
    """Edit display data alongside the user record."""

    model = Profile
    can_delete = False
    fields = ("first_name", "last_name", "avatar_url")


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Admin configuration for User model.

    Customized for email-based authentication; there is no username.
    """

    inlines = (ProfileInline,)

    list_display = (
        "email",
        "is_active",
        "is_staff",
        "date_joined",
    )
    list_filter = (
        "is_active",
        "is_staff",
        "is_superuser",
    )
    search_fields = ("email", "profile__first_name", "profile__last_name")
    ordering = ("-date_joined",)

    fieldsets = (
        (None, {"fields": ("id", "email", "password")}),
        (
            "Status",
            {"fields": ("is_active", "is_staff", "is_superuser")},
        ),
        (
            "Permissions",
            {"fields": ("groups", "user_permissions")},
        ),
        (
            "Important dates",
            {"fields": ("date_joined", "last_login")},
        ),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "password1", "password2"),
            },
        ),
    )

    readonly_fields = ("id", "date_joined", "last_login")


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "first_name", "last_name", "created_at")
    search_fields = ("user__email", "first_name", "last_name")
    ordering = ("-created_at",)
    raw_id_fields = ("user",)
    readonly_fields = ("created_at", "updated_at")
