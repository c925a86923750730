"""
Authentication models.

This module defines the user identity models referenced by messaging:
- User: Custom user model with email-based authentication (slim, auth-focused)
- Profile: Display data (name parts, avatar) kept apart from auth fields

Related files:
    - managers.py: Custom user manager for email-based creation
    - signals.py: Auto-create profile on user creation

Note:
    Identity is immutable once created; profile fields may be updated.
    Avatars are stored on an external CDN, so only the URL is kept here.
"""

from django.conf import settings
from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models

from authentication.managers import UserManager
from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class User(UUIDPrimaryKeyMixin, AbstractBaseUser, PermissionsMixin):
    """
    Custom User model using email as the login identifier.

    The UUID primary key is the identifier used everywhere in messaging
    (sender/recipient ids, realtime group names, JWT user_id claim).

    Fields:
        id: UUID primary key
        email: Unique, used for login
        is_active: Inactive users cannot send or receive messages
        is_staff: Whether the user can access Django admin
        date_joined: When the user account was created
        updated_at: When the user record was last modified

    Usage:
        user = User.objects.create_user(
            email="student@campus.edu",
            password="securepassword",
            first_name="Ada",
            last_name="Lovelace",
        )
    """

    email = models.EmailField(
        unique=True,
        db_index=True,
        max_length=254,
        help_text="User's email address (login identifier)",
    )

    is_active = models.BooleanField(
        default=True,
        help_text="Whether this user account is active. Deselect instead of deleting.",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Whether the user can access the admin site.",
    )

    date_joined = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user account was created",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="When the user record was last modified",
    )

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["-date_joined"]

    def __str__(self):
        """Return the user's email as string representation."""
        return self.email

    def get_full_name(self):
        """
        Return the user's full name from profile.

        Returns:
            str: Full name from profile, or email if no profile/name set.
        """
        try:
            return self.profile.full_name or self.email
        except Profile.DoesNotExist:
            return self.email

    def get_short_name(self):
        """Return first name from profile, or the email local part."""
        try:
            return self.profile.first_name or self.email.split("@")[0]
        except Profile.DoesNotExist:
            return self.email.split("@")[0]


class Profile(BaseModel):
    """
    Display data for a user.

    Fields:
        user: OneToOne link to User (also serves as primary key)
        first_name: User's first name
        last_name: User's last name
        avatar_url: Optional CDN URL of the user's avatar

    Note:
        Profile is automatically created via signals when a User is created.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
        primary_key=True,
        help_text="User this profile belongs to",
    )

    first_name = models.CharField(
        max_length=150,
        blank=True,
        help_text="User's first name",
    )
    last_name = models.CharField(
        max_length=150,
        blank=True,
        help_text="User's last name",
    )

    avatar_url = models.URLField(
        max_length=500,
        blank=True,
        default="",
        help_text="CDN URL of the user's avatar image",
    )

    class Meta:
        db_table = "authentication_profile"
        verbose_name = "profile"
        verbose_name_plural = "profiles"

    def __str__(self):
        """Return full name or user email."""
        return self.full_name or str(self.user)

    @property
    def full_name(self):
        """Return full name or empty string."""
        return f"{self.first_name} {self.last_name}".strip()
