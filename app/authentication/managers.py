"""
Custom user manager for email-based authentication.

Related files:
    - models.py: User model that uses this manager
    - signals.py: Creates the Profile this manager fills in

Security:
    - Passwords are automatically hashed via set_password()
    - Email addresses are normalized (lowercase domain)
"""

from django.contrib.auth.models import BaseUserManager


class UserManager(BaseUserManager):
    """
    Custom manager for User model with email-based authentication.

    Name parts passed to create_user() are written to the Profile
    (auto-created by the post_save signal), not to the User row.
    """

    def create_user(self, email, password=None, **extra_fields):
        """
        Create and save a regular user with the given email and password.

        Args:
            email: User's email address (required)
            password: User's password (optional; unusable if omitted)
            **extra_fields: User fields, plus optional first_name,
                last_name and avatar_url for the profile

        Returns:
            User: The created user instance

        Raises:
            ValueError: If email is not provided
        """
        if not email:
            raise ValueError("The Email field must be set")

        email = self.normalize_email(email)

        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)

        profile_fields = {
            name: extra_fields.pop(name)
            for name in ("first_name", "last_name", "avatar_url")
            if name in extra_fields
        }

        user = self.model(email=email, **extra_fields)

        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()

        user.save(using=self._db)

        if profile_fields:
            profile = user.profile
            for name, value in profile_fields.items():
                setattr(profile, name, value)
            profile.save(update_fields=[*profile_fields, "updated_at"])

        return user

    def create_superuser(self, email, password=None, **extra_fields):
        """
        Create and save a superuser with the given email and password.

        Raises:
            ValueError: If is_staff or is_superuser is not True
        """
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self.create_user(email, password, **extra_fields)
