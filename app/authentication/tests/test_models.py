"""
Tests for authentication models, manager and signals.

Test Organization:
    - Each model has its own test class
    - Tests use descriptive names following the pattern: test_<scenario>_<expected_outcome>
"""

import uuid

import pytest
from django.db import IntegrityError

from authentication.models import Profile, User
from authentication.tests.factories import ProfileFactory, UserFactory


# =============================================================================
# User Model Tests
# =============================================================================


@pytest.mark.django_db
class TestUserModel:
    def test_primary_key_is_uuid(self, user):
        assert isinstance(user.pk, uuid.UUID)

    def test_str_returns_email(self, user):
        assert str(user) == user.email

    def test_email_is_unique(self, user):
        with pytest.raises(IntegrityError):
            User.objects.create_user(email=user.email, password="x")

    def test_get_full_name_uses_profile(self, user):
        assert user.get_full_name() == "Ada Lovelace"

    def test_get_full_name_falls_back_to_email(self):
        user = User.objects.create_user(email="noname@campus.edu")

        assert user.get_full_name() == "noname@campus.edu"

    def test_get_short_name_falls_back_to_local_part(self):
        user = User.objects.create_user(email="noname@campus.edu")

        assert user.get_short_name() == "noname"


# =============================================================================
# UserManager Tests
# =============================================================================


@pytest.mark.django_db
class TestUserManager:
    def test_create_user_requires_email(self):
        with pytest.raises(ValueError):
            User.objects.create_user(email="")

    def test_create_user_normalizes_email_domain(self):
        user = User.objects.create_user(email="Someone@CAMPUS.EDU")

        assert user.email == "Someone@campus.edu"

    def test_create_user_without_password_is_unusable(self):
        user = User.objects.create_user(email="nopass@campus.edu")

        assert not user.has_usable_password()

    def test_create_user_writes_name_parts_to_profile(self):
        user = User.objects.create_user(
            email="grace@campus.edu",
            first_name="Grace",
            last_name="Hopper",
            avatar_url="https://cdn.campus.edu/a.png",
        )

        profile = Profile.objects.get(user=user)
        assert profile.first_name == "Grace"
        assert profile.last_name == "Hopper"
        assert profile.avatar_url == "https://cdn.campus.edu/a.png"

    def test_create_superuser_sets_flags(self, superuser):
        assert superuser.is_staff
        assert superuser.is_superuser

    def test_create_superuser_rejects_is_staff_false(self):
        with pytest.raises(ValueError):
            User.objects.create_superuser(email="bad@campus.edu", is_staff=False)


# =============================================================================
# Profile Model Tests
# =============================================================================


@pytest.mark.django_db
class TestProfileModel:
    def test_profile_created_by_signal(self):
        user = User.objects.create_user(email="signal@campus.edu")

        assert Profile.objects.filter(user=user).exists()

    def test_full_name_strips_missing_parts(self):
        user = User.objects.create_user(email="first@campus.edu", first_name="Only")

        assert user.profile.full_name == "Only"

    def test_str_falls_back_to_user(self):
        user = User.objects.create_user(email="blank@campus.edu")

        assert str(user.profile) == "blank@campus.edu"

    def test_factory_updates_existing_profile(self, user):
        profile = ProfileFactory(user=user)

        assert profile.pk == user.pk
        assert Profile.objects.filter(user=user).count() == 1
