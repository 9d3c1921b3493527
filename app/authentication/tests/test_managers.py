"""
Tests for UserManager.

The UserManager provides:
- create_user(): Creates regular users with optional password
- create_superuser(): Creates admin users with elevated privileges

Test organization follows the Given-When-Then pattern.
"""

import pytest

from authentication.models import User


class TestUserManagerCreateUser:
    """Tests for UserManager.create_user() method."""

    def test_creates_user_with_email_and_password(self, db):
        """
        Given valid email and password
        When create_user is called
        Then a user is created with those credentials
        """
        user = User.objects.create_user(
            email="mgr_create_user@example.com", password="SecurePass123!"
        )

        assert user.pk is not None
        assert user.email == "mgr_create_user@example.com"
        assert user.check_password("SecurePass123!") is True

    def test_normalizes_email_domain_to_lowercase(self, db):
        """
        Given an email with uppercase characters in domain
        When create_user is called
        Then the domain portion is normalized to lowercase
        """
        user = User.objects.create_user(
            email="Test.User@EXAMPLE.COM", password="TestPass123!"
        )

        assert user.email == "Test.User@example.com"

    @pytest.mark.parametrize("email", ["", None])
    def test_raises_valueerror_when_email_missing(self, db, email):
        """
        Given an empty or missing email
        When create_user is called
        Then a ValueError is raised with descriptive message
        """
        with pytest.raises(ValueError) as exc_info:
            User.objects.create_user(email=email, password="TestPass123!")

        assert "Email field must be set" in str(exc_info.value)

    def test_creates_user_without_password(self, db):
        """
        Given no password
        When create_user is called
        Then the user gets an unusable password
        """
        user = User.objects.create_user(email="nopass@example.com")

        assert user.has_usable_password() is False

    def test_ignores_profile_name_fields(self, db):
        """
        Given first_name/last_name in extra_fields
        When create_user is called
        Then they are dropped instead of raising on the User model
        """
        user = User.objects.create_user(
            email="names@example.com",
            password="TestPass123!",
            first_name="Ignored",
            last_name="Also",
        )

        assert user.profile.first_name == ""
        assert user.profile.last_name == ""

    def test_sets_default_flags_for_regular_user(self, db):
        user = User.objects.create_user(email="flags@example.com", password="x")

        assert user.is_active is True
        assert user.is_staff is False
        assert user.is_superuser is False


class TestUserManagerCreateSuperuser:
    """Tests for UserManager.create_superuser() method."""

    def test_creates_superuser_with_correct_flags(self, db):
        superuser = User.objects.create_superuser(
            email="root@example.com", password="AdminPass123!"
        )

        assert superuser.is_staff is True
        assert superuser.is_superuser is True

    def test_raises_valueerror_when_is_staff_is_false(self, db):
        with pytest.raises(ValueError, match="is_staff=True"):
            User.objects.create_superuser(
                email="bad@example.com", password="x", is_staff=False
            )

    def test_raises_valueerror_when_is_superuser_is_false(self, db):
        with pytest.raises(ValueError, match="is_superuser=True"):
            User.objects.create_superuser(
                email="bad@example.com", password="x", is_superuser=False
            )
