"""
Manager for marketplace accounts.

Buyers and sellers are the same kind of account, identified by email.
Accounts created without a password (seeded sellers, imported users) get an
unusable one and can only authenticate once a password is set.
"""

from django.contrib.auth.models import BaseUserManager


class UserManager(BaseUserManager):
    """
    Creates marketplace accounts keyed by normalized email.

    Names shown next to chat messages live on Profile, which the post_save
    signal creates; name kwargs passed here are dropped.
    """

    def create_user(self, email, password=None, **extra_fields):
        """
        Create a buyer/seller account.

        Args:
            email: Login email, normalized before saving
            password: Raw password; omitted means an unusable password
            **extra_fields: Other User fields (is_active, etc.)

        Raises:
            ValueError: If email is not provided
        """
        if not email:
            raise ValueError("The Email field must be set")

        email = self.normalize_email(email)

        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)

        # Names go to Profile
        extra_fields.pop("first_name", None)
        extra_fields.pop("last_name", None)

        user = self.model(email=email, **extra_fields)

        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()

        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        """
        Create a staff account for moderating listings and conversations.

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
