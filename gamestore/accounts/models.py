from decimal import Decimal

from django.core.validators import MinLengthValidator, RegexValidator
from django.db import models
from django.utils import timezone
from django.contrib.auth.models import (
    AbstractBaseUser,
    BaseUserManager,
    PermissionsMixin,
)

username_validator = RegexValidator(
    r"^[a-zA-Z0-9_]+$", "Username may contain only letters, digits and underscores."
)


class UserManager(BaseUserManager):
    def create_user(self, username, password=None, **extra_fields):
        if not username:
            raise ValueError("Username is required.")
        user = self.model(username=username.strip(), **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, username, password, **extra_fields):
        extra_fields.setdefault("role", "admin")
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        return self.create_user(username, password, **extra_fields)


class BaseModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class User(AbstractBaseUser, PermissionsMixin, BaseModel):
    ROLE_CHOICES = (
        ("user", "User"),
        ("admin", "Admin"),
    )

    id = models.BigAutoField(primary_key=True)
    username = models.CharField(
        max_length=30,
        unique=True,
        validators=[MinLengthValidator(3), username_validator],
    )
    # mutated only through F() updates in purchases.recorder / topups.verifier
    point = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default="user")
    is_staff = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    objects = UserManager()

    USERNAME_FIELD = "username"
    REQUIRED_FIELDS = []

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=models.Q(point__gte=0), name="user_point_non_negative"
            ),
        ]

    @property
    def is_admin(self):
        return self.role == "admin"

    def __str__(self):
        return f"{self.username} ({self.role})"


class LoginAttempt(models.Model):
    ip = models.GenericIPAddressField(unique=True)
    count = models.PositiveIntegerField(default=0)
    last_attempt = models.DateTimeField(default=timezone.now)

    def __str__(self):
        return f"{self.ip} x{self.count}"


class BannedIP(models.Model):
    ip = models.GenericIPAddressField(unique=True)
    reason = models.CharField(max_length=200, default="Too many login attempts")
    banned_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.ip} ({self.reason})"


class RegisterAttempt(models.Model):
    ip = models.GenericIPAddressField(unique=True)
    count = models.PositiveIntegerField(default=0)  # lifetime
    window_count = models.PositiveIntegerField(default=0)
    window_started = models.DateTimeField()
