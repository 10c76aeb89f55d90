from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError

from .models import User, BannedIP, username_validator


class RegisterSerializer(serializers.Serializer):
    username = serializers.CharField(min_length=3, max_length=30, validators=[username_validator])
    password = serializers.CharField(min_length=6, write_only=True)

    def validate_username(self, value):
        if User.objects.filter(username=value).exists():
            raise serializers.ValidationError("User already exists.")
        return value

    def validate_password(self, value):
        try:
            validate_password(value)
        except DjangoValidationError as e:
            raise serializers.ValidationError(list(e.messages))
        return value

    def create(self, validated_data):
        return User.objects.create_user(
            validated_data["username"], validated_data["password"], role="user"
        )


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField(write_only=True, trim_whitespace=True)
    recaptcha_token = serializers.CharField(required=False, allow_blank=True)


class TokenRefreshSerializer(serializers.Serializer):
    refresh_token = serializers.CharField()


# user api ----------------------------------------------------------
class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "point",
            "role",
            "created_at",
            "updated_at",
        ]


class AdminUserUpdateSerializer(serializers.ModelSerializer):
    """Admin edit of a user. ``point`` is read-only here, balances only move
    through purchases and topups."""

    password = serializers.CharField(
        write_only=True, required=False, allow_blank=True, min_length=6
    )

    class Meta:
        model = User
        fields = ["id", "username", "password", "role", "point"]
        read_only_fields = ["id", "point"]

    def update(self, instance, validated_data):
        password = validated_data.pop("password", "")
        for field, value in validated_data.items():
            setattr(instance, field, value)
        if password and password.strip():
            instance.set_password(password.strip())
        instance.save()
        return instance


class BannedIPSerializer(serializers.ModelSerializer):
    class Meta:
        model = BannedIP
        fields = ["id", "ip", "reason", "banned_at"]
