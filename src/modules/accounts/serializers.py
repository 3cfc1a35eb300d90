"""Account DRF serializers for API input/output."""

from __future__ import annotations

from rest_framework import serializers

from modules.accounts.constants import PASSWORD_MIN_LENGTH
from modules.accounts.models import User


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "name", "email", "role", "is_active", "created_at"]
        read_only_fields = fields


class RegisterSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=120)
    email = serializers.EmailField()
    password = serializers.CharField(
        min_length=PASSWORD_MIN_LENGTH,
        write_only=True,
        trim_whitespace=False,
    )


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)


class AuthTokenSerializer(serializers.Serializer):
    """Shape of the register/login response payload."""

    access_token = serializers.CharField()
    refresh_token = serializers.CharField()
    token_type = serializers.CharField()
    user_id = serializers.UUIDField()
    email = serializers.EmailField()
    name = serializers.CharField()
    role = serializers.CharField()
