from rest_framework import serializers

from labcore.models import Role
from .common import CleanCharField, RegistrationAddressSerializer


class RegisterSerializer(serializers.Serializer):
    name = CleanCharField(max_length=255)
    email = serializers.EmailField()
    password = serializers.CharField(min_length=8, write_only=True)
    # Admin accounts are never self-registered
    role = serializers.ChoiceField(
        choices=[Role.MANAGER, Role.STAFF, Role.CLIENT], required=False, default=Role.CLIENT
    )
    address = RegistrationAddressSerializer(required=False)

    def validate_name(self, v):
        if len(v) < 2:
            raise serializers.ValidationError('Name must be at least 2 characters')
        return v


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField()


class TokenSerializer(serializers.Serializer):
    token = serializers.CharField(max_length=128)


class EmailSerializer(serializers.Serializer):
    email = serializers.EmailField()


class ResetPasswordSerializer(serializers.Serializer):
    token = serializers.CharField(max_length=128)
    newPassword = serializers.CharField(source='new_password', min_length=8, write_only=True)


class ChangePasswordSerializer(serializers.Serializer):
    currentPassword = serializers.CharField(source='current_password', write_only=True)
    newPassword = serializers.CharField(source='new_password', min_length=8, write_only=True)
