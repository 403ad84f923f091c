from rest_framework import serializers

from labcore.models import Role
from .common import AddressSerializer, CleanCharField


class UserCreateSerializer(serializers.Serializer):
    name = CleanCharField(max_length=255)
    email = serializers.EmailField()
    # generated and mailed to the new user when omitted
    password = serializers.CharField(min_length=8, required=False, write_only=True)
    role = serializers.ChoiceField(choices=Role.choices)
    labIds = serializers.ListField(
        child=serializers.UUIDField(), source='lab_ids', required=False, allow_empty=True
    )
    address = AddressSerializer(required=False)


class UserUpdateSerializer(serializers.Serializer):
    name = CleanCharField(max_length=255, required=False)
    email = serializers.EmailField(required=False)
    password = serializers.CharField(min_length=8, required=False, write_only=True)
    labIds = serializers.ListField(
        child=serializers.UUIDField(), source='lab_ids', required=False, allow_empty=True
    )
    address = AddressSerializer(required=False)

    def validate(self, attrs):
        if 'role' in self.initial_data:
            raise serializers.ValidationError({'role': ['Role cannot be changed']})
        return attrs
