from rest_framework import serializers

from .common import AddressSerializer, CleanCharField, money_field


class LabTestEntrySerializer(serializers.Serializer):
    catalogId = serializers.UUIDField(source='catalog_id')
    price = money_field()


class LabCreateSerializer(serializers.Serializer):
    name = CleanCharField(max_length=255)
    phoneNumber = serializers.RegexField(
        r'^\d{10}$', source='phone_number', error_messages={'invalid': 'Phone number must be 10 digits'}
    )
    email = serializers.EmailField()
    address = AddressSerializer()
    managerIds = serializers.ListField(child=serializers.UUIDField(), source='manager_ids', allow_empty=False)
    labTests = serializers.ListField(child=LabTestEntrySerializer(), source='lab_tests', required=False)

    def validate_labTests(self, v):
        ids = [entry['catalog_id'] for entry in v]
        if len(ids) != len(set(ids)):
            raise serializers.ValidationError('Each catalog entry can be listed once')
        return v


class LabUpdateSerializer(serializers.Serializer):
    name = CleanCharField(max_length=255, required=False)
    phoneNumber = serializers.RegexField(
        r'^\d{10}$', source='phone_number', required=False,
        error_messages={'invalid': 'Phone number must be 10 digits'},
    )
    email = serializers.EmailField(required=False)
    address = AddressSerializer(required=False)
    managerIds = serializers.ListField(
        child=serializers.UUIDField(), source='manager_ids', required=False, allow_empty=False
    )


class AddManagerSerializer(serializers.Serializer):
    userId = serializers.UUIDField(source='user_id')
