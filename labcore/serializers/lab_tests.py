from rest_framework import serializers

from .common import money_field


class LabTestSerializer(serializers.Serializer):
    labId = serializers.UUIDField(source='lab_id')
    catalogId = serializers.UUIDField(source='catalog_id')
    price = money_field()
