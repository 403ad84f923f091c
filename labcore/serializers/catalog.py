from rest_framework import serializers

from .common import CleanCharField, money_field


class TestCatalogSerializer(serializers.Serializer):
    testName = CleanCharField(source='test_name', max_length=255)
    description = CleanCharField(required=False, allow_blank=True)
    price = money_field()
