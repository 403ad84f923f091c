from rest_framework import serializers

from labcore.models import TestStatus
from .common import CleanCharField


class OrderDetailSerializer(serializers.Serializer):
    catalogId = serializers.UUIDField(source='catalog_id')
    remark = CleanCharField(required=False, allow_blank=True, max_length=1000)


class OrderCreateSerializer(serializers.Serializer):
    labId = serializers.UUIDField(source='lab_id')
    details = OrderDetailSerializer(many=True, allow_empty=False)


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=TestStatus.choices)
