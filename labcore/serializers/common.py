import html
from decimal import Decimal

import bleach
from rest_framework import serializers


def clean_text(v):
    # bleach escapes what it keeps; store plain text and escape on render
    return html.unescape(bleach.clean((v or '').strip(), tags=[], strip=True))


class CleanCharField(serializers.CharField):
    """CharField that strips any markup from the submitted value."""
    def to_internal_value(self, data):
        return clean_text(super().to_internal_value(data))


def money_field(**kwargs):
    return serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'), **kwargs)


class PageQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    pageSize = serializers.IntegerField(required=False, min_value=1, max_value=100, default=10)


class AddressSerializer(serializers.Serializer):
    addressLine1 = CleanCharField(source='address_line1', max_length=255)
    addressLine2 = CleanCharField(source='address_line2', max_length=255, required=False, allow_blank=True)
    landmark = CleanCharField(max_length=255, required=False, allow_blank=True)
    city = CleanCharField(max_length=128)
    state = CleanCharField(max_length=128, required=False, allow_blank=True)
    country = CleanCharField(max_length=128, required=False, allow_blank=True)
    postalCode = CleanCharField(source='postal_code', max_length=20, required=False, allow_blank=True)
    latitude = serializers.FloatField(required=False, allow_null=True, min_value=-90, max_value=90)
    longitude = serializers.FloatField(required=False, allow_null=True, min_value=-180, max_value=180)

    def validate(self, attrs):
        if (attrs.get('latitude') is None) != (attrs.get('longitude') is None):
            raise serializers.ValidationError({'coordinates': ['Latitude and longitude must be given together']})
        return attrs


class RegistrationAddressSerializer(AddressSerializer):
    """Every postal field is mandatory when an address is given at registration."""
    MANDATORY = ('addressLine2', 'landmark', 'state', 'country', 'postalCode')

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for name in self.MANDATORY:
            self.fields[name].required = True
            self.fields[name].allow_blank = False


class CoordinatesQuerySerializer(serializers.Serializer):
    lat = serializers.FloatField(min_value=-90, max_value=90)
    lng = serializers.FloatField(min_value=-180, max_value=180)
