"""
Address persistence with coordinate resolution.

Addresses belong to a user or a lab through ``(entity_type, entity_id)``.
Coordinates are looked up only when the caller did not supply both; a
failed lookup is logged and the address is stored without them.
"""
from __future__ import annotations

import logging
import uuid
from typing import Optional

from rest_framework.exceptions import NotFound

from labcore.exceptions import Conflict, UpstreamFailure
from labcore.models import Address, EntityType, Role
from labcore.policy import ActorContext
from labcore.services import geocoding

logger = logging.getLogger(__name__)

TEXT_FIELDS = ('address_line1', 'address_line2', 'landmark', 'city', 'state', 'country', 'postal_code')
COORD_FIELDS = ('latitude', 'longitude')


def address_text(fields: dict) -> str:
    """Free-text form used for lookups: line 1, city, state, country."""
    parts = [fields.get(k) or '' for k in ('address_line1', 'city', 'state', 'country')]
    return ', '.join(p.strip() for p in parts if p.strip())


def resolve(text: str) -> tuple[Optional[float], Optional[float]]:
    try:
        result = geocoding.geocode_address(text)
    except geocoding.GeocodingError as e:
        logger.warning('geocoding failed for %r, storing address without coordinates: %s', text, e)
        return None, None
    return result.latitude, result.longitude


def _clean(fields: dict) -> dict:
    cleaned = {}
    for k in TEXT_FIELDS:
        if k in fields:
            cleaned[k] = fields[k] if fields[k] is not None else ''
    for k in COORD_FIELDS:
        if k in fields:
            cleaned[k] = fields[k]
    return cleaned


def _needs_lookup(fields: dict) -> bool:
    return fields.get('latitude') is None or fields.get('longitude') is None


def _lookup_text(address: Address) -> str:
    return address_text({k: getattr(address, k) for k in TEXT_FIELDS})


def serialize_address(address: Optional[Address]) -> Optional[dict[str, object]]:
    if address is None:
        return None
    return {
        'id': str(address.id),
        'addressLine1': address.address_line1,
        'addressLine2': address.address_line2,
        'landmark': address.landmark,
        'city': address.city,
        'state': address.state,
        'country': address.country,
        'postalCode': address.postal_code,
        'latitude': address.latitude,
        'longitude': address.longitude,
        'entityType': address.entity_type,
        'entityId': str(address.entity_id),
    }


def address_for(entity_type: str, entity_id: uuid.UUID) -> Optional[Address]:
    return Address.objects.filter(entity_type=entity_type, entity_id=entity_id).order_by('created_at').first()


def ensure_address_slot(entity_type: str, entity_id: uuid.UUID, role: Optional[str] = None) -> None:
    """Labs and non-client users hold at most one address."""
    if entity_type == EntityType.USER and role == Role.CLIENT:
        return
    if Address.objects.filter(entity_type=entity_type, entity_id=entity_id).exists():
        if entity_type == EntityType.LAB:
            raise Conflict('Lab already has an address')
        raise Conflict('Non-client users can only have one address')


def create_address(entity_type: str, entity_id: uuid.UUID, fields: dict) -> Address:
    data = _clean(fields)
    if _needs_lookup(data):
        data['latitude'], data['longitude'] = resolve(address_text(data))
    return Address.objects.create(entity_type=entity_type, entity_id=entity_id, **data)


def update_address(address: Address, fields: dict) -> Address:
    data = _clean(fields)
    before = _lookup_text(address)
    for k, v in data.items():
        setattr(address, k, v)
    if _needs_lookup(data):
        text = _lookup_text(address)
        moved = text != before
        # landmark, line 2 and postal code never reach the geocoder
        if moved or address.latitude is None or address.longitude is None:
            lat, lng = resolve(text)
            # a failed lookup keeps old coordinates unless the location moved
            if lat is not None or moved:
                address.latitude, address.longitude = lat, lng
    address.save()
    return address


def upsert_address(entity_type: str, entity_id: uuid.UUID, fields: dict) -> Address:
    """Update the owner's address in place, or create it if there is none."""
    existing = address_for(entity_type, entity_id)
    if existing is None:
        return create_address(entity_type, entity_id, fields)
    return update_address(existing, fields)


def delete_for(entity_type: str, entity_id: uuid.UUID) -> int:
    deleted, _ = Address.objects.filter(entity_type=entity_type, entity_id=entity_id).delete()
    return deleted


# ---------------------------------------------------------------------
# /address endpoints: callers manage their own addresses (admins: all)
# ---------------------------------------------------------------------
def _scoped(actor: ActorContext):
    qs = Address.objects.all()
    if not actor.is_admin:
        qs = qs.filter(entity_type=EntityType.USER, entity_id=actor.id)
    return qs


def create_for_actor(actor: ActorContext, fields: dict) -> Address:
    ensure_address_slot(EntityType.USER, actor.id, actor.role)
    return create_address(EntityType.USER, actor.id, fields)


def list_for_actor(actor: ActorContext) -> list[Address]:
    return list(_scoped(actor).order_by('-created_at'))


def get_for_actor(actor: ActorContext, address_id: uuid.UUID) -> Address:
    address = _scoped(actor).filter(id=address_id).first()
    if address is None:
        raise NotFound('Address not found')
    return address


def update_for_actor(actor: ActorContext, address_id: uuid.UUID, fields: dict) -> Address:
    return update_address(get_for_actor(actor, address_id), fields)


def delete_for_actor(actor: ActorContext, address_id: uuid.UUID) -> None:
    get_for_actor(actor, address_id).delete()


def lookup(text: str) -> geocoding.GeocodeResult:
    try:
        return geocoding.geocode_address(text)
    except geocoding.GeocodingError as e:
        logger.warning('geocode lookup failed for %r: %s', text, e)
        raise UpstreamFailure('Failed to geocode address') from e


def reverse_lookup(latitude: float, longitude: float) -> geocoding.GeocodeResult:
    try:
        return geocoding.reverse_geocode(latitude, longitude)
    except geocoding.GeocodingError as e:
        logger.warning('reverse geocode failed for (%s, %s): %s', latitude, longitude, e)
        raise UpstreamFailure('Failed to reverse geocode coordinates') from e
