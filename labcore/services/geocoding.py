"""
OpenCage geocoding client.

Forward (address text to coordinates) and reverse (coordinates to a
formatted address) lookups.  Every call is bounded by
``settings.GEOCODER_TIMEOUT``; any transport or provider problem is
raised as :class:`GeocodingError` so callers can decide whether to
degrade or surface it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import requests
from django.conf import settings


class GeocodingError(RuntimeError):
    pass


@dataclass
class GeocodeResult:
    latitude: float
    longitude: float
    formatted: str = ''
    confidence: Optional[int] = None

    def as_dict(self) -> dict[str, object]:
        return {
            'latitude': self.latitude,
            'longitude': self.longitude,
            'formatted': self.formatted,
            'confidence': self.confidence,
        }


def _query(q: str) -> dict:
    if not settings.OPENCAGE_API_KEY:
        raise GeocodingError('Geocoding is not configured on server')
    params = {'q': q, 'key': settings.OPENCAGE_API_KEY, 'limit': 1, 'no_annotations': 1}
    try:
        r = requests.get(settings.OPENCAGE_BASE_URL, params=params, timeout=settings.GEOCODER_TIMEOUT)
        r.raise_for_status()
        data = r.json()
    except requests.RequestException as e:
        raise GeocodingError(f'geocoder request failed: {e}') from e
    except ValueError as e:
        raise GeocodingError('geocoder returned invalid JSON') from e
    if not isinstance(data, dict):
        raise GeocodingError('geocoder returned an unexpected body')
    status = data.get('status')
    if not isinstance(status, dict):
        status = {}
    if status.get('code') not in (None, 200):
        raise GeocodingError(f"OpenCage error {status.get('code')}: {status.get('message')}")
    return data


def _first_result(data: dict, q: str) -> GeocodeResult:
    results = data.get('results') or []
    if not results:
        raise GeocodingError(f'no results for {q!r}')
    try:
        top = results[0]
        geometry = top.get('geometry') or {}
        return GeocodeResult(
            latitude=float(geometry['lat']),
            longitude=float(geometry['lng']),
            formatted=top.get('formatted') or '',
            confidence=top.get('confidence'),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise GeocodingError(f'Invalid response from OpenCage: {e!r}') from e


def geocode_address(address: str) -> GeocodeResult:
    address = (address or '').strip()
    if not address:
        raise GeocodingError('empty address')
    return _first_result(_query(address), address)


def reverse_geocode(latitude: float, longitude: float) -> GeocodeResult:
    q = f'{latitude}+{longitude}'
    result = _first_result(_query(q), q)
    # keep the caller's coordinates; the provider snaps to the matched feature
    result.latitude = latitude
    result.longitude = longitude
    return result
