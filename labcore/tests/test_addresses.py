import uuid

import pytest
import requests
from django.urls import reverse

from labcore.exceptions import Conflict
from labcore.models import Address, EntityType, Role
from labcore.services import addresses, geocoding

from .factories import ADDRESS, client_for, make_user

# captured before any test swaps it out
real_geocode_address = geocoding.geocode_address


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f'{self.status_code} error')

    def json(self):
        return self.payload


OPENCAGE_HIT = {
    'status': {'code': 200, 'message': 'OK'},
    'results': [{
        'geometry': {'lat': 19.076, 'lng': 72.8777},
        'formatted': 'Mumbai, Maharashtra, India',
        'confidence': 5,
    }],
}


@pytest.mark.django_db
def test_address_gets_coordinates(client_user, geocoder):
    resp = client_for(client_user).post(reverse('address'), ADDRESS, format='json')
    assert resp.status_code == 201
    data = resp.json()['data']
    assert (data['latitude'], data['longitude']) == (pytest.approx(51.5074), pytest.approx(-0.1278))
    assert data['entityId'] == str(client_user.id)


@pytest.mark.django_db
def test_geocoding_failure_still_stores_address(client_user, geocoder):
    geocoder.fail = True
    resp = client_for(client_user).post(reverse('address'), ADDRESS, format='json')
    assert resp.status_code == 201
    assert resp.json()['data']['latitude'] is None
    assert Address.objects.filter(entity_id=client_user.id).count() == 1


@pytest.mark.django_db
@pytest.mark.parametrize('body', [None, [], {'results': [{'geometry': {'lat': None, 'lng': None}}]}])
def test_malformed_geocoder_body_still_stores_address(client_user, settings, monkeypatch, body):
    settings.OPENCAGE_API_KEY = 'k-123'
    monkeypatch.setattr(geocoding.requests, 'get', lambda url, params=None, timeout=None: FakeResponse(body))
    resp = client_for(client_user).post(reverse('address'), ADDRESS, format='json')
    assert resp.status_code == 201
    assert resp.json()['data']['latitude'] is None
    assert Address.objects.filter(entity_id=client_user.id).count() == 1


@pytest.mark.django_db
def test_latitude_without_longitude_is_rejected(client_user, geocoder):
    payload = dict(ADDRESS, latitude=12.5)
    resp = client_for(client_user).post(reverse('address'), payload, format='json')
    assert resp.status_code == 400
    assert 'coordinates' in resp.json()['error']['message']
    assert not Address.objects.filter(entity_id=client_user.id).exists()


@pytest.mark.django_db
def test_supplied_coordinates_skip_lookup(client_user, geocoder):
    payload = dict(ADDRESS, latitude=12.5, longitude=77.25)
    resp = client_for(client_user).post(reverse('address'), payload, format='json')
    assert resp.json()['data']['latitude'] == 12.5
    assert geocoder.calls == []


@pytest.mark.django_db
def test_clients_may_hold_several_addresses(client_user, geocoder):
    api = client_for(client_user)
    assert api.post(reverse('address'), ADDRESS, format='json').status_code == 201
    assert api.post(reverse('address'), dict(ADDRESS, city='Leeds'), format='json').status_code == 201
    assert len(api.get(reverse('address')).json()['data']) == 2


@pytest.mark.django_db
def test_non_client_holds_one_address(staff, geocoder):
    api = client_for(staff)
    assert api.post(reverse('address'), ADDRESS, format='json').status_code == 201
    resp = api.post(reverse('address'), ADDRESS, format='json')
    assert resp.status_code == 409
    assert resp.json()['error']['message'] == 'Non-client users can only have one address'


@pytest.mark.django_db
def test_lab_address_slot():
    lab_id = uuid.uuid4()
    addresses.create_address(EntityType.LAB, lab_id, {'address_line1': '1 Lab Road', 'city': 'Pune'})
    with pytest.raises(Conflict):
        addresses.ensure_address_slot(EntityType.LAB, lab_id)


@pytest.mark.django_db
def test_addresses_are_scoped_to_their_owner(client_user, admin_api, geocoder):
    created = client_for(client_user).post(reverse('address'), ADDRESS, format='json').json()['data']
    url = reverse('address_detail', args=[created['id']])

    stranger = client_for(make_user(Role.CLIENT))
    assert stranger.get(url).status_code == 404
    assert stranger.delete(url).status_code == 404
    assert admin_api.get(url).status_code == 200


@pytest.mark.django_db
def test_failed_relookup_after_text_change_clears_coordinates(client_user, geocoder):
    api = client_for(client_user)
    created = api.post(reverse('address'), ADDRESS, format='json').json()['data']
    geocoder.fail = True
    resp = api.patch(reverse('address_detail', args=[created['id']]), {'city': 'Leeds'}, format='json')
    assert resp.status_code == 200
    assert resp.json()['data']['latitude'] is None


@pytest.mark.django_db
def test_failed_relookup_without_text_change_keeps_coordinates(client_user, geocoder):
    api = client_for(client_user)
    created = api.post(reverse('address'), ADDRESS, format='json').json()['data']
    geocoder.fail = True
    resp = api.patch(reverse('address_detail', args=[created['id']]), {}, format='json')
    assert resp.status_code == 200
    assert resp.json()['data']['latitude'] == pytest.approx(51.5074)


@pytest.mark.django_db
def test_landmark_change_keeps_coordinates(client_user, geocoder):
    api = client_for(client_user)
    created = api.post(reverse('address'), ADDRESS, format='json').json()['data']
    geocoder.fail = True
    resp = api.patch(reverse('address_detail', args=[created['id']]), {'landmark': 'Next to the station'}, format='json')
    assert resp.status_code == 200
    data = resp.json()['data']
    assert data['landmark'] == 'Next to the station'
    assert (data['latitude'], data['longitude']) == (pytest.approx(51.5074), pytest.approx(-0.1278))
    assert len(geocoder.calls) == 1


@pytest.mark.django_db
def test_update_with_explicit_coordinates(client_user, geocoder):
    api = client_for(client_user)
    created = api.post(reverse('address'), ADDRESS, format='json').json()['data']
    resp = api.patch(reverse('address_detail', args=[created['id']]),
                     {'latitude': 1.5, 'longitude': 2.5}, format='json')
    assert (resp.json()['data']['latitude'], resp.json()['data']['longitude']) == (1.5, 2.5)
    assert len(geocoder.calls) == 1


@pytest.mark.django_db
def test_delete_own_address(client_user, geocoder):
    api = client_for(client_user)
    created = api.post(reverse('address'), ADDRESS, format='json').json()['data']
    assert api.delete(reverse('address_detail', args=[created['id']])).status_code == 200
    assert not Address.objects.filter(pk=created['id']).exists()


@pytest.mark.django_db
def test_geocode_endpoint(client_user, geocoder):
    api = client_for(client_user)
    resp = api.get(reverse('geocode', args=['Baker Street London']))
    assert resp.status_code == 200
    assert resp.json()['data']['formatted'] == 'London, UK'

    geocoder.fail = True
    resp = api.get(reverse('geocode', args=['Baker Street London']))
    assert resp.status_code == 502
    assert resp.json()['error']['code'] == 'upstream_failure'


@pytest.mark.django_db
def test_reverse_geocode_endpoint(client_user, monkeypatch):
    api = client_for(client_user)
    assert api.get(reverse('reverse_geocode'), {'lat': 10}).status_code == 400

    monkeypatch.setattr(geocoding, 'reverse_geocode',
                        lambda lat, lng: geocoding.GeocodeResult(lat, lng, 'Somewhere'))
    resp = api.get(reverse('reverse_geocode'), {'lat': 10, 'lng': 20})
    assert resp.status_code == 200
    assert resp.json()['data'] == {'latitude': 10.0, 'longitude': 20.0, 'formatted': 'Somewhere', 'confidence': None}


# ---------------------------------------------------------------------
# OpenCage client
# ---------------------------------------------------------------------
def test_opencage_request(settings, monkeypatch):
    settings.OPENCAGE_API_KEY = 'k-123'
    settings.GEOCODER_TIMEOUT = 3
    seen = {}

    def fake_get(url, params=None, timeout=None):
        seen.update(url=url, params=params, timeout=timeout)
        return FakeResponse(OPENCAGE_HIT)

    monkeypatch.setattr(geocoding.requests, 'get', fake_get)
    result = real_geocode_address('Marine Drive, Mumbai')
    assert (result.latitude, result.longitude) == (19.076, 72.8777)
    assert result.confidence == 5
    assert seen['url'] == settings.OPENCAGE_BASE_URL
    assert seen['params']['q'] == 'Marine Drive, Mumbai'
    assert seen['params']['key'] == 'k-123'
    assert seen['timeout'] == 3


def test_opencage_without_key():
    with pytest.raises(geocoding.GeocodingError):
        real_geocode_address('anywhere')


@pytest.mark.parametrize('outcome', [
    requests.Timeout('slow'),
    FakeResponse({}, status_code=503),
    FakeResponse({'status': {'code': 200}, 'results': []}),
    FakeResponse({'status': {'code': 402, 'message': 'quota exceeded'}, 'results': []}),
    FakeResponse(None),
    FakeResponse([]),
    FakeResponse({'status': {'code': 200}, 'results': [{'geometry': {'lat': None, 'lng': 72.8}}]}),
    FakeResponse({'status': {'code': 200}, 'results': [{'formatted': 'no geometry'}]}),
    FakeResponse({'status': {'code': 200}, 'results': ['Mumbai']}),
])
def test_opencage_failures(settings, monkeypatch, outcome):
    settings.OPENCAGE_API_KEY = 'k-123'

    def fake_get(url, params=None, timeout=None):
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    monkeypatch.setattr(geocoding.requests, 'get', fake_get)
    with pytest.raises(geocoding.GeocodingError):
        real_geocode_address('Nowhere Lane')


def test_reverse_geocode_keeps_requested_point(settings, monkeypatch):
    settings.OPENCAGE_API_KEY = 'k-123'
    monkeypatch.setattr(geocoding.requests, 'get', lambda url, params=None, timeout=None: FakeResponse(OPENCAGE_HIT))
    result = geocoding.reverse_geocode(19.0, 72.9)
    assert (result.latitude, result.longitude) == (19.0, 72.9)
    assert result.formatted == 'Mumbai, Maharashtra, India'
