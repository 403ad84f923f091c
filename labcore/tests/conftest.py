import pytest
from django.core.cache import cache

from labcore.models import Role
from labcore.services import geocoding

from .factories import FakeGeocoder, client_for, make_user


@pytest.fixture(autouse=True)
def _isolated_settings(settings):
    # throttle counters live in the cache; never reach the real geocoder
    cache.clear()
    settings.OPENCAGE_API_KEY = ''
    settings.ORDER_STATUS_STRICT = False
    settings.FRONTEND_URL = 'http://frontend.test'
    yield
    cache.clear()


@pytest.fixture
def geocoder(monkeypatch):
    fake = FakeGeocoder()
    monkeypatch.setattr(geocoding, 'geocode_address', fake)
    return fake


@pytest.fixture
def admin_user(db):
    return make_user(Role.ADMIN)


@pytest.fixture
def manager(db):
    return make_user(Role.MANAGER)


@pytest.fixture
def staff(db, manager):
    return make_user(Role.STAFF, managed_by=manager, created_by=manager)


@pytest.fixture
def client_user(db):
    return make_user(Role.CLIENT)


@pytest.fixture
def admin_api(admin_user):
    return client_for(admin_user)


@pytest.fixture
def manager_api(manager):
    return client_for(manager)
