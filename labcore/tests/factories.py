"""Object builders shared by the test modules."""
import itertools
from decimal import Decimal

from rest_framework.test import APIClient

from labcore.models import Lab, LabManager, LabTest, TestCatalog, User
from labcore.services import geocoding

PASSWORD = 'Labs-Secret-2024'

ADDRESS = {
    'addressLine1': '12 Baker Street',
    'addressLine2': 'Flat 3',
    'landmark': 'Opposite the park',
    'city': 'London',
    'state': 'Greater London',
    'country': 'United Kingdom',
    'postalCode': 'NW1 6XE',
}

_seq = itertools.count(1)


class FakeGeocoder:
    def __init__(self):
        self.calls = []
        self.result = geocoding.GeocodeResult(latitude=51.5074, longitude=-0.1278, formatted='London, UK')
        self.fail = False

    def __call__(self, text):
        self.calls.append(text)
        if self.fail:
            raise geocoding.GeocodingError('provider down')
        return self.result


def make_user(role, email=None, verified=True, **extra):
    n = next(_seq)
    return User.objects.create_user(
        email or f'{role.lower()}{n}@example.com',
        PASSWORD,
        name=extra.pop('name', f'{role.title()} {n}'),
        role=role,
        is_email_verified=verified,
        **extra,
    )


def make_lab(name=None, managers=()):
    n = next(_seq)
    lab = Lab.objects.create(
        name=name or f'Lab {n}',
        phone_number=f'{9000000000 + n}',
        email=f'lab{n}@labs.test',
    )
    for manager in managers:
        LabManager.objects.create(lab=lab, user=manager)
    return lab


def make_catalog(test_name=None, price='250.00'):
    n = next(_seq)
    return TestCatalog.objects.create(test_name=test_name or f'Test {n}', price=Decimal(price))


def make_lab_test(lab, entry, price='300.00'):
    return LabTest.objects.create(lab=lab, catalog=entry, price=Decimal(price))


def client_for(user):
    c = APIClient()
    c.force_authenticate(user=user)
    return c
