"""
URL mappings for the pathology lab API.

Trailing slashes are deliberately omitted (``APPEND_SLASH = False``).
Literal segments such as ``users/managers-with-staff`` never collide with
the ``<uuid:...>`` detail routes.
"""
from django.urls import path, include

from .views import address, auth, catalog, health, lab_tests, labs, orders, users

urlpatterns = [
    path('metrics', include('django_prometheus.urls')),
    path('healthz', health.healthz, name='healthz'),

    # Authentication
    path('api/auth/register', auth.register_view, name='register'),
    path('api/auth/login', auth.login_view, name='login'),
    path('api/auth/verify-email', auth.verify_email_view, name='verify_email'),
    path('api/auth/resend-verification', auth.resend_verification_view, name='resend_verification'),
    path('api/auth/forgot-password', auth.forgot_password_view, name='forgot_password'),
    path('api/auth/reset-password', auth.reset_password_view, name='reset_password'),
    path('api/auth/change-password', auth.change_password_view, name='change_password'),

    # User administration
    path('api/users', users.users, name='users'),
    path('api/users/managers-with-staff', users.managers_with_staff, name='managers_with_staff'),
    path('api/users/by-manager/<uuid:manager_id>', users.staff_by_manager, name='staff_by_manager'),
    path('api/users/<uuid:user_id>', users.user_detail, name='user_detail'),

    # Labs
    path('api/labs', labs.labs, name='labs'),
    path('api/labs/<uuid:lab_id>', labs.lab_detail, name='lab_detail'),
    path('api/labs/<uuid:lab_id>/managers', labs.lab_managers, name='lab_managers'),

    # Lab tests
    path('api/lab-tests', lab_tests.lab_tests, name='lab_tests'),
    path('api/lab-tests/by-lab/<uuid:lab_id>', lab_tests.lab_tests_by_lab, name='lab_tests_by_lab'),
    path('api/lab-tests/<uuid:lab_test_id>', lab_tests.lab_test_detail, name='lab_test_detail'),

    # Test catalog
    path('api/test-catalog', catalog.test_catalog, name='test_catalog'),
    path('api/test-catalog/<uuid:entry_id>', catalog.test_catalog_detail, name='test_catalog_detail'),

    # Test orders
    path('api/tests', orders.tests, name='tests'),
    path('api/tests/<uuid:order_id>', orders.test_detail, name='test_detail'),
    path('api/tests/<uuid:order_id>/status', orders.test_status, name='test_status'),

    # Addresses & geocoding
    path('api/address', address.address, name='address'),
    path('api/address/geocode/<str:query>', address.geocode, name='geocode'),
    path('api/address/reverse-geocode', address.reverse_geocode, name='reverse_geocode'),
    path('api/address/<uuid:address_id>', address.address_detail, name='address_detail'),
]
