"""
Account lifecycle over HTTP: registration, login, email verification,
password reset and change, plus the bearer-token checks applied to
every protected request.
"""
from datetime import timedelta

from django.core import mail
from django.db import DatabaseError
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient, APITestCase
from rest_framework_simplejwt.tokens import AccessToken

from labcore.models import Address, EntityType, Role, User
from labcore.services import addresses

from .factories import ADDRESS, PASSWORD, make_user


class RegistrationTests(APITestCase):
    def payload(self, **overrides):
        data = {'name': 'Jane Client', 'email': 'jane@example.com', 'password': PASSWORD, 'address': ADDRESS}
        data.update(overrides)
        return data

    def test_client_registration_stores_user_and_address(self):
        resp = self.client.post(reverse('register'), self.payload(), format='json')
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        body = resp.json()
        self.assertTrue(body['ok'])
        self.assertEqual(body['data']['role'], Role.CLIENT)
        self.assertEqual(body['data']['address']['city'], 'London')

        user = User.objects.get(email='jane@example.com')
        self.assertFalse(user.is_email_verified)
        self.assertIsNotNone(user.email_verification_token)
        self.assertTrue(Address.objects.filter(entity_type=EntityType.USER, entity_id=user.id).exists())
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn(f'http://frontend.test/verify-email?token={user.email_verification_token}', mail.outbox[0].body)

    def test_client_without_address_is_rejected(self):
        data = self.payload()
        del data['address']
        resp = self.client.post(reverse('register'), data, format='json')
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()['error']['code'], 'validation_failed')
        self.assertFalse(User.all_objects.filter(email='jane@example.com').exists())

    def test_manager_may_register_without_address(self):
        data = self.payload(role=Role.MANAGER)
        del data['address']
        resp = self.client.post(reverse('register'), data, format='json')
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(resp.json()['data']['address'])

    def test_incomplete_address_lists_missing_fields(self):
        partial = {k: v for k, v in ADDRESS.items() if k not in ('landmark', 'postalCode')}
        resp = self.client.post(reverse('register'), self.payload(address=partial), format='json')
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        missing = resp.json()['error']['message']['address']
        self.assertIn('landmark', missing)
        self.assertIn('postalCode', missing)

    def test_duplicate_email_conflicts(self):
        self.client.post(reverse('register'), self.payload(), format='json')
        resp = self.client.post(reverse('register'), self.payload(name='Someone Else'), format='json')
        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(resp.json()['error']['code'], 'conflict')
        self.assertEqual(User.objects.filter(email='jane@example.com').count(), 1)

    def test_admin_role_cannot_self_register(self):
        resp = self.client.post(reverse('register'), self.payload(role=Role.ADMIN), format='json')
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(User.all_objects.filter(email='jane@example.com').exists())

    def test_weak_password_is_rejected(self):
        resp = self.client.post(reverse('register'), self.payload(password='12345678'), format='json')
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', resp.json()['error']['message'])

    def test_address_failure_rolls_back_user(self):
        def broken(*args, **kwargs):
            raise DatabaseError('address table unavailable')

        original = addresses.create_address
        addresses.create_address = broken
        try:
            resp = self.client.post(reverse('register'), self.payload(), format='json')
        finally:
            addresses.create_address = original
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()['error']['code'], 'registration_failed')
        self.assertFalse(User.all_objects.filter(email='jane@example.com').exists())
        self.assertEqual(len(mail.outbox), 0)


class LoginTests(APITestCase):
    def setUp(self):
        self.user = make_user(Role.CLIENT, email='login@example.com')

    def login(self, email='login@example.com', password=PASSWORD):
        return self.client.post(reverse('login'), {'email': email, 'password': password}, format='json')

    def test_login_returns_token_with_claims(self):
        resp = self.login()
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        body = resp.json()
        self.assertEqual(body['user']['email'], 'login@example.com')
        token = AccessToken(body['access_token'])
        self.assertEqual(token['sub'], str(self.user.id))
        self.assertEqual(token['role'], Role.CLIENT)
        self.assertEqual(token['email'], 'login@example.com')
        self.assertEqual(token['name'], self.user.name)

    def test_token_authenticates_requests(self):
        token = self.login().json()['access_token']
        api = APIClient()
        api.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
        self.assertEqual(api.get(reverse('tests')).status_code, status.HTTP_200_OK)

    def test_token_of_deleted_user_is_refused(self):
        token = self.login().json()['access_token']
        self.user.is_deleted = True
        self.user.save()
        api = APIClient()
        api.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
        resp = api.get(reverse('tests'))
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(resp.json()['ok'])

    def test_missing_or_garbage_token_is_unauthorized(self):
        self.assertEqual(self.client.get(reverse('tests')).status_code, status.HTTP_401_UNAUTHORIZED)
        self.client.credentials(HTTP_AUTHORIZATION='Bearer not-a-jwt')
        resp = self.client.get(reverse('tests'))
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(resp.json()['error']['code'], 'unauthorized')

    def test_wrong_password(self):
        resp = self.login(password='not-the-password')
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(resp.json()['error']['code'], 'invalid_credentials')

    def test_unknown_email(self):
        resp = self.login(email='nobody@example.com')
        self.assertEqual(resp.json()['error']['code'], 'invalid_credentials')

    def test_unverified_account(self):
        make_user(Role.CLIENT, email='fresh@example.com', verified=False)
        resp = self.login(email='fresh@example.com')
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(resp.json()['error']['code'], 'email_not_verified')

    def test_unverified_account_with_wrong_password_reveals_nothing(self):
        make_user(Role.CLIENT, email='fresh@example.com', verified=False)
        resp = self.login(email='fresh@example.com', password='wrong-password')
        self.assertEqual(resp.json()['error']['code'], 'invalid_credentials')

    def test_deleted_account(self):
        self.user.is_deleted = True
        self.user.save()
        resp = self.login()
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(resp.json()['error']['code'], 'account_deleted')

    def test_login_is_throttled(self):
        for _ in range(10):
            self.assertEqual(self.login(password='wrong-password').status_code, status.HTTP_401_UNAUTHORIZED)
        resp = self.login()
        self.assertEqual(resp.status_code, status.HTTP_429_TOO_MANY_REQUESTS)
        self.assertEqual(resp.json()['error']['code'], 'throttled')


class TokenFlowTests(APITestCase):
    def test_verify_email(self):
        user = make_user(Role.CLIENT, verified=False, email_verification_token='a' * 64,
                         email_verification_token_expiry=timezone.now() + timedelta(hours=1))
        resp = self.client.post(reverse('verify_email'), {'token': 'a' * 64}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        user.refresh_from_db()
        self.assertTrue(user.is_email_verified)
        self.assertIsNone(user.email_verification_token)

        # used tokens are cleared
        resp = self.client.post(reverse('verify_email'), {'token': 'a' * 64}, format='json')
        self.assertEqual(resp.json()['error']['code'], 'invalid_or_expired_token')

    def test_expired_verification_token(self):
        make_user(Role.CLIENT, verified=False, email_verification_token='b' * 64,
                  email_verification_token_expiry=timezone.now() - timedelta(minutes=1))
        resp = self.client.post(reverse('verify_email'), {'token': 'b' * 64}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(resp.json()['error']['code'], 'invalid_or_expired_token')

    def test_resend_verification(self):
        user = make_user(Role.CLIENT, verified=False)
        resp = self.client.post(reverse('resend_verification'), {'email': user.email}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        user.refresh_from_db()
        self.assertIsNotNone(user.email_verification_token)
        self.assertEqual(len(mail.outbox), 1)

    def test_resend_for_verified_account_is_rejected(self):
        user = make_user(Role.CLIENT)
        resp = self.client.post(reverse('resend_verification'), {'email': user.email}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(len(mail.outbox), 0)

    def test_resend_for_unknown_email_looks_like_success(self):
        user = make_user(Role.CLIENT, verified=False)
        known = self.client.post(reverse('resend_verification'), {'email': user.email}, format='json')
        mail.outbox.clear()
        resp = self.client.post(reverse('resend_verification'), {'email': 'ghost@example.com'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json(), known.json())
        self.assertEqual(len(mail.outbox), 0)

    def test_forgot_password_does_not_reveal_unknown_email(self):
        user = make_user(Role.CLIENT)
        known = self.client.post(reverse('forgot_password'), {'email': user.email}, format='json')
        mail.outbox.clear()
        resp = self.client.post(reverse('forgot_password'), {'email': 'ghost@example.com'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json(), known.json())
        self.assertEqual(len(mail.outbox), 0)

    def test_forgot_then_reset_password(self):
        user = make_user(Role.CLIENT)
        resp = self.client.post(reverse('forgot_password'), {'email': user.email}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        user.refresh_from_db()
        self.assertIsNotNone(user.reset_token)
        self.assertIn(f'/reset-password?token={user.reset_token}', mail.outbox[0].body)

        resp = self.client.post(reverse('reset_password'),
                                {'token': user.reset_token, 'newPassword': 'Brand-New-Pass-9'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        user.refresh_from_db()
        self.assertIsNone(user.reset_token)
        self.assertTrue(user.check_password('Brand-New-Pass-9'))

    def test_reset_with_unknown_token(self):
        resp = self.client.post(reverse('reset_password'),
                                {'token': 'nope', 'newPassword': 'Brand-New-Pass-9'}, format='json')
        self.assertEqual(resp.json()['error']['code'], 'invalid_or_expired_token')

    def test_change_password(self):
        user = make_user(Role.STAFF)
        self.client.force_authenticate(user=user)
        resp = self.client.post(reverse('change_password'),
                                {'currentPassword': 'wrong-one', 'newPassword': 'Brand-New-Pass-9'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

        resp = self.client.post(reverse('change_password'),
                                {'currentPassword': PASSWORD, 'newPassword': 'Brand-New-Pass-9'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        user.refresh_from_db()
        self.assertTrue(user.check_password('Brand-New-Pass-9'))

    def test_change_password_requires_auth(self):
        resp = self.client.post(reverse('change_password'),
                                {'currentPassword': PASSWORD, 'newPassword': 'Brand-New-Pass-9'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
