"""
Account lifecycle: registration, login, email verification and
password reset/change.

Each account moves ``Unverified -> Verified`` once, and independently
``Active -> Deleted`` (soft).  Verification and reset use separate
random tokens with their own expiry; a used token is cleared.
"""
from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

from django.conf import settings
from django.contrib.auth.models import update_last_login
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework_simplejwt.tokens import AccessToken

from labcore.exceptions import (
    AccountDeleted,
    Conflict,
    EmailNotVerified,
    InvalidCredentials,
    InvalidOrExpiredToken,
    RegistrationFailed,
)
from labcore.models import Address, EntityType, Role, User
from labcore.policy import ActorContext
from labcore.services import addresses, notifications

logger = logging.getLogger(__name__)


def new_token(hours: int) -> tuple[str, datetime]:
    return secrets.token_hex(32), timezone.now() + timedelta(hours=hours)


def check_password_strength(password: str, user: Optional[User] = None) -> None:
    try:
        validate_password(password, user)
    except DjangoValidationError as e:
        raise ValidationError({'password': e.messages})


def issue_access_token(user: User) -> str:
    token = AccessToken.for_user(user)
    token['email'] = user.email
    token['name'] = user.name
    token['role'] = user.role
    return str(token)


def register(data: dict) -> tuple[User, Optional[Address]]:
    email = data['email']
    role = data.get('role') or Role.CLIENT
    address = data.get('address')

    if User.objects.filter(email=email).exists():
        raise Conflict('User already exists')
    if role == Role.CLIENT and not address:
        raise ValidationError({'address': ['Address is required for client users']})
    check_password_strength(data['password'], User(email=email, name=data['name']))

    token, expiry = new_token(settings.EMAIL_VERIFICATION_HOURS)
    try:
        with transaction.atomic():
            user = User(
                name=data['name'],
                email=email,
                role=role,
                is_email_verified=False,
                email_verification_token=token,
                email_verification_token_expiry=expiry,
            )
            user.set_password(data['password'])
            user.save()
            saved_address = None
            if address:
                saved_address = addresses.create_address(EntityType.USER, user.id, address)
    except IntegrityError as e:
        raise Conflict('User already exists') from e
    except DatabaseError as e:
        # the atomic block has already undone the user row
        logger.exception('registration for %s rolled back', email)
        raise RegistrationFailed('Failed to create user with address') from e

    logger.info('registered %s as %s', user.id, role)
    notifications.send_verification_email(user, token)
    return user, saved_address


def login(email: str, password: str) -> dict[str, object]:
    user = User.objects.filter(email=email).first()
    if user is None:
        deleted = User.all_objects.filter(email=email, is_deleted=True).order_by('-updated_at').first()
        if deleted is not None and deleted.check_password(password):
            logger.warning('login failed: account %s is deleted', deleted.id)
            raise AccountDeleted()
        logger.warning('login failed: no account for %s', email)
        raise InvalidCredentials()

    # password first, so account state is only revealed to its owner
    if not user.check_password(password):
        logger.warning('login failed: invalid password for %s', user.id)
        raise InvalidCredentials()
    if not user.is_email_verified:
        logger.warning('login failed: %s has not verified email', user.id)
        raise EmailNotVerified()
    if not user.is_active:
        logger.warning('login failed: %s is inactive', user.id)
        raise InvalidCredentials()

    update_last_login(None, user)
    return {
        'access_token': issue_access_token(user),
        'user': {
            'id': str(user.id),
            'name': user.name,
            'email': user.email,
            'role': user.role,
        },
    }


def verify_email(token: str) -> User:
    user = None
    if token:
        user = User.objects.filter(
            email_verification_token=token,
            email_verification_token_expiry__gt=timezone.now(),
        ).first()
    if user is None:
        raise InvalidOrExpiredToken('Invalid or expired verification token')
    user.is_email_verified = True
    user.email_verification_token = None
    user.email_verification_token_expiry = None
    user.save(update_fields=[
        'is_email_verified', 'email_verification_token', 'email_verification_token_expiry', 'updated_at',
    ])
    return user


def resend_verification(email: str) -> None:
    user = User.objects.filter(email=email).first()
    if user is None:
        # same response as for a real account
        logger.info('verification resend requested for unknown email')
        return
    if user.is_email_verified:
        raise ValidationError({'email': ['Email already verified']})
    token, expiry = new_token(settings.EMAIL_VERIFICATION_HOURS)
    user.email_verification_token = token
    user.email_verification_token_expiry = expiry
    user.save(update_fields=['email_verification_token', 'email_verification_token_expiry', 'updated_at'])
    notifications.send_verification_email(user, token)


def forgot_password(email: str) -> None:
    user = User.objects.filter(email=email).first()
    if user is None:
        logger.info('password reset requested for unknown email')
        return
    token, expiry = new_token(settings.PASSWORD_RESET_HOURS)
    user.reset_token = token
    user.reset_token_expiry = expiry
    user.save(update_fields=['reset_token', 'reset_token_expiry', 'updated_at'])
    notifications.send_password_reset_email(user, token)


def reset_password(token: str, new_password: str) -> None:
    user = None
    if token:
        user = User.objects.filter(reset_token=token, reset_token_expiry__gt=timezone.now()).first()
    if user is None:
        raise InvalidOrExpiredToken('Invalid or expired reset token')
    check_password_strength(new_password, user)
    user.set_password(new_password)
    user.reset_token = None
    user.reset_token_expiry = None
    user.save(update_fields=['password', 'reset_token', 'reset_token_expiry', 'updated_at'])


def change_password(actor: ActorContext, current_password: str, new_password: str) -> None:
    user = User.objects.filter(pk=actor.id).first()
    if user is None:
        raise NotFound('User not found')
    if not user.check_password(current_password):
        raise InvalidCredentials('Current password is incorrect')
    check_password_strength(new_password, user)
    user.set_password(new_password)
    user.save(update_fields=['password', 'updated_at'])
