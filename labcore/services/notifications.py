"""
Transactional mail: email verification, password reset and the
credentials sent to accounts created by an administrator or manager.

Delivery is best effort.  The calling operation has already committed
by the time mail goes out, so a delivery failure is logged and reported
back as ``False`` rather than raised.
"""
from __future__ import annotations

import logging

from django.conf import settings
from django.core.mail import send_mail
from django.template.loader import render_to_string

logger = logging.getLogger(__name__)


def _frontend(path: str) -> str:
    return f"{settings.FRONTEND_URL}{path}"


def _deliver(to: str, subject: str, template: str, context: dict) -> bool:
    text_body = render_to_string(f'emails/{template}.txt', context)
    html_body = render_to_string(f'emails/{template}.html', context)
    try:
        send_mail(
            subject,
            text_body,
            settings.DEFAULT_FROM_EMAIL,
            [to],
            html_message=html_body,
            fail_silently=False,
        )
    except Exception:
        logger.exception('failed to send %s mail to %s', template, to)
        return False
    logger.info('sent %s mail to %s', template, to)
    return True


def send_verification_email(user, token: str) -> bool:
    return _deliver(user.email, 'Verify Your Email', 'verify_email', {
        'name': user.name,
        'verification_url': _frontend(f'/verify-email?token={token}'),
        'hours': settings.EMAIL_VERIFICATION_HOURS,
    })


def send_password_reset_email(user, token: str) -> bool:
    return _deliver(user.email, 'Password Reset Request', 'reset_password', {
        'name': user.name,
        'reset_url': _frontend(f'/reset-password?token={token}'),
        'hours': settings.PASSWORD_RESET_HOURS,
    })


def send_credentials_email(user, password: str) -> bool:
    return _deliver(user.email, 'Your Account Credentials', 'credentials', {
        'name': user.name,
        'email': user.email,
        'password': password,
        'role': user.get_role_display(),
        'login_url': _frontend('/login'),
    })
