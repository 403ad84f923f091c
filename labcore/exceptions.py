"""
API error types and the unified exception handler.

Every error leaves the API as ``{'ok': False, 'error': {'code', 'message'}}``
with the HTTP status of its kind.  Unexpected exceptions are logged with
their stack and collapse to a generic 500 so internals never leak.
"""
from __future__ import annotations

import logging

from django.db import IntegrityError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException, AuthenticationFailed, NotFound
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class Conflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Resource already exists.'
    default_code = 'conflict'


class UpstreamFailure(APIException):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = 'Upstream service failed.'
    default_code = 'upstream_failure'


class RegistrationFailed(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Registration failed.'
    default_code = 'registration_failed'


class InvalidCredentials(AuthenticationFailed):
    default_detail = 'Invalid credentials'
    default_code = 'invalid_credentials'


class AccountDeleted(AuthenticationFailed):
    default_detail = 'Account has been deleted'
    default_code = 'account_deleted'


class EmailNotVerified(AuthenticationFailed):
    default_detail = 'Please verify your email first'
    default_code = 'email_not_verified'


class InvalidOrExpiredToken(AuthenticationFailed):
    default_detail = 'Invalid or expired token'
    default_code = 'invalid_or_expired_token'


# DRF's built-in codes renamed to the API's vocabulary
_CODE_ALIASES = {
    'invalid': 'validation_failed',
    'parse_error': 'validation_failed',
    'not_authenticated': 'unauthorized',
    'authentication_failed': 'unauthorized',
    'token_not_valid': 'unauthorized',
    'user_not_found': 'unauthorized',
    'user_inactive': 'unauthorized',
    'permission_denied': 'forbidden',
    'not_found': 'not_found',
}


def _error(code: str, message, status_code: int) -> Response:
    return Response({'ok': False, 'error': {'code': code, 'message': message}}, status=status_code)


def api_exception_handler(exc, context):
    if isinstance(exc, IntegrityError):
        # A concurrent writer won the race past a uniqueness pre-check
        logger.warning('integrity error mapped to conflict: %s', exc)
        exc = Conflict()
    elif isinstance(exc, Http404):
        exc = NotFound()

    resp = drf_exception_handler(exc, context)
    if resp is None:
        view = context.get('view') if context else None
        logger.error('unhandled error in %s', getattr(view, '__name__', view), exc_info=exc)
        return _error('server_error', 'Internal server error', status.HTTP_500_INTERNAL_SERVER_ERROR)

    code = getattr(exc, 'default_code', None) or 'api_error'
    code = _CODE_ALIASES.get(code, code)
    # normalize response
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data
    error_resp = _error(code, detail, resp.status_code)
    for header in ('WWW-Authenticate', 'Retry-After'):
        if resp.has_header(header):
            error_resp[header] = resp[header]
    return error_resp
