"""
Bearer token authentication for the API.

Tokens are signed JWTs issued by :mod:`labcore.services.auth`.  This
subclass of simplejwt's ``JWTAuthentication`` additionally refuses
tokens whose user has since been soft-deleted or has not verified the
email address, so a token issued earlier cannot outlive those states.
"""
from __future__ import annotations

from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import AuthenticationFailed
from rest_framework_simplejwt.settings import api_settings

from .models import User


class VerifiedJWTAuthentication(JWTAuthentication):
    def get_user(self, validated_token):
        try:
            user_id = validated_token[api_settings.USER_ID_CLAIM]
        except KeyError:
            raise AuthenticationFailed('Token contained no recognizable user identification', code='token_not_valid')

        # the default manager excludes deleted accounts
        user = User.objects.filter(pk=user_id).first()
        if user is None:
            raise AuthenticationFailed('User not found', code='user_not_found')
        if not user.is_active:
            raise AuthenticationFailed('User is inactive', code='user_inactive')
        if not user.is_email_verified:
            raise AuthenticationFailed('Please verify your email first', code='email_not_verified')
        return user
