"""
Authentication endpoints.

Registration, login and the email-token flows are public; changing the
password requires a bearer token.  Login and the mail-sending endpoints
are rate limited per client.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from labcore.policy import ActorContext
from labcore.serializers.auth import (
    ChangePasswordSerializer,
    EmailSerializer,
    LoginSerializer,
    RegisterSerializer,
    ResetPasswordSerializer,
    TokenSerializer,
)
from labcore.services import auth as auth_service
from labcore.services.addresses import serialize_address


@api_view(['POST'])
@permission_classes([AllowAny])
def register_view(request):
    s = RegisterSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user, address = auth_service.register(s.validated_data)
    return Response({
        'ok': True,
        'message': 'Registration successful. Please check your email to verify your account.',
        'data': {
            'id': str(user.id),
            'name': user.name,
            'email': user.email,
            'role': user.role,
            'address': serialize_address(address),
        },
    }, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    result = auth_service.login(s.validated_data['email'], s.validated_data['password'])
    return Response({'ok': True, **result})


@api_view(['POST'])
@permission_classes([AllowAny])
def verify_email_view(request):
    s = TokenSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    auth_service.verify_email(s.validated_data['token'])
    return Response({'ok': True, 'message': 'Email verified successfully'})


@api_view(['POST'])
@permission_classes([AllowAny])
def resend_verification_view(request):
    s = EmailSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    auth_service.resend_verification(s.validated_data['email'])
    return Response({'ok': True, 'message': 'If the account exists and is unverified, a verification email has been sent'})


@api_view(['POST'])
@permission_classes([AllowAny])
def forgot_password_view(request):
    s = EmailSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    auth_service.forgot_password(s.validated_data['email'])
    return Response({'ok': True, 'message': 'If the account exists, a password reset email has been sent'})


@api_view(['POST'])
@permission_classes([AllowAny])
def reset_password_view(request):
    s = ResetPasswordSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    auth_service.reset_password(s.validated_data['token'], s.validated_data['new_password'])
    return Response({'ok': True, 'message': 'Password reset successful'})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def change_password_view(request):
    s = ChangePasswordSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    auth_service.change_password(
        ActorContext.from_user(request.user),
        s.validated_data['current_password'],
        s.validated_data['new_password'],
    )
    return Response({'ok': True, 'message': 'Password changed successfully'})


# ScopedRateThrottle reads throttle_scope from the generated view class
login_view.cls.throttle_scope = 'login'
for _view in (resend_verification_view, forgot_password_view):
    _view.cls.throttle_scope = 'auth_mail'
