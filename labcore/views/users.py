"""
User administration endpoints.

Who may create, see, change or remove whom is decided by
:mod:`labcore.policy`; these views only validate input and shape output.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from labcore.permissions import IsAdminRole
from labcore.policy import ActorContext
from labcore.serializers.common import PageQuerySerializer
from labcore.serializers.users import UserCreateSerializer, UserUpdateSerializer
from labcore.services import users as user_service


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def users(request):
    actor = ActorContext.from_user(request.user)
    if request.method == 'GET':
        data = [user_service.serialize_user(u, with_lab=actor.is_admin) for u in user_service.list_users(actor)]
        return Response({'ok': True, 'data': data})

    s = UserCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = user_service.create_user(actor, s.validated_data)
    return Response({
        'ok': True,
        'message': 'User created successfully',
        'data': user_service.serialize_user(user, with_lab=True, with_address=True),
    }, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def user_detail(request, user_id):
    actor = ActorContext.from_user(request.user)
    if request.method == 'GET':
        user = user_service.get_user(actor, user_id)
        return Response({'ok': True, 'data': user_service.serialize_user(user, with_lab=True, with_address=True)})

    if request.method == 'PATCH':
        s = UserUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        user = user_service.update_user(actor, user_id, s.validated_data)
        return Response({'ok': True, 'data': user_service.serialize_user(user, with_lab=True, with_address=True)})

    user_service.delete_user(actor, user_id)
    return Response({'ok': True, 'message': 'User deleted successfully'})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def managers_with_staff(request):
    q = PageQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    items, pagination = user_service.managers_with_staff(q.validated_data['page'], q.validated_data['pageSize'])
    return Response({
        'ok': True,
        'data': [user_service.serialize_user(u, with_lab=True) for u in items],
        'pagination': pagination,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def staff_by_manager(request, manager_id):
    q = PageQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    items, pagination = user_service.staff_by_manager(
        manager_id, q.validated_data['page'], q.validated_data['pageSize']
    )
    return Response({
        'ok': True,
        'data': [user_service.serialize_user(u) for u in items],
        'pagination': pagination,
    })
