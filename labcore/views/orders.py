"""
Test order endpoints.

Only clients place orders.  Every read and write is scoped to the
caller's own orders.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from labcore.permissions import IsClientRole
from labcore.policy import ActorContext
from labcore.serializers.orders import OrderCreateSerializer, OrderStatusSerializer
from labcore.services import orders as order_service


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def tests(request):
    actor = ActorContext.from_user(request.user)
    if request.method == 'GET':
        data = [order_service.serialize_order(o) for o in order_service.list_orders(actor)]
        return Response({'ok': True, 'data': data})

    if not IsClientRole().has_permission(request, None):
        raise PermissionDenied('Only clients can place test orders')
    s = OrderCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    order = order_service.create_order(actor, s.validated_data['lab_id'], s.validated_data['details'])
    return Response({'ok': True, 'data': order_service.serialize_order(order)}, status=status.HTTP_201_CREATED)


def _set_status(request, order_id):
    s = OrderStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    order = order_service.update_status(ActorContext.from_user(request.user), order_id, s.validated_data['status'])
    return Response({'ok': True, 'data': order_service.serialize_order(order)})


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def test_detail(request, order_id):
    actor = ActorContext.from_user(request.user)
    if request.method == 'GET':
        order = order_service.get_order(actor, order_id)
        return Response({'ok': True, 'data': order_service.serialize_order(order)})

    if request.method == 'PUT':
        return _set_status(request, order_id)

    order_service.remove_order(actor, order_id)
    return Response({'ok': True, 'message': 'Test order deleted successfully'})


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def test_status(request, order_id):
    return _set_status(request, order_id)
