"""
Address endpoints and geocoding lookups.

Callers manage their own addresses; admins can see and edit all of them.
The geocode lookups talk to the provider directly and report its
failures as 502.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from labcore.policy import ActorContext
from labcore.serializers.common import AddressSerializer, CoordinatesQuerySerializer
from labcore.services import addresses as address_service


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def address(request):
    actor = ActorContext.from_user(request.user)
    if request.method == 'GET':
        data = [address_service.serialize_address(a) for a in address_service.list_for_actor(actor)]
        return Response({'ok': True, 'data': data})

    s = AddressSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    created = address_service.create_for_actor(actor, s.validated_data)
    return Response({'ok': True, 'data': address_service.serialize_address(created)}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def address_detail(request, address_id):
    actor = ActorContext.from_user(request.user)
    if request.method == 'GET':
        found = address_service.get_for_actor(actor, address_id)
        return Response({'ok': True, 'data': address_service.serialize_address(found)})

    if request.method == 'PATCH':
        s = AddressSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        updated = address_service.update_for_actor(actor, address_id, s.validated_data)
        return Response({'ok': True, 'data': address_service.serialize_address(updated)})

    address_service.delete_for_actor(actor, address_id)
    return Response({'ok': True, 'message': 'Address deleted successfully'})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def geocode(request, query):
    result = address_service.lookup(query)
    return Response({'ok': True, 'data': result.as_dict()})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def reverse_geocode(request):
    q = CoordinatesQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    result = address_service.reverse_lookup(q.validated_data['lat'], q.validated_data['lng'])
    return Response({'ok': True, 'data': result.as_dict()})
