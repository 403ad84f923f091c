"""
Test catalog endpoints: reads for every authenticated user, writes for admins.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from labcore.permissions import IsAdminRole
from labcore.serializers.catalog import TestCatalogSerializer
from labcore.serializers.common import PageQuerySerializer
from labcore.services import catalog as catalog_service


def _require_admin(request) -> None:
    if not IsAdminRole().has_permission(request, None):
        raise PermissionDenied('Only admins can manage the test catalog')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def test_catalog(request):
    if request.method == 'GET':
        q = PageQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        items, pagination = catalog_service.list_entries(q.validated_data['page'], q.validated_data['pageSize'])
        return Response({
            'ok': True,
            'data': [catalog_service.serialize_catalog(e) for e in items],
            'pagination': pagination,
        })

    _require_admin(request)
    s = TestCatalogSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    entry = catalog_service.create_entry(s.validated_data)
    return Response({'ok': True, 'data': catalog_service.serialize_catalog(entry)}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def test_catalog_detail(request, entry_id):
    if request.method == 'GET':
        entry = catalog_service.get_entry(entry_id)
        return Response({'ok': True, 'data': catalog_service.serialize_catalog(entry)})

    _require_admin(request)
    if request.method == 'PATCH':
        s = TestCatalogSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        entry = catalog_service.update_entry(entry_id, s.validated_data)
        return Response({'ok': True, 'data': catalog_service.serialize_catalog(entry)})

    catalog_service.delete_entry(entry_id)
    return Response({'ok': True, 'message': 'Test catalog entry deleted successfully'})
