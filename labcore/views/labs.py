"""
Lab endpoints.

Any authenticated user may browse labs.  Creating and removing labs and
assigning managers is reserved to admins; a lab's detail view and edits
are open to admins and the lab's own managers.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from labcore.permissions import IsAdminRole
from labcore.policy import ActorContext
from labcore.serializers.common import PageQuerySerializer
from labcore.serializers.labs import AddManagerSerializer, LabCreateSerializer, LabUpdateSerializer
from labcore.services import labs as lab_service


def _require_admin(request, action: str) -> None:
    if not IsAdminRole().has_permission(request, None):
        raise PermissionDenied(f'Only admins can {action}')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def labs(request):
    if request.method == 'GET':
        q = PageQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        items, pagination = lab_service.list_labs(q.validated_data['page'], q.validated_data['pageSize'])
        return Response({
            'ok': True,
            'data': [lab_service.serialize_lab(lab) for lab in items],
            'pagination': pagination,
        })

    _require_admin(request, 'create labs')
    s = LabCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    lab = lab_service.create_lab(s.validated_data)
    return Response({'ok': True, 'data': lab_service.serialize_lab(lab, detail=True)}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def lab_detail(request, lab_id):
    actor = ActorContext.from_user(request.user)
    if request.method == 'GET':
        lab = lab_service.get_lab(actor, lab_id)
        return Response({'ok': True, 'data': lab_service.serialize_lab(lab, detail=True)})

    if request.method == 'PATCH':
        s = LabUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        lab = lab_service.update_lab(actor, lab_id, s.validated_data)
        return Response({'ok': True, 'data': lab_service.serialize_lab(lab, detail=True)})

    _require_admin(request, 'delete labs')
    lab_service.remove_lab(lab_id)
    return Response({'ok': True, 'message': 'Lab deleted successfully'})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def lab_managers(request, lab_id):
    s = AddManagerSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    link = lab_service.add_manager(lab_id, s.validated_data['user_id'])
    return Response({
        'ok': True,
        'data': {'labId': str(link.lab_id), 'userId': str(link.user_id)},
    }, status=status.HTTP_201_CREATED)
