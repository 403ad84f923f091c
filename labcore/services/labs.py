"""
Lab management: labs with their address, manager links and priced tests.

A lab is soft-deleted, while its manager links and address rows are
removed outright in the same transaction.
"""
from __future__ import annotations

import logging
import uuid
from typing import Optional

from django.db import transaction
from rest_framework.exceptions import NotFound, ValidationError

from labcore import policy
from labcore.exceptions import Conflict
from labcore.models import EntityType, Lab, LabManager, LabTest, Role, TestCatalog, User
from labcore.policy import ActorContext
from labcore.services import addresses
from labcore.services.pagination import paginate

logger = logging.getLogger(__name__)

UNIQUE_FIELDS = (
    ('name', 'name'),
    ('email', 'email'),
    ('phone_number', 'phone number'),
)


def serialize_lab(lab: Lab, *, detail: bool = False) -> dict[str, object]:
    data: dict[str, object] = {
        'id': str(lab.id),
        'name': lab.name,
        'phoneNumber': lab.phone_number,
        'email': lab.email,
        'address': addresses.serialize_address(addresses.address_for(EntityType.LAB, lab.id)),
        'managers': [
            {'id': str(link.user.id), 'name': link.user.name, 'email': link.user.email}
            for link in lab.manager_links.select_related('user').order_by('created_at')
            if not link.user.is_deleted
        ],
        'createdAt': lab.created_at.isoformat(),
        'updatedAt': lab.updated_at.isoformat(),
    }
    if detail:
        data['labTests'] = [
            {
                'id': str(lt.id),
                'catalogId': str(lt.catalog_id),
                'testName': lt.catalog.test_name,
                'price': str(lt.price),
            }
            for lt in lab.lab_tests.select_related('catalog').order_by('created_at')
        ]
    return data


def _ensure_unique(data: dict, exclude_id: Optional[uuid.UUID] = None) -> None:
    qs = Lab.objects.all()
    if exclude_id is not None:
        qs = qs.exclude(pk=exclude_id)
    for field, label in UNIQUE_FIELDS:
        value = data.get(field)
        if value is not None and qs.filter(**{field: value}).exists():
            raise Conflict(f'A lab with this {label} already exists')


def _resolve_managers(manager_ids: list[uuid.UUID]) -> list[User]:
    wanted = set(manager_ids)
    managers = list(User.objects.filter(id__in=wanted, role=Role.MANAGER))
    missing = wanted - {u.id for u in managers}
    if missing:
        raise ValidationError({
            'managerIds': [f'Manager {m} not found' for m in sorted(map(str, missing))],
        })
    return managers


def _resolve_catalog(catalog_ids: list[uuid.UUID]) -> dict[uuid.UUID, TestCatalog]:
    wanted = set(catalog_ids)
    found = {c.id: c for c in TestCatalog.objects.filter(id__in=wanted)}
    missing = wanted - set(found)
    if missing:
        raise ValidationError({
            'labTests': [f'Test catalog entry {c} not found' for c in sorted(map(str, missing))],
        })
    return found


def _lab_or_404(lab_id: uuid.UUID) -> Lab:
    lab = Lab.objects.filter(pk=lab_id).first()
    if lab is None:
        raise NotFound('Lab not found')
    return lab


def _manages(actor: ActorContext, lab: Lab) -> bool:
    return LabManager.objects.filter(lab=lab, user_id=actor.id).exists()


def create_lab(data: dict) -> Lab:
    _ensure_unique(data)
    managers = _resolve_managers(data['manager_ids'])
    lab_tests = data.get('lab_tests') or []
    catalog = _resolve_catalog([t['catalog_id'] for t in lab_tests])

    with transaction.atomic():
        lab = Lab.objects.create(name=data['name'], phone_number=data['phone_number'], email=data['email'])
        addresses.create_address(EntityType.LAB, lab.id, data['address'])
        LabManager.objects.bulk_create([LabManager(lab=lab, user=m) for m in managers])
        LabTest.objects.bulk_create([
            LabTest(lab=lab, catalog=catalog[t['catalog_id']], price=t['price']) for t in lab_tests
        ])
    logger.info('lab %s created with %d manager(s)', lab.id, len(managers))
    return lab


def list_labs(page: int, page_size: int):
    return paginate(Lab.objects.order_by('-created_at'), page, page_size)


def get_lab(actor: ActorContext, lab_id: uuid.UUID) -> Lab:
    lab = _lab_or_404(lab_id)
    policy.enforce(policy.can_access_lab(actor, _manages(actor, lab)), actor, 'view-lab', lab.id)
    return lab


def update_lab(actor: ActorContext, lab_id: uuid.UUID, data: dict) -> Lab:
    lab = _lab_or_404(lab_id)
    policy.enforce(policy.can_access_lab(actor, _manages(actor, lab)), actor, 'update-lab', lab.id)
    managers = None
    if 'manager_ids' in data:
        policy.enforce(policy.can_reassign_lab_managers(actor), actor, 'reassign-lab-managers', lab.id)
        managers = _resolve_managers(data['manager_ids'])
    _ensure_unique(data, exclude_id=lab.id)

    with transaction.atomic():
        for field, _ in UNIQUE_FIELDS:
            if field in data:
                setattr(lab, field, data[field])
        lab.save()
        if data.get('address'):
            addresses.upsert_address(EntityType.LAB, lab.id, data['address'])
        if managers is not None:
            # full replace of the manager set
            LabManager.objects.filter(lab=lab).delete()
            LabManager.objects.bulk_create([LabManager(lab=lab, user=m) for m in managers])
    logger.info('lab %s updated by %s', lab.id, actor.id)
    return lab


def remove_lab(lab_id: uuid.UUID) -> None:
    lab = _lab_or_404(lab_id)
    with transaction.atomic():
        lab.is_deleted = True
        lab.save(update_fields=['is_deleted', 'updated_at'])
        LabManager.objects.filter(lab=lab).delete()
        addresses.delete_for(EntityType.LAB, lab.id)
    logger.info('lab %s removed', lab.id)


def add_manager(lab_id: uuid.UUID, user_id: uuid.UUID) -> LabManager:
    lab = _lab_or_404(lab_id)
    user = User.objects.filter(pk=user_id).first()
    if user is None:
        raise NotFound('User not found')
    if user.role != Role.MANAGER:
        raise ValidationError({'userId': ['Only managers can be assigned to a lab']})
    if LabManager.objects.filter(lab=lab, user=user).exists():
        raise Conflict('User is already a manager of this lab')
    with transaction.atomic():
        link = LabManager.objects.create(lab=lab, user=user)
    return link
