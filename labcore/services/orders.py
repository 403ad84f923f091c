"""
Test orders submitted by clients.

Orders are only ever visible to the client who placed them; someone
else's order reads as absent.  Status changes are free-form unless
``settings.ORDER_STATUS_STRICT`` is enabled, in which case orders only
move forward and may be cancelled until they are finished.
"""
from __future__ import annotations

import logging
import uuid

from django.conf import settings
from django.db import transaction
from rest_framework.exceptions import NotFound, ValidationError

from labcore.models import Lab, TestCatalog, TestDetail, TestOrder, TestStatus
from labcore.policy import ActorContext

logger = logging.getLogger(__name__)

LIFECYCLE = [
    TestStatus.PENDING,
    TestStatus.COLLECTION_PENDING,
    TestStatus.COLLECTED,
    TestStatus.PROCESSING,
    TestStatus.COMPLETED,
]
TERMINAL = {TestStatus.COMPLETED, TestStatus.CANCELLED}


def transition_allowed(current: str, new: str) -> bool:
    """Forward-only lifecycle; Cancelled is reachable from any open state."""
    if current == new:
        return True
    if current in TERMINAL:
        return False
    if new == TestStatus.CANCELLED:
        return True
    return LIFECYCLE.index(new) > LIFECYCLE.index(current)


def serialize_order(order: TestOrder) -> dict[str, object]:
    return {
        'id': str(order.id),
        'userId': str(order.user_id),
        'status': order.status,
        'lab': {
            'id': str(order.lab.id),
            'name': order.lab.name,
            'phoneNumber': order.lab.phone_number,
            'email': order.lab.email,
        },
        'details': [
            {
                'id': d.id,
                'remark': d.remark,
                'testCatalog': {
                    'id': str(d.catalog.id),
                    'testName': d.catalog.test_name,
                    'description': d.catalog.description,
                    'price': str(d.catalog.price),
                },
            }
            for d in order.details.all()
        ],
        'createdAt': order.created_at.isoformat(),
        'updatedAt': order.updated_at.isoformat(),
    }


def _own_orders(actor: ActorContext):
    return (
        TestOrder.objects.filter(user_id=actor.id)
        .select_related('lab')
        .prefetch_related('details__catalog')
    )


def create_order(actor: ActorContext, lab_id: uuid.UUID, details: list[dict]) -> TestOrder:
    lab = Lab.objects.filter(pk=lab_id).first()
    if lab is None:
        raise NotFound('Lab not found')
    wanted = {d['catalog_id'] for d in details}
    found = set(TestCatalog.objects.filter(id__in=wanted).values_list('id', flat=True))
    missing = wanted - found
    if missing:
        raise ValidationError({
            'details': [f'Test catalog entry {c} not found' for c in sorted(map(str, missing))],
        })

    with transaction.atomic():
        order = TestOrder.objects.create(user_id=actor.id, lab=lab)
        TestDetail.objects.bulk_create([
            TestDetail(order=order, catalog_id=d['catalog_id'], remark=d.get('remark') or '')
            for d in details
        ])
    logger.info('order %s placed by %s at lab %s (%d test(s))', order.id, actor.id, lab.id, len(details))
    return _own_orders(actor).get(pk=order.pk)


def list_orders(actor: ActorContext) -> list[TestOrder]:
    return list(_own_orders(actor).order_by('-created_at'))


def get_order(actor: ActorContext, order_id: uuid.UUID) -> TestOrder:
    order = _own_orders(actor).filter(pk=order_id).first()
    if order is None:
        raise NotFound('Test order not found')
    return order


def update_status(actor: ActorContext, order_id: uuid.UUID, new_status: str) -> TestOrder:
    order = get_order(actor, order_id)
    if settings.ORDER_STATUS_STRICT and not transition_allowed(order.status, new_status):
        raise ValidationError({'status': [f'Cannot move order from {order.status} to {new_status}']})
    previous = order.status
    order.status = new_status
    order.save(update_fields=['status', 'updated_at'])
    logger.info('order %s status %s -> %s', order.id, previous, new_status)
    return order


def remove_order(actor: ActorContext, order_id: uuid.UUID) -> None:
    order = get_order(actor, order_id)
    # details go with the order (cascade)
    order.delete()
    logger.info('order %s deleted by %s', order_id, actor.id)
