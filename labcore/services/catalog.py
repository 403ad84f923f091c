from __future__ import annotations

import logging
import uuid

from django.db import transaction
from rest_framework.exceptions import NotFound

from labcore.exceptions import Conflict
from labcore.models import TestCatalog
from labcore.services.pagination import paginate

logger = logging.getLogger(__name__)


def serialize_catalog(entry: TestCatalog) -> dict[str, object]:
    return {
        'id': str(entry.id),
        'testName': entry.test_name,
        'description': entry.description,
        'price': str(entry.price),
        'createdAt': entry.created_at.isoformat(),
        'updatedAt': entry.updated_at.isoformat(),
    }


def _entry_or_404(entry_id: uuid.UUID) -> TestCatalog:
    entry = TestCatalog.objects.filter(pk=entry_id).first()
    if entry is None:
        raise NotFound('Test catalog entry not found')
    return entry


def _ensure_name_free(test_name: str, exclude_id=None) -> None:
    qs = TestCatalog.objects.filter(test_name=test_name)
    if exclude_id is not None:
        qs = qs.exclude(pk=exclude_id)
    if qs.exists():
        raise Conflict(f'Test "{test_name}" already exists in the catalog')


def create_entry(data: dict) -> TestCatalog:
    _ensure_name_free(data['test_name'])
    with transaction.atomic():
        entry = TestCatalog.objects.create(
            test_name=data['test_name'],
            description=data.get('description') or '',
            price=data['price'],
        )
    logger.info('catalog entry %s created (%s)', entry.id, entry.test_name)
    return entry


def list_entries(page: int, page_size: int):
    return paginate(TestCatalog.objects.order_by('test_name'), page, page_size)


def get_entry(entry_id: uuid.UUID) -> TestCatalog:
    return _entry_or_404(entry_id)


def update_entry(entry_id: uuid.UUID, data: dict) -> TestCatalog:
    entry = _entry_or_404(entry_id)
    if 'test_name' in data and data['test_name'] != entry.test_name:
        _ensure_name_free(data['test_name'], exclude_id=entry.id)
    with transaction.atomic():
        for field in ('test_name', 'description', 'price'):
            if field in data:
                setattr(entry, field, data[field])
        entry.save()
    return entry


def delete_entry(entry_id: uuid.UUID) -> None:
    entry = _entry_or_404(entry_id)
    entry.is_deleted = True
    entry.save(update_fields=['is_deleted', 'updated_at'])
    logger.info('catalog entry %s soft-deleted', entry.id)
