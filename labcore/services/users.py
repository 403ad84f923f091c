"""
User administration under the role hierarchy.

Admins administer Managers (and may onboard Clients); Managers
administer the Staff they manage.  Every call takes an explicit
:class:`~labcore.policy.ActorContext`.  Creation writes the user, its
lab-manager links and its address in one transaction; mail goes out
after the commit and never undoes it.
"""
from __future__ import annotations

import logging
import secrets
import uuid
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.db.models import Prefetch, Q
from rest_framework.exceptions import NotFound, ValidationError

from labcore import policy
from labcore.exceptions import Conflict
from labcore.models import EntityType, Lab, LabManager, Role, User
from labcore.policy import ActorContext
from labcore.services import addresses, notifications
from labcore.services.auth import check_password_strength, new_token
from labcore.services.pagination import paginate

logger = logging.getLogger(__name__)


def _lab_of(user: User) -> Optional[dict[str, object]]:
    links = getattr(user, 'prefetched_lab_links', None)
    if links is None:
        links = list(user.lab_links.select_related('lab').order_by('created_at'))
    for link in links:
        if not link.lab.is_deleted:
            return {'id': str(link.lab.id), 'name': link.lab.name}
    return None


def serialize_user(user: User, *, with_lab: bool = False, with_address: bool = False) -> dict[str, object]:
    data: dict[str, object] = {
        'id': str(user.id),
        'name': user.name,
        'email': user.email,
        'role': user.role,
        'isEmailVerified': user.is_email_verified,
        'createdBy': str(user.created_by_id) if user.created_by_id else None,
        'managedBy': str(user.managed_by_id) if user.managed_by_id else None,
        'createdAt': user.created_at.isoformat(),
        'updatedAt': user.updated_at.isoformat(),
    }
    if with_lab:
        data['lab'] = _lab_of(user) if user.role == Role.MANAGER else None
    if with_address:
        data['address'] = addresses.serialize_address(addresses.address_for(EntityType.USER, user.id))
    return data


def _with_labs(qs):
    return qs.prefetch_related(Prefetch(
        'lab_links',
        queryset=LabManager.objects.select_related('lab').order_by('created_at'),
        to_attr='prefetched_lab_links',
    ))


def _resolve_labs(lab_ids: list[uuid.UUID], role: str) -> list[Lab]:
    if role != Role.MANAGER:
        raise ValidationError({'labIds': ['Labs can only be assigned to managers']})
    wanted = set(lab_ids)
    labs = list(Lab.objects.filter(id__in=wanted))
    missing = wanted - {lab.id for lab in labs}
    if missing:
        raise ValidationError({'labIds': [f'Lab {lab_id} not found' for lab_id in sorted(map(str, missing))]})
    return labs


def _ensure_email_free(email: str, exclude_id: Optional[uuid.UUID] = None) -> None:
    qs = User.objects.filter(email=email)
    if exclude_id is not None:
        qs = qs.exclude(pk=exclude_id)
    if qs.exists():
        raise Conflict('User with this email already exists')


def create_user(actor: ActorContext, data: dict) -> User:
    role = data['role']
    policy.enforce(policy.can_create(actor, role), actor, 'create-user')
    _ensure_email_free(data['email'])

    lab_ids = data.get('lab_ids')
    labs = _resolve_labs(lab_ids, role) if lab_ids else []

    password = data.get('password') or secrets.token_urlsafe(12)
    check_password_strength(password, User(email=data['email'], name=data['name']))
    token, expiry = new_token(settings.EMAIL_VERIFICATION_HOURS)

    with transaction.atomic():
        user = User(
            name=data['name'],
            email=data['email'],
            role=role,
            created_by_id=actor.id,
            managed_by_id=actor.id if role == Role.STAFF else None,
            email_verification_token=token,
            email_verification_token_expiry=expiry,
        )
        user.set_password(password)
        user.save()
        if labs:
            LabManager.objects.bulk_create(
                [LabManager(lab=lab, user=user) for lab in labs], ignore_conflicts=True
            )
        if data.get('address'):
            addresses.create_address(EntityType.USER, user.id, data['address'])

    logger.info('user %s (%s) created by %s', user.id, role, actor.id)
    notifications.send_credentials_email(user, password)
    notifications.send_verification_email(user, token)
    return user


def list_users(actor: ActorContext) -> list[User]:
    policy.enforce(policy.can_list(actor), actor, 'list-users')
    if actor.role == Role.ADMIN:
        qs = _with_labs(User.objects.filter(role__in=[Role.MANAGER, Role.STAFF]))
    else:
        # staff reachable through either relation is visible
        qs = User.objects.filter(role=Role.STAFF).filter(Q(managed_by_id=actor.id) | Q(created_by_id=actor.id))
    return list(qs.order_by('-created_at'))


def get_user(actor: ActorContext, user_id: uuid.UUID) -> User:
    target = User.objects.filter(pk=user_id).first()
    if target is None:
        raise NotFound('User not found')
    policy.enforce(policy.can_view(actor, target), actor, 'view-user', target.id)
    return target


def _target_for_mutation(actor: ActorContext, user_id: uuid.UUID, action: str) -> User:
    target = User.objects.filter(pk=user_id).first()
    if target is None:
        raise NotFound('User not found')
    # out-of-scope targets are indistinguishable from absent ones
    policy.enforce_hidden(policy.can_mutate(actor, target), actor, action, target.id)
    return target


def update_user(actor: ActorContext, user_id: uuid.UUID, data: dict) -> User:
    target = _target_for_mutation(actor, user_id, 'update-user')

    if 'email' in data and data['email'] != target.email:
        _ensure_email_free(data['email'], exclude_id=target.id)
    lab_ids = data.get('lab_ids')
    labs = None
    if lab_ids:
        labs = _resolve_labs(lab_ids, target.role)
    elif lab_ids is not None and target.role == Role.MANAGER:
        labs = []
    if data.get('password'):
        check_password_strength(data['password'], target)

    with transaction.atomic():
        for field in ('name', 'email'):
            if field in data:
                setattr(target, field, data[field])
        if data.get('password'):
            target.set_password(data['password'])
        target.save()
        if labs is not None:
            LabManager.objects.filter(user=target).delete()
            LabManager.objects.bulk_create([LabManager(lab=lab, user=target) for lab in labs])
        if data.get('address'):
            addresses.upsert_address(EntityType.USER, target.id, data['address'])

    logger.info('user %s updated by %s', target.id, actor.id)
    return target


def delete_user(actor: ActorContext, user_id: uuid.UUID) -> None:
    target = _target_for_mutation(actor, user_id, 'delete-user')
    target.is_deleted = True
    target.save(update_fields=['is_deleted', 'updated_at'])
    logger.info('user %s soft-deleted by %s', target.id, actor.id)


def managers_with_staff(page: int, page_size: int):
    qs = _with_labs(User.objects.filter(role__in=[Role.MANAGER, Role.STAFF])).order_by('-created_at')
    return paginate(qs, page, page_size)


def staff_by_manager(manager_id: uuid.UUID, page: int, page_size: int):
    if not User.objects.filter(pk=manager_id, role=Role.MANAGER).exists():
        raise NotFound('Manager not found')
    qs = User.objects.filter(role=Role.STAFF, managed_by_id=manager_id).order_by('-created_at')
    return paginate(qs, page, page_size)
