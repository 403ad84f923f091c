"""
Role policy for user administration.

Pure decision functions over an :class:`ActorContext` and a target.  Each
decision carries the name of the rule that produced it so that denials
can be logged precisely while callers only ever see a generic message.
Nothing here touches the database.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from rest_framework.exceptions import NotFound, PermissionDenied

from .models import Role

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActorContext:
    """The authenticated caller, passed explicitly into every service call."""
    id: uuid.UUID
    role: str
    email: str = ''

    @classmethod
    def from_user(cls, user) -> 'ActorContext':
        return cls(id=user.id, role=user.role, email=getattr(user, 'email', ''))

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass(frozen=True)
class Decision:
    allowed: bool
    rule: str

    def __bool__(self) -> bool:
        return self.allowed


# Roles each actor may create through the administration endpoints.
# Admins never create Staff directly; Staff always belongs to a Manager.
CREATABLE_ROLES = {
    Role.ADMIN: frozenset({Role.MANAGER, Role.CLIENT}),
    Role.MANAGER: frozenset({Role.STAFF}),
    Role.STAFF: frozenset(),
    Role.CLIENT: frozenset(),
}


def can_create(actor: ActorContext, requested_role: str) -> Decision:
    allowed = CREATABLE_ROLES.get(actor.role, frozenset())
    if requested_role in allowed:
        return Decision(True, f'{actor.role.lower()}-creates-{requested_role.lower()}')
    if actor.role == Role.ADMIN and requested_role == Role.STAFF:
        return Decision(False, 'admin-cannot-create-staff')
    return Decision(False, f'{actor.role.lower()}-cannot-create-{str(requested_role).lower()}')


def can_list(actor: ActorContext) -> Decision:
    if actor.role == Role.ADMIN:
        return Decision(True, 'admin-lists-managers-and-staff')
    if actor.role == Role.MANAGER:
        return Decision(True, 'manager-lists-own-staff')
    return Decision(False, f'{actor.role.lower()}-cannot-list-users')


def _manages(actor: ActorContext, target) -> bool:
    return target.role == Role.STAFF and getattr(target, 'managed_by_id', None) == actor.id


def can_view(actor: ActorContext, target) -> Decision:
    if actor.role == Role.ADMIN:
        return Decision(True, 'admin-views-any')
    if actor.role == Role.MANAGER:
        if _manages(actor, target):
            return Decision(True, 'manager-views-managed-staff')
        if target.role == Role.CLIENT:
            return Decision(True, 'manager-views-client')
        return Decision(False, 'manager-views-only-own-staff-or-clients')
    return Decision(False, f'{actor.role.lower()}-cannot-view-users')


def can_mutate(actor: ActorContext, target) -> Decision:
    if actor.role == Role.ADMIN:
        if target.role == Role.MANAGER:
            return Decision(True, 'admin-mutates-manager')
        return Decision(False, 'admin-mutates-only-managers')
    if actor.role == Role.MANAGER:
        if _manages(actor, target):
            return Decision(True, 'manager-mutates-managed-staff')
        return Decision(False, 'manager-mutates-only-own-staff')
    return Decision(False, f'{actor.role.lower()}-cannot-mutate-users')


def can_access_lab(actor: ActorContext, manages_lab: bool) -> Decision:
    """Lab detail and edits: admins, or a manager linked to the lab."""
    if actor.role == Role.ADMIN:
        return Decision(True, 'admin-accesses-any-lab')
    if actor.role == Role.MANAGER and manages_lab:
        return Decision(True, 'manager-accesses-own-lab')
    return Decision(False, 'lab-access-requires-admin-or-linked-manager')


def can_reassign_lab_managers(actor: ActorContext) -> Decision:
    if actor.role == Role.ADMIN:
        return Decision(True, 'admin-reassigns-lab-managers')
    return Decision(False, 'only-admin-reassigns-lab-managers')


def enforce(decision: Decision, actor: ActorContext, action: str, target_id: Optional[uuid.UUID] = None) -> None:
    """Raise ``PermissionDenied`` for a denial, logging the rule."""
    if decision:
        return
    logger.warning('policy denied %s by %s (%s) target=%s rule=%s',
                   action, actor.id, actor.role, target_id, decision.rule)
    raise PermissionDenied('You do not have permission to perform this action.')


def enforce_hidden(decision: Decision, actor: ActorContext, action: str, target_id: Optional[uuid.UUID] = None,
                   message: str = 'User not found') -> None:
    """Like :func:`enforce` but reports the denial as a missing resource."""
    if decision:
        return
    logger.warning('policy denied %s by %s (%s) target=%s rule=%s (reported as not found)',
                   action, actor.id, actor.role, target_id, decision.rule)
    raise NotFound(message)
