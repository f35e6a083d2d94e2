"""Role-aware message routing.

``route_message`` is a pure function: every directory or case fact it needs
is resolved by the caller beforehand and handed over in a ``RoutingContext``.
Given the same context it always returns the same outcome.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import assert_never

from case_messaging.application.dto.message import RoutingOutcome
from case_messaging.application.exceptions import (
    ClientToClientForbidden,
    InvalidCopyRecipient,
    InvalidTarget,
    NoStaffAvailable,
    NotAuthorizedForCase,
    RecipientNotFound,
    SelfAddressed,
    TargetRequired,
)
from case_messaging.domain.entities.user import DirectoryUser
from case_messaging.domain.value_objects.enums import MessageCategory, Role, RoleTier, tier_of


@dataclass(frozen=True, slots=True)
class RoutingRequest:
    sender_id: int
    sender_role: Role
    target: int | None = None
    copy: tuple[int, ...] = ()
    case_ref: str | None = None


@dataclass(frozen=True, slots=True)
class RoutingContext:
    """Directory facts resolved for one routing decision."""

    active_staff: tuple[DirectoryUser, ...] = ()
    target_user: DirectoryUser | None = None
    copy_users: tuple[DirectoryUser, ...] = ()
    case_transmitted: bool | None = None


def route_message(request: RoutingRequest, context: RoutingContext) -> RoutingOutcome:
    """Compute recipients, copies and category, or raise a ``RoutingError``."""
    tier = tier_of(request.sender_role)
    match tier:
        case RoleTier.CLIENT:
            return _route_client(request, context)
        case RoleTier.PARTNER:
            return _route_partner(request, context)
        case RoleTier.STAFF:
            return _route_staff(request, context)
        case RoleTier.RESTRICTED:
            return _route_restricted(request, context)
        case _:
            assert_never(tier)


def copy_candidates(request: RoutingRequest) -> tuple[int, ...]:
    """Copy ids left after silently dropping the sender and the target."""
    dropped = {request.sender_id, request.target}
    seen: list[int] = []
    for user_id in request.copy:
        if user_id in dropped or user_id in seen:
            continue
        seen.append(user_id)
    return tuple(seen)


def _all_staff(request: RoutingRequest, context: RoutingContext) -> frozenset[int]:
    staff = frozenset(
        u.id for u in context.active_staff if u.active and u.id != request.sender_id
    )
    if not staff:
        raise NoStaffAvailable()
    return staff


def _is_usable(user: DirectoryUser, user_id: int | None) -> bool:
    return user.active and user.id == user_id


def _route_client(request: RoutingRequest, context: RoutingContext) -> RoutingOutcome:
    # target and copy are ignored for clients
    return RoutingOutcome(
        recipients=_all_staff(request, context),
        copies=frozenset(),
        category=MessageCategory.CLIENT_TO_STAFF,
    )


def _route_partner(request: RoutingRequest, context: RoutingContext) -> RoutingOutcome:
    if request.case_ref is not None and not context.case_transmitted:
        raise NotAuthorizedForCase()

    if request.target is not None:
        target = context.target_user
        if target is None or not _is_usable(target, request.target) or not target.is_staff:
            raise InvalidTarget()
        recipients = frozenset({request.target})
    else:
        recipients = _all_staff(request, context)

    return RoutingOutcome(
        recipients=recipients,
        copies=frozenset(),
        category=MessageCategory.PARTNER_TO_STAFF,
    )


def _route_staff(request: RoutingRequest, context: RoutingContext) -> RoutingOutcome:
    if request.target is None:
        raise TargetRequired()
    if request.target == request.sender_id:
        raise SelfAddressed()

    target = context.target_user
    if target is None or not _is_usable(target, request.target):
        raise RecipientNotFound()

    if target.tier is RoleTier.CLIENT:
        category = MessageCategory.STAFF_TO_CLIENT
    else:
        category = MessageCategory.STAFF_TO_STAFF

    resolved = {u.id: u for u in context.copy_users if u.active}
    copies: set[int] = set()
    for user_id in copy_candidates(request):
        if user_id not in resolved:
            raise InvalidCopyRecipient(f"Copy recipient {user_id} not found or inactive")
        copies.add(user_id)

    return RoutingOutcome(
        recipients=frozenset({request.target}),
        copies=frozenset(copies),
        category=category,
    )


def _route_restricted(request: RoutingRequest, context: RoutingContext) -> RoutingOutcome:
    recipients: frozenset[int] | None = None
    if request.target is not None:
        target = context.target_user
        if target is None or not _is_usable(target, request.target):
            raise RecipientNotFound()
        if target.tier is RoleTier.CLIENT:
            raise ClientToClientForbidden()
        if target.is_staff and target.id != request.sender_id:
            recipients = frozenset({target.id})

    return RoutingOutcome(
        recipients=recipients or _all_staff(request, context),
        copies=frozenset(),
        category=MessageCategory.CLIENT_TO_STAFF,
    )
