from __future__ import annotations

import logging
import uuid
from dataclasses import replace

from case_messaging.application.dto.principal import Principal
from case_messaging.application.policies.permissions import assert_message_access
from case_messaging.application.ports.clock import Clock, system_clock
from case_messaging.application.uow import UnitOfWork
from case_messaging.domain.entities.message import Marker, Message
from case_messaging.domain.value_objects.enums import MarkerKind
from case_messaging.services import notification_service

logger = logging.getLogger(__name__)


async def _visible_message(
    message_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
) -> Message:
    message = await uow.messages.get_by_id(message_id)
    return assert_message_access(principal, message)


async def _fan_out_reads(
    reads: list[Message],
    principal: Principal,
    uow: UnitOfWork,
    clock: Clock,
) -> None:
    for message in reads:
        await notification_service.on_message_read(message, principal, uow, clock=clock)


async def _add(
    message_id: uuid.UUID,
    principal: Principal,
    kind: MarkerKind,
    uow: UnitOfWork,
    clock: Clock,
) -> tuple[Message, bool, list[Marker]]:
    message = await _visible_message(message_id, principal, uow)
    inserted = await uow.markers.add_if_absent(message_id, principal.user_id, kind, clock.now())
    markers = await uow.markers.list_for(message_id, kind)
    await uow.commit()
    return message, inserted, markers


async def _remove(
    message_id: uuid.UUID,
    principal: Principal,
    kind: MarkerKind,
    uow: UnitOfWork,
) -> list[Marker]:
    await _visible_message(message_id, principal, uow)
    if await uow.markers.remove(message_id, principal.user_id, kind):
        await uow.commit()
    return await uow.markers.list_for(message_id, kind)


async def mark_read(
    message_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
    *,
    clock: Clock = system_clock,
) -> list[Marker]:
    """Append the user's read marker if absent and return the message's read markers.

    The first transition fans out ``message_read`` notifications once the
    marker is committed.
    """
    message, inserted, markers = await _add(message_id, principal, MarkerKind.READ, uow, clock)
    if inserted:
        await _fan_out_reads([replace(message, read_by=tuple(markers))], principal, uow, clock)
    return markers


async def mark_unread(
    message_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
) -> list[Marker]:
    return await _remove(message_id, principal, MarkerKind.READ, uow)


async def is_read(message_id: uuid.UUID, principal: Principal, uow: UnitOfWork) -> bool:
    message = await _visible_message(message_id, principal, uow)
    return message.is_read_by(principal.user_id)


async def archive(
    message_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
    *,
    clock: Clock = system_clock,
) -> list[Marker]:
    _, _, markers = await _add(message_id, principal, MarkerKind.ARCHIVED, uow, clock)
    return markers


async def unarchive(
    message_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
) -> list[Marker]:
    return await _remove(message_id, principal, MarkerKind.ARCHIVED, uow)


async def is_archived(message_id: uuid.UUID, principal: Principal, uow: UnitOfWork) -> bool:
    message = await _visible_message(message_id, principal, uow)
    return message.is_archived_by(principal.user_id)


async def _visible_batch(
    message_ids: list[uuid.UUID],
    principal: Principal,
    uow: UnitOfWork,
) -> list[Message]:
    # Ids the user cannot see are skipped, not reported
    unique = list(dict.fromkeys(message_ids))
    messages = await uow.messages.list_by_ids(unique)
    return [m for m in messages if m.is_involved(principal.user_id)]


async def batch_mark_read(
    message_ids: list[uuid.UUID],
    principal: Principal,
    uow: UnitOfWork,
    *,
    clock: Clock = system_clock,
) -> int:
    now = clock.now()
    reads: list[Message] = []
    for message in await _visible_batch(message_ids, principal, uow):
        if await uow.markers.add_if_absent(message.id, principal.user_id, MarkerKind.READ, now):
            markers = await uow.markers.list_for(message.id, MarkerKind.READ)
            reads.append(replace(message, read_by=tuple(markers)))
    if reads:
        await uow.commit()
        logger.debug("User %d marked %d message(s) read", principal.user_id, len(reads))
        await _fan_out_reads(reads, principal, uow, clock)
    return len(reads)


async def batch_mark_unread(
    message_ids: list[uuid.UUID],
    principal: Principal,
    uow: UnitOfWork,
) -> int:
    changed = 0
    for message in await _visible_batch(message_ids, principal, uow):
        if await uow.markers.remove(message.id, principal.user_id, MarkerKind.READ):
            changed += 1
    if changed:
        await uow.commit()
    return changed


async def batch_archive(
    message_ids: list[uuid.UUID],
    principal: Principal,
    uow: UnitOfWork,
    *,
    clock: Clock = system_clock,
) -> int:
    now = clock.now()
    changed = 0
    for message in await _visible_batch(message_ids, principal, uow):
        if await uow.markers.add_if_absent(message.id, principal.user_id, MarkerKind.ARCHIVED, now):
            changed += 1
    if changed:
        await uow.commit()
    return changed
