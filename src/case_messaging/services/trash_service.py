from __future__ import annotations

import logging
import uuid
from collections.abc import Awaitable, Callable
from datetime import timedelta

from case_messaging.application.dto.principal import Principal
from case_messaging.application.dto.trash import TrashStatsDTO
from case_messaging.application.exceptions import ConflictError, ValidationError
from case_messaging.application.policies.permissions import assert_staff, assert_trash_access
from case_messaging.application.ports.clock import Clock, system_clock
from case_messaging.application.snapshots import message_from_snapshot
from case_messaging.application.uow import UnitOfWork
from case_messaging.domain.entities.trash import TrashEntry
from case_messaging.domain.value_objects.enums import TrashItemType

logger = logging.getLogger(__name__)

EXPIRY_NOTICE = timedelta(days=7)


async def _restore_message(entry: TrashEntry, uow: UnitOfWork) -> None:
    message = message_from_snapshot(entry.snapshot)
    if await uow.messages.get_by_id(message.id) is not None:
        raise ConflictError(f"A message with id {message.id} already exists")
    await uow.messages_w.create(message)


_RESTORERS: dict[TrashItemType, Callable[[TrashEntry, UnitOfWork], Awaitable[None]]] = {
    TrashItemType.MESSAGE: _restore_message,
}


async def list_trash(
    principal: Principal,
    uow: UnitOfWork,
    *,
    item_type: TrashItemType | None = None,
    page: int = 1,
    limit: int = 50,
) -> list[TrashEntry]:
    """Staff see the whole trash, other users only what they deleted or owned."""
    return await uow.trash.list_entries(
        owner_id=None if principal.is_staff else principal.user_id,
        item_type=item_type.value if item_type else None,
        offset=(max(page, 1) - 1) * limit,
        limit=limit,
    )


async def restore(entry_id: uuid.UUID, principal: Principal, uow: UnitOfWork) -> TrashEntry:
    """Recreate the trashed entity and drop the entry in one commit.

    If the original id is taken again the entry stays in the trash.
    """
    entry = assert_trash_access(principal, await uow.trash.get_by_id(entry_id))
    restorer = _RESTORERS.get(entry.item_type)
    if restorer is None:
        raise ValidationError(f"Restoring {entry.item_type.value} items is not supported")

    try:
        await restorer(entry, uow)
        await uow.trash_w.delete(entry.id)
        await uow.commit()
    except Exception:
        await uow.rollback()
        raise

    logger.info(
        "Trash entry %s (%s %s) restored by user %d",
        entry.id, entry.item_type.value, entry.original_id, principal.user_id,
    )
    return entry


async def purge(entry_id: uuid.UUID, principal: Principal, uow: UnitOfWork) -> None:
    entry = assert_trash_access(principal, await uow.trash.get_by_id(entry_id))
    await uow.trash_w.delete(entry.id)
    await uow.commit()


async def empty_trash(principal: Principal, uow: UnitOfWork) -> int:
    assert_staff(principal)
    removed = await uow.trash_w.delete_all()
    await uow.commit()
    logger.info("Trash emptied by user %d (%d entries)", principal.user_id, removed)
    return removed


async def trash_stats(
    principal: Principal,
    uow: UnitOfWork,
    *,
    retention_days: int,
    clock: Clock = system_clock,
) -> TrashStatsDTO:
    owner_id = None if principal.is_staff else principal.user_id
    by_type = await uow.trash.count_by_type(owner_id=owner_id)

    # Entries deleted at the start of the retention window go first
    expiry_cutoff = clock.now() - timedelta(days=retention_days)
    expiring = await uow.trash.count_by_type(
        owner_id=owner_id,
        deleted_after=expiry_cutoff,
        deleted_before=expiry_cutoff + EXPIRY_NOTICE,
    )
    return TrashStatsDTO(
        total=sum(by_type.values()),
        by_type=by_type,
        expiring_soon=sum(expiring.values()),
    )


async def purge_expired(
    uow: UnitOfWork,
    *,
    retention_days: int,
    clock: Clock = system_clock,
) -> int:
    cutoff = clock.now() - timedelta(days=retention_days)
    removed = await uow.trash_w.delete_older_than(cutoff)
    await uow.commit()
    logger.info("Purged %d trash entries deleted before %s", removed, cutoff.isoformat())
    return removed
