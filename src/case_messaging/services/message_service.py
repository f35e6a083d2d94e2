from __future__ import annotations

import logging
import uuid
from dataclasses import replace

from case_messaging.application.dto.message import (
    ComposeMessageDTO,
    FannedOut,
    Persisted,
)
from case_messaging.application.dto.principal import Principal
from case_messaging.application.exceptions import (
    CaseRequiredError,
    NotFoundError,
    ValidationError,
)
from case_messaging.application.policies.permissions import can_delete_message
from case_messaging.application.policies.routing import (
    RoutingContext,
    RoutingRequest,
    copy_candidates,
    route_message,
)
from case_messaging.application.ports.clock import Clock, system_clock
from case_messaging.application.ports.sms import SmsDispatcher
from case_messaging.application.snapshots import message_to_snapshot
from case_messaging.application.uow import UnitOfWork
from case_messaging.domain.entities.message import MAX_ATTACHMENTS, Marker, Message
from case_messaging.domain.entities.trash import TrashEntry
from case_messaging.domain.entities.user import DirectoryUser
from case_messaging.domain.value_objects.enums import RoleTier, TrashItemType
from case_messaging.services import notification_service

logger = logging.getLogger(__name__)


async def _routing_context(request: RoutingRequest, tier: RoleTier, uow: UnitOfWork) -> RoutingContext:
    target_user = None
    if request.target is not None:
        target_user = await uow.directory.resolve_user(request.target)

    active_staff: list[DirectoryUser] = []
    if tier is not RoleTier.STAFF:
        active_staff = await uow.directory.list_active_staff()

    copy_users: list[DirectoryUser] = []
    candidates = copy_candidates(request)
    if tier is RoleTier.STAFF and candidates:
        copy_users = await uow.directory.resolve_users(list(candidates))

    case_transmitted = None
    if tier is RoleTier.PARTNER and request.case_ref is not None:
        case_transmitted = await uow.cases.is_transmitted_to_partner(
            request.case_ref, request.sender_id,
        )

    return RoutingContext(
        active_staff=tuple(active_staff),
        target_user=target_user,
        copy_users=tuple(copy_users),
        case_transmitted=case_transmitted,
    )


async def persist_message(
    dto: ComposeMessageDTO,
    principal: Principal,
    uow: UnitOfWork,
    *,
    clock: Clock = system_clock,
) -> Persisted:
    """Validate, route and store a new message.

    Nothing is written if validation or routing fails. No notification is
    created here; see ``fan_out``.
    """
    subject = dto.subject.strip()
    body = dto.body.strip()
    if not subject or not body:
        raise ValidationError("Subject and body are required")
    if len(dto.attachments) > MAX_ATTACHMENTS:
        raise ValidationError(f"A message carries at most {MAX_ATTACHMENTS} attachments")

    message_id = uuid.uuid4()
    if dto.parent_id is not None:
        parent = await uow.messages.get_by_id(dto.parent_id)
        if parent is None or not (principal.is_staff or parent.is_involved(principal.user_id)):
            raise NotFoundError("Parent message not found")
        thread_id = parent.thread_id
        case_ref = parent.case_ref or _clean(dto.case_ref)
        if case_ref is None:
            logger.warning(
                "Reply %s to %s has no case reference to inherit", message_id, parent.id,
            )
    else:
        thread_id = str(message_id)
        case_ref = _clean(dto.case_ref)
        if case_ref is None:
            raise CaseRequiredError()

    request = RoutingRequest(
        sender_id=principal.user_id,
        sender_role=principal.role,
        target=dto.target,
        copy=tuple(dto.copy),
        case_ref=case_ref,
    )
    routing = route_message(request, await _routing_context(request, principal.tier, uow))

    now = clock.now()
    attachments = tuple(
        a if a.uploaded_at is not None else replace(a, uploaded_at=now)
        for a in dto.attachments
    )
    message = Message(
        id=message_id,
        thread_id=thread_id,
        parent_id=dto.parent_id,
        sender_id=principal.user_id,
        recipient_ids=routing.recipients,
        copy_ids=routing.copies,
        category=routing.category,
        subject=subject,
        body=body,
        case_ref=case_ref,
        created_at=now,
        attachments=attachments,
        read_by=(Marker(user_id=principal.user_id, at=now),),
    )
    message = await uow.messages_w.create(message)
    await uow.commit()

    logger.info(
        "Message %s (%s) sent by user %d to %d recipient(s), %d in copy",
        message.id, message.category.value, principal.user_id,
        len(routing.recipients), len(routing.copies),
    )
    return Persisted(message=message, routing=routing)


def _clean(case_ref: str | None) -> str | None:
    if case_ref is None:
        return None
    return case_ref.strip() or None


async def fan_out(
    persisted: Persisted,
    principal: Principal,
    uow: UnitOfWork,
    *,
    sms: SmsDispatcher | None = None,
    notify_observers: bool = True,
    clock: Clock = system_clock,
) -> FannedOut:
    report = await notification_service.on_message_created(
        persisted.message,
        persisted.routing,
        principal,
        uow,
        sms=sms,
        notify_observers=notify_observers,
        clock=clock,
    )
    if report.failed:
        logger.warning(
            "Fan-out for message %s: %d notification(s) failed",
            persisted.message.id, report.failed,
        )
    return FannedOut(message=persisted.message, routing=persisted.routing, report=report)


async def create_message(
    dto: ComposeMessageDTO,
    principal: Principal,
    uow: UnitOfWork,
    *,
    sms: SmsDispatcher | None = None,
    notify_observers: bool = True,
    clock: Clock = system_clock,
) -> FannedOut:
    persisted = await persist_message(dto, principal, uow, clock=clock)
    return await fan_out(
        persisted, principal, uow,
        sms=sms, notify_observers=notify_observers, clock=clock,
    )


async def list_recipients(principal: Principal, uow: UnitOfWork) -> list[DirectoryUser]:
    """Users the principal may address: staff may write to anyone, others to staff only."""
    if principal.is_staff:
        users = await uow.directory.list_active_users()
    else:
        users = await uow.directory.list_active_staff()
    return sorted(
        (u for u in users if u.active and u.id != principal.user_id),
        key=lambda u: (u.display_name.lower(), u.id),
    )


async def _trash_and_delete(
    message: Message,
    principal: Principal,
    uow: UnitOfWork,
    clock: Clock,
) -> None:
    try:
        await uow.trash_w.add(
            TrashEntry(
                id=uuid.uuid4(),
                item_type=TrashItemType.MESSAGE,
                original_id=str(message.id),
                snapshot=message_to_snapshot(message),
                deleted_by=principal.user_id,
                original_owner=message.sender_id,
                deleted_at=clock.now(),
                origin="messages",
                metadata={"subject": message.subject, "case_ref": message.case_ref},
            )
        )
        if not await uow.messages_w.delete(message.id):
            raise NotFoundError("Message not found")
        await uow.commit()
    except Exception:
        await uow.rollback()
        raise


async def delete_message(
    message_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
    *,
    clock: Clock = system_clock,
) -> None:
    """Snapshot the message into the trash, then delete it.

    Any failure rolls both steps back and leaves the message in place.
    """
    message = await uow.messages.get_by_id(message_id)
    if message is None or not can_delete_message(principal, message):
        raise NotFoundError("Message not found")
    await _trash_and_delete(message, principal, uow, clock)
    logger.info("Message %s moved to trash by user %d", message_id, principal.user_id)


async def batch_delete(
    message_ids: list[uuid.UUID],
    principal: Principal,
    uow: UnitOfWork,
    *,
    clock: Clock = system_clock,
) -> int:
    """Trash every listed message the principal may delete and return how many went.

    Each message is committed on its own. One that fails is rolled back, logged
    and skipped; the ones before it stay in the trash.
    """
    messages = await uow.messages.list_by_ids(list(dict.fromkeys(message_ids)))
    deleted = 0
    for message in messages:
        if not can_delete_message(principal, message):
            continue
        try:
            await _trash_and_delete(message, principal, uow, clock)
        except Exception:
            logger.exception("Could not move message %s to trash", message.id)
            continue
        deleted += 1
    if deleted:
        logger.info("User %d moved %d message(s) to trash", principal.user_id, deleted)
    return deleted
