"""In-app notification fan-out for message events, plus the notification inbox.

The fan-out runs after the message operation has been committed. Every
recipient is handled on its own: a failure is logged, rolled back and
skipped, and never reaches the caller of the triggering operation.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import timedelta
from typing import Any

from case_messaging.application.dto.message import FanoutReport, RoutingOutcome
from case_messaging.application.dto.principal import Principal
from case_messaging.application.policies.observers import select_observers
from case_messaging.application.policies.permissions import assert_notification_owner
from case_messaging.application.ports.clock import Clock, system_clock
from case_messaging.application.ports.sms import SmsDispatcher
from case_messaging.application.uow import UnitOfWork
from case_messaging.domain.entities.message import Message
from case_messaging.domain.entities.notification import Notification
from case_messaging.domain.entities.user import DirectoryUser
from case_messaging.domain.value_objects.enums import (
    MessageCategory,
    NotificationKind,
    RoleTier,
)

logger = logging.getLogger(__name__)

SMS_MESSAGE_RECEIVED = "message_received"


def dedupe_key(kind: NotificationKind, message_id: uuid.UUID, transition: str) -> str:
    return f"{kind.value}:{message_id}:{transition}"


def message_link(user: DirectoryUser | None, message_id: uuid.UUID) -> str:
    if user is not None and user.tier is RoleTier.CLIENT:
        return f"/client/messages/{message_id}"
    return f"/admin/messages/{message_id}"


async def _rollback_quietly(uow: UnitOfWork) -> None:
    try:
        await uow.rollback()
    except Exception:
        logger.exception("Rollback after failed notification also failed")


async def _notify_once(
    uow: UnitOfWork,
    report: FanoutReport,
    *,
    actor_id: int,
    recipient_id: int,
    kind: NotificationKind,
    message: Message,
    transition: str,
    title: str,
    body: str,
    link: str,
    metadata: dict[str, Any],
    clock: Clock,
    window: timedelta | None = None,
) -> None:
    """Create one notification unless it already exists for this recipient and event.

    ``window`` limits the existence check to recent notifications, for kinds
    that may legitimately repeat (e.g. once per day).
    """
    if recipient_id == actor_id:
        report.skipped += 1
        return

    key = dedupe_key(kind, message.id, transition)
    try:
        now = clock.now()
        since = now - window if window is not None else None
        if await uow.notifications.exists(recipient_id, key, since=since):
            report.skipped += 1
            return
        await uow.notifications_w.create(
            Notification(
                id=uuid.uuid4(),
                recipient_id=recipient_id,
                kind=kind,
                title=title,
                body=body,
                link=link,
                message_id=message.id,
                dedupe_key=key,
                created_at=now,
                metadata={"message_id": str(message.id), **metadata},
            )
        )
        await uow.commit()
        report.created += 1
    except Exception:
        logger.exception(
            "Failed to create %s notification for user %d (message %s)",
            kind.value, recipient_id, message.id,
        )
        report.failed += 1
        await _rollback_quietly(uow)


async def _resolve(uow: UnitOfWork, user_ids: list[int]) -> dict[int, DirectoryUser]:
    if not user_ids:
        return {}
    try:
        users = await uow.directory.resolve_users(user_ids)
    except Exception:
        logger.exception("Directory lookup failed during fan-out for users %s", user_ids)
        return {}
    return {u.id: u for u in users}


async def _active_staff(uow: UnitOfWork) -> list[DirectoryUser]:
    try:
        return await uow.directory.list_active_staff()
    except Exception:
        logger.exception("Could not list active staff during fan-out")
        return []


async def on_message_created(
    message: Message,
    routing: RoutingOutcome,
    sender: Principal,
    uow: UnitOfWork,
    *,
    sms: SmsDispatcher | None = None,
    notify_observers: bool = True,
    clock: Clock = system_clock,
) -> FanoutReport:
    report = FanoutReport()
    users = await _resolve(uow, sorted(routing.recipients | routing.copies))
    common = {
        "sender_id": sender.user_id,
        "category": message.category.value,
    }

    if message.category is MessageCategory.CLIENT_TO_STAFF:
        for recipient_id in sorted(routing.recipients):
            await _notify_once(
                uow, report,
                actor_id=sender.user_id,
                recipient_id=recipient_id,
                kind=NotificationKind.MESSAGE_RECEIVED,
                message=message,
                transition="created",
                title="New client message",
                body=f'{sender.label} sent you a message: "{message.subject}"',
                link=message_link(users.get(recipient_id), message.id),
                metadata=common,
                clock=clock,
            )
        return report

    for recipient_id in sorted(routing.recipients):
        await _notify_once(
            uow, report,
            actor_id=sender.user_id,
            recipient_id=recipient_id,
            kind=NotificationKind.MESSAGE_RECEIVED,
            message=message,
            transition="created",
            title="New message",
            body=f'{sender.label} sent you a message: "{message.subject}"',
            link=message_link(users.get(recipient_id), message.id),
            metadata=common,
            clock=clock,
        )

    for copy_id in sorted(routing.copies):
        await _notify_once(
            uow, report,
            actor_id=sender.user_id,
            recipient_id=copy_id,
            kind=NotificationKind.MESSAGE_IN_COPY,
            message=message,
            transition="created",
            title="Message in copy",
            body=f'{sender.label} copied you on a message: "{message.subject}"',
            link=message_link(users.get(copy_id), message.id),
            metadata={**common, "is_copy": True},
            clock=clock,
        )

    observers = select_observers(
        message.category,
        await _active_staff(uow) if notify_observers else [],
        sender_id=sender.user_id,
        recipients=routing.recipients,
        copies=routing.copies,
        enabled=notify_observers,
    )
    if observers:
        target = users.get(routing.principal_target) if routing.principal_target else None
        target_label = target.display_name if target else "several recipients"
        for observer_id in observers:
            await _notify_once(
                uow, report,
                actor_id=sender.user_id,
                recipient_id=observer_id,
                kind=NotificationKind.MESSAGE_OBSERVED,
                message=message,
                transition="created",
                title="Message sent by a colleague",
                body=f'{sender.label} sent a message to {target_label}: "{message.subject}"',
                link=f"/admin/messages/{message.id}",
                metadata={**common, "target_id": routing.principal_target},
                clock=clock,
            )

    if message.category is MessageCategory.STAFF_TO_CLIENT and sms is not None:
        report.sms_sent = await _send_sms(message, routing, users, sender, sms)

    return report


async def _send_sms(
    message: Message,
    routing: RoutingOutcome,
    users: dict[int, DirectoryUser],
    sender: Principal,
    sms: SmsDispatcher,
) -> bool:
    target_id = routing.principal_target
    target = users.get(target_id) if target_id is not None else None
    if target is None or not target.phone:
        return False
    try:
        result = await sms.send_notification_sms(
            target.phone,
            SMS_MESSAGE_RECEIVED,
            {"sender_name": sender.label, "message_id": str(message.id)},
        )
    except Exception:
        logger.exception("SMS dispatch failed for message %s", message.id)
        return False
    if not result.success:
        logger.info(
            "SMS for message %s not sent (skipped=%s, reason=%s)",
            message.id, result.skipped, result.reason,
        )
    return result.success


async def on_message_read(
    message: Message,
    reader: Principal,
    uow: UnitOfWork,
    *,
    clock: Clock = system_clock,
) -> FanoutReport:
    """Fan out a first read of ``message`` by ``reader``.

    ``message.read_by`` must already contain the reader's marker.
    """
    report = FanoutReport()
    transition = f"read:{reader.user_id}"
    users = await _resolve(uow, [message.sender_id])
    sender_user = users.get(message.sender_id)
    metadata = {
        "read_by_id": reader.user_id,
        "read_by_name": reader.label,
        "read_by_role": reader.role.value,
    }

    await _notify_once(
        uow, report,
        actor_id=reader.user_id,
        recipient_id=message.sender_id,
        kind=NotificationKind.MESSAGE_READ,
        message=message,
        transition=transition,
        title="Message read",
        body=f'Your message "{message.subject}" was read by {reader.label}',
        link=message_link(sender_user, message.id),
        metadata=metadata,
        clock=clock,
    )

    if message.category is MessageCategory.CLIENT_TO_STAFF and reader.is_staff:
        already_read = {m.user_id for m in message.read_by}
        sender_label = sender_user.display_name if sender_user else f"user #{message.sender_id}"
        for staff in await _active_staff(uow):
            if staff.id in already_read or staff.id in (reader.user_id, message.sender_id):
                continue
            await _notify_once(
                uow, report,
                actor_id=reader.user_id,
                recipient_id=staff.id,
                kind=NotificationKind.MESSAGE_READ,
                message=message,
                transition=transition,
                title="Message read by a colleague",
                body=f"The message from {sender_label} was read by {reader.label}",
                link=f"/admin/messages/{message.id}",
                metadata={**metadata, "sender_id": message.sender_id},
                clock=clock,
            )

    return report


async def list_notifications(
    principal: Principal,
    read: bool | None,
    limit: int,
    uow: UnitOfWork,
) -> list[Notification]:
    return await uow.notifications.list_for_user(principal.user_id, read=read, limit=limit)


async def count_unread(principal: Principal, uow: UnitOfWork) -> int:
    return await uow.notifications.count_unread(principal.user_id)


async def mark_read(
    notification_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
) -> Notification:
    notification = await uow.notifications.get_by_id(notification_id)
    notification = assert_notification_owner(principal, notification)
    if notification.read:
        return notification
    await uow.notifications_w.mark_read(notification_id)
    await uow.commit()
    return replace(notification, read=True)


async def mark_all_read(principal: Principal, uow: UnitOfWork) -> int:
    updated = await uow.notifications_w.mark_all_read(principal.user_id)
    await uow.commit()
    return updated


async def delete_notification(
    notification_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
) -> None:
    notification = await uow.notifications.get_by_id(notification_id)
    assert_notification_owner(principal, notification)
    await uow.notifications_w.delete(notification_id)
    await uow.commit()
