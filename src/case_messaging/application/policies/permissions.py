from __future__ import annotations

from case_messaging.application.dto.principal import Principal
from case_messaging.application.exceptions import ForbiddenError, NotFoundError
from case_messaging.domain.entities.message import Message
from case_messaging.domain.entities.notification import Notification
from case_messaging.domain.entities.trash import TrashEntry


def assert_message_access(principal: Principal, message: Message | None) -> Message:
    """Raise if the message doesn't exist or the principal is not sender, recipient or copy."""
    if message is None or not message.is_involved(principal.user_id):
        raise NotFoundError("Message not found")
    return message


def can_delete_message(principal: Principal, message: Message) -> bool:
    # Staff may delete any message, everyone else only what they sent
    return principal.is_staff or message.sender_id == principal.user_id


def assert_notification_owner(
    principal: Principal,
    notification: Notification | None,
) -> Notification:
    if notification is None:
        raise NotFoundError("Notification not found")
    if notification.recipient_id != principal.user_id:
        raise ForbiddenError("Not your notification")
    return notification


def assert_trash_access(principal: Principal, entry: TrashEntry | None) -> TrashEntry:
    if entry is None:
        raise NotFoundError("Trash entry not found")
    if principal.is_staff:
        return entry
    if principal.user_id not in (entry.deleted_by, entry.original_owner):
        raise ForbiddenError("You cannot manage this trash entry")
    return entry


def assert_staff(principal: Principal) -> None:
    if not principal.is_staff:
        raise ForbiddenError("Staff access required")
