"""JSON-safe snapshots of entities kept in the trash so they can be restored."""
from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from case_messaging.domain.entities.message import Attachment, Marker, Message
from case_messaging.domain.value_objects.enums import MessageCategory


def _markers_to_json(markers: tuple[Marker, ...]) -> list[dict[str, Any]]:
    return [{"user_id": m.user_id, "at": m.at.isoformat()} for m in markers]


def _markers_from_json(raw: list[dict[str, Any]] | None) -> tuple[Marker, ...]:
    return tuple(
        Marker(user_id=int(m["user_id"]), at=datetime.fromisoformat(m["at"]))
        for m in raw or []
    )


def message_to_snapshot(message: Message) -> dict[str, Any]:
    return {
        "id": str(message.id),
        "thread_id": message.thread_id,
        "parent_id": str(message.parent_id) if message.parent_id else None,
        "sender_id": message.sender_id,
        "recipient_ids": sorted(message.recipient_ids),
        "copy_ids": sorted(message.copy_ids),
        "category": message.category.value,
        "subject": message.subject,
        "body": message.body,
        "case_ref": message.case_ref,
        "attachments": [a.as_json() for a in message.attachments],
        "read_by": _markers_to_json(message.read_by),
        "archived_by": _markers_to_json(message.archived_by),
        "created_at": message.created_at.isoformat(),
    }


def message_from_snapshot(data: dict[str, Any]) -> Message:
    parent_raw = data.get("parent_id")
    return Message(
        id=UUID(data["id"]),
        thread_id=data["thread_id"],
        parent_id=UUID(parent_raw) if parent_raw else None,
        sender_id=int(data["sender_id"]),
        recipient_ids=frozenset(int(u) for u in data.get("recipient_ids", [])),
        copy_ids=frozenset(int(u) for u in data.get("copy_ids", [])),
        category=MessageCategory(data["category"]),
        subject=data["subject"],
        body=data["body"],
        case_ref=data.get("case_ref"),
        created_at=datetime.fromisoformat(data["created_at"]),
        attachments=tuple(Attachment.from_json(a) for a in data.get("attachments") or ()),
        read_by=_markers_from_json(data.get("read_by")),
        archived_by=_markers_from_json(data.get("archived_by")),
    )
