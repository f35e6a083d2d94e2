from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from case_messaging.domain.value_objects.enums import MessageCategory


@dataclass(frozen=True, slots=True)
class Marker:
    """One user's read (or archive) mark on a message."""

    user_id: int
    at: datetime


MAX_ATTACHMENTS = 5
MAX_ATTACHMENT_BYTES = 10 * 1024 * 1024


@dataclass(frozen=True, slots=True)
class Attachment:
    """A file stored next to the message. ``filename`` is the storage key."""

    filename: str
    original_name: str
    size: int
    mimetype: str
    uploaded_at: datetime | None = None

    def as_json(self) -> dict[str, Any]:
        return {
            "filename": self.filename,
            "original_name": self.original_name,
            "size": self.size,
            "mimetype": self.mimetype,
            "uploaded_at": self.uploaded_at.isoformat() if self.uploaded_at else None,
        }

    @classmethod
    def from_json(cls, raw: dict[str, Any]) -> Attachment:
        uploaded = raw.get("uploaded_at")
        return cls(
            filename=raw["filename"],
            original_name=raw.get("original_name") or raw["filename"],
            size=int(raw.get("size") or 0),
            mimetype=raw.get("mimetype") or "application/octet-stream",
            uploaded_at=datetime.fromisoformat(uploaded) if uploaded else None,
        )


@dataclass(frozen=True, slots=True)
class Message:
    id: UUID
    thread_id: str
    parent_id: UUID | None
    sender_id: int
    recipient_ids: frozenset[int]
    copy_ids: frozenset[int]
    category: MessageCategory
    subject: str
    body: str
    case_ref: str | None
    created_at: datetime
    attachments: tuple[Attachment, ...] = ()
    read_by: tuple[Marker, ...] = ()
    archived_by: tuple[Marker, ...] = ()

    def is_involved(self, user_id: int) -> bool:
        return (
            user_id == self.sender_id
            or user_id in self.recipient_ids
            or user_id in self.copy_ids
        )

    def is_addressed_to(self, user_id: int) -> bool:
        return user_id in self.recipient_ids or user_id in self.copy_ids

    def is_read_by(self, user_id: int) -> bool:
        return any(m.user_id == user_id for m in self.read_by)

    def is_archived_by(self, user_id: int) -> bool:
        return any(m.user_id == user_id for m in self.archived_by)
