from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from case_messaging.domain.value_objects.enums import NotificationKind


@dataclass(frozen=True, slots=True)
class Notification:
    id: UUID
    recipient_id: int
    kind: NotificationKind
    title: str
    body: str
    link: str | None
    message_id: UUID | None
    dedupe_key: str | None
    created_at: datetime
    read: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)
