from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from case_messaging.domain.value_objects.enums import NotificationKind


class NotificationResponse(BaseModel):
    id: UUID
    kind: NotificationKind
    title: str
    body: str
    link: str | None
    message_id: UUID | None
    metadata: dict[str, Any]
    read: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class MarkAllReadResponse(BaseModel):
    updated: int
