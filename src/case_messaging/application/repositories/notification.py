from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from case_messaging.domain.entities.notification import Notification


class NotificationReader(Protocol):
    async def get_by_id(self, notification_id: UUID) -> Notification | None: ...

    async def list_for_user(
        self,
        user_id: int,
        *,
        read: bool | None = None,
        limit: int = 50,
    ) -> list[Notification]:
        """Unread first, newest first within each group."""
        ...

    async def count_unread(self, user_id: int) -> int: ...

    async def exists(
        self,
        recipient_id: int,
        dedupe_key: str,
        *,
        since: datetime | None = None,
    ) -> bool: ...


class NotificationWriter(Protocol):
    async def create(self, notification: Notification) -> Notification: ...

    async def mark_read(self, notification_id: UUID) -> None: ...

    async def mark_all_read(self, user_id: int) -> int: ...

    async def delete(self, notification_id: UUID) -> None: ...
