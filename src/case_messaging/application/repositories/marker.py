from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from case_messaging.domain.entities.message import Marker
from case_messaging.domain.value_objects.enums import MarkerKind


class MarkerWriter(Protocol):
    async def add_if_absent(
        self,
        message_id: UUID,
        user_id: int,
        kind: MarkerKind,
        at: datetime,
    ) -> bool:
        """Append a marker unless one exists. Return True if a row was inserted."""
        ...

    async def remove(self, message_id: UUID, user_id: int, kind: MarkerKind) -> bool: ...

    async def list_for(self, message_id: UUID, kind: MarkerKind) -> list[Marker]: ...
