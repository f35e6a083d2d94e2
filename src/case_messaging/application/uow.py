from __future__ import annotations

from typing import Protocol

from case_messaging.application.ports.directory import CaseTransmissionChecker, UserDirectory
from case_messaging.application.repositories.marker import MarkerWriter
from case_messaging.application.repositories.message import MessageReader, MessageWriter
from case_messaging.application.repositories.notification import (
    NotificationReader,
    NotificationWriter,
)
from case_messaging.application.repositories.trash import TrashReader, TrashWriter


class UnitOfWork(Protocol):
    messages: MessageReader
    messages_w: MessageWriter
    markers: MarkerWriter
    notifications: NotificationReader
    notifications_w: NotificationWriter
    trash: TrashReader
    trash_w: TrashWriter
    directory: UserDirectory
    cases: CaseTransmissionChecker

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
    async def flush(self) -> None: ...
