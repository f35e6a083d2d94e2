"""Shared test fixtures."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any
from uuid import UUID

import pytest

from case_messaging.application.dto.principal import Principal
from case_messaging.application.ports.sms import SmsResult
from case_messaging.domain.entities.message import Attachment, Marker, Message
from case_messaging.domain.entities.notification import Notification
from case_messaging.domain.entities.trash import TrashEntry
from case_messaging.domain.entities.user import DirectoryUser
from case_messaging.domain.value_objects.enums import (
    STAFF_ROLES,
    InboxFilter,
    MarkerKind,
    MessageCategory,
    Role,
    TrashItemType,
)

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)

# Staff
ALICE, BRUNO, CARLA, DORMANT = 1, 2, 3, 4
# Clients
CLIENT, OTHER_CLIENT = 42, 43
PARTNER = 77
ASSISTANT = 90

CASE_REF = "CASE-2024-001"


class FixedClock:
    def __init__(self, now: datetime = T0) -> None:
        self._now = now

    def now(self) -> datetime:
        return self._now

    def advance(self, **kwargs: float) -> None:
        self._now += timedelta(**kwargs)


def make_user(
    user_id: int,
    role: Role,
    *,
    active: bool = True,
    name: str | None = None,
    phone: str | None = None,
) -> DirectoryUser:
    return DirectoryUser(
        id=user_id,
        role=role,
        active=active,
        display_name=name or f"{role.value.title()} {user_id}",
        phone=phone,
    )


def principal_for(user_id: int, role: Role, name: str = "") -> Principal:
    return Principal(user_id=user_id, role=role, display_name=name)


def make_message(
    *,
    sender_id: int = CLIENT,
    recipients: set[int] | frozenset[int] = frozenset({ALICE, BRUNO}),
    copies: set[int] | frozenset[int] = frozenset(),
    category: MessageCategory = MessageCategory.CLIENT_TO_STAFF,
    thread_id: str | None = None,
    parent_id: UUID | None = None,
    case_ref: str | None = CASE_REF,
    created_at: datetime = T0,
    read_by: tuple[int, ...] | None = None,
    archived_by: tuple[int, ...] = (),
    subject: str = "Question about my file",
    body: str = "hello",
    attachments: tuple[Attachment, ...] = (),
) -> Message:
    message_id = uuid.uuid4()
    readers = (sender_id,) if read_by is None else read_by
    return Message(
        id=message_id,
        thread_id=thread_id or str(message_id),
        parent_id=parent_id,
        sender_id=sender_id,
        recipient_ids=frozenset(recipients),
        copy_ids=frozenset(copies),
        category=category,
        subject=subject,
        body=body,
        case_ref=case_ref,
        created_at=created_at,
        read_by=tuple(Marker(user_id=u, at=created_at) for u in readers),
        archived_by=tuple(Marker(user_id=u, at=created_at) for u in archived_by),
        attachments=attachments,
    )


def make_trash_entry(
    *,
    snapshot: dict[str, Any] | None = None,
    original_id: str | None = None,
    deleted_by: int = CLIENT,
    original_owner: int | None = CLIENT,
    deleted_at: datetime = T0,
    item_type: str = "message",
) -> TrashEntry:
    return TrashEntry(
        id=uuid.uuid4(),
        item_type=TrashItemType(item_type),
        original_id=original_id or str(uuid.uuid4()),
        snapshot=snapshot or {},
        deleted_by=deleted_by,
        original_owner=original_owner,
        deleted_at=deleted_at,
        origin="messages",
    )


# --- messages ---------------------------------------------------------------


@dataclass
class FakeMessageReader:
    _store: dict[UUID, Message] = field(default_factory=dict)

    async def get_by_id(self, message_id: UUID) -> Message | None:
        return self._store.get(message_id)

    async def list_by_ids(self, message_ids: list[UUID]) -> list[Message]:
        found = [self._store[i] for i in message_ids if i in self._store]
        return sorted(found, key=lambda m: m.created_at)

    async def list_for_user(
        self,
        user_id: int,
        inbox_filter: InboxFilter,
        *,
        case_ref: str | None = None,
        sender_id: int | None = None,
        addressee_id: int | None = None,
        limit: int = 1000,
    ) -> list[Message]:
        def selected(m: Message) -> bool:
            if inbox_filter is InboxFilter.SENT:
                return m.sender_id == user_id
            if inbox_filter is InboxFilter.RECEIVED:
                return m.is_addressed_to(user_id)
            if inbox_filter is InboxFilter.UNREAD:
                return m.is_addressed_to(user_id) and not m.is_read_by(user_id)
            return m.is_involved(user_id)

        result = [
            m for m in self._store.values()
            if selected(m)
            and not m.is_archived_by(user_id)
            and (case_ref is None or m.case_ref == case_ref)
            and (sender_id is None or m.sender_id == sender_id)
            and (addressee_id is None or m.is_addressed_to(addressee_id))
        ]
        result.sort(key=lambda m: m.created_at, reverse=True)
        return result[:limit]

    async def list_thread(self, thread_id: str, user_id: int) -> list[Message]:
        result = [
            m for m in self._store.values()
            if m.thread_id == thread_id and m.is_involved(user_id)
        ]
        return sorted(result, key=lambda m: m.created_at)

    async def count_unread(self, user_id: int) -> int:
        return sum(
            1 for m in self._store.values()
            if m.is_addressed_to(user_id)
            and not m.is_read_by(user_id)
            and not m.is_archived_by(user_id)
        )


@dataclass
class FakeMessageWriter:
    _reader: FakeMessageReader
    fail_on_delete: bool = False
    fail_ids: set[UUID] = field(default_factory=set)

    async def create(self, message: Message) -> Message:
        self._reader._store[message.id] = message
        return message

    async def delete(self, message_id: UUID) -> bool:
        if self.fail_on_delete or message_id in self.fail_ids:
            raise RuntimeError("connection lost")
        return self._reader._store.pop(message_id, None) is not None


@dataclass
class FakeMarkerWriter:
    _messages: FakeMessageReader

    @staticmethod
    def _attr(kind: MarkerKind) -> str:
        return "read_by" if kind is MarkerKind.READ else "archived_by"

    async def add_if_absent(self, message_id: UUID, user_id: int, kind: MarkerKind, at: datetime) -> bool:
        message = self._messages._store.get(message_id)
        if message is None:
            return False
        attr = self._attr(kind)
        markers: tuple[Marker, ...] = getattr(message, attr)
        if any(m.user_id == user_id for m in markers):
            return False
        self._messages._store[message_id] = replace(
            message, **{attr: markers + (Marker(user_id=user_id, at=at),)}
        )
        return True

    async def remove(self, message_id: UUID, user_id: int, kind: MarkerKind) -> bool:
        message = self._messages._store.get(message_id)
        if message is None:
            return False
        attr = self._attr(kind)
        markers: tuple[Marker, ...] = getattr(message, attr)
        kept = tuple(m for m in markers if m.user_id != user_id)
        if len(kept) == len(markers):
            return False
        self._messages._store[message_id] = replace(message, **{attr: kept})
        return True

    async def list_for(self, message_id: UUID, kind: MarkerKind) -> list[Marker]:
        message = self._messages._store.get(message_id)
        if message is None:
            return []
        return list(getattr(message, self._attr(kind)))


# --- notifications ------------------------------------------------------------


@dataclass
class FakeNotificationReader:
    _store: dict[UUID, Notification] = field(default_factory=dict)

    def for_user(self, user_id: int) -> list[Notification]:
        return [n for n in self._store.values() if n.recipient_id == user_id]

    async def get_by_id(self, notification_id: UUID) -> Notification | None:
        return self._store.get(notification_id)

    async def list_for_user(
        self,
        user_id: int,
        *,
        read: bool | None = None,
        limit: int = 50,
    ) -> list[Notification]:
        items = [n for n in self.for_user(user_id) if read is None or n.read is read]
        items.sort(key=lambda n: n.created_at, reverse=True)
        items.sort(key=lambda n: n.read)
        return items[:limit]

    async def count_unread(self, user_id: int) -> int:
        return sum(1 for n in self.for_user(user_id) if not n.read)

    async def exists(self, recipient_id: int, dedupe_key: str, *, since: datetime | None = None) -> bool:
        return any(
            n.dedupe_key == dedupe_key and (since is None or n.created_at >= since)
            for n in self.for_user(recipient_id)
        )


@dataclass
class FakeNotificationWriter:
    _reader: FakeNotificationReader
    fail_for: set[int] = field(default_factory=set)

    async def create(self, notification: Notification) -> Notification:
        if notification.recipient_id in self.fail_for:
            raise RuntimeError(f"insert failed for {notification.recipient_id}")
        self._reader._store[notification.id] = notification
        return notification

    async def mark_read(self, notification_id: UUID) -> None:
        n = self._reader._store[notification_id]
        self._reader._store[notification_id] = replace(n, read=True)

    async def mark_all_read(self, user_id: int) -> int:
        changed = 0
        for n in self._reader.for_user(user_id):
            if not n.read:
                self._reader._store[n.id] = replace(n, read=True)
                changed += 1
        return changed

    async def delete(self, notification_id: UUID) -> None:
        self._reader._store.pop(notification_id, None)


# --- trash --------------------------------------------------------------------


@dataclass
class FakeTrashReader:
    _store: dict[UUID, TrashEntry] = field(default_factory=dict)

    def _visible(self, owner_id: int | None) -> list[TrashEntry]:
        return [
            e for e in self._store.values()
            if owner_id is None or owner_id in (e.deleted_by, e.original_owner)
        ]

    async def get_by_id(self, entry_id: UUID) -> TrashEntry | None:
        return self._store.get(entry_id)

    async def list_entries(
        self,
        *,
        owner_id: int | None = None,
        item_type: str | None = None,
        offset: int = 0,
        limit: int = 50,
    ) -> list[TrashEntry]:
        items = [e for e in self._visible(owner_id) if item_type is None or e.item_type == item_type]
        items.sort(key=lambda e: e.deleted_at, reverse=True)
        return items[offset:offset + limit]

    async def count_by_type(
        self,
        *,
        owner_id: int | None = None,
        deleted_after: datetime | None = None,
        deleted_before: datetime | None = None,
    ) -> dict[str, int]:
        counts: dict[str, int] = {}
        for e in self._visible(owner_id):
            if deleted_after is not None and e.deleted_at < deleted_after:
                continue
            if deleted_before is not None and e.deleted_at >= deleted_before:
                continue
            counts[e.item_type.value] = counts.get(e.item_type.value, 0) + 1
        return counts


@dataclass
class FakeTrashWriter:
    _reader: FakeTrashReader

    async def add(self, entry: TrashEntry) -> TrashEntry:
        self._reader._store[entry.id] = entry
        return entry

    async def delete(self, entry_id: UUID) -> None:
        self._reader._store.pop(entry_id, None)

    async def delete_all(self) -> int:
        removed = len(self._reader._store)
        self._reader._store.clear()
        return removed

    async def delete_older_than(self, cutoff: datetime) -> int:
        old = [i for i, e in self._reader._store.items() if e.deleted_at < cutoff]
        for i in old:
            del self._reader._store[i]
        return len(old)


# --- collaborators ----------------------------------------------------------------


@dataclass
class FakeDirectory:
    users: dict[int, DirectoryUser] = field(default_factory=dict)
    broken: bool = False

    def add(self, *users: DirectoryUser) -> None:
        for u in users:
            self.users[u.id] = u

    def _check(self) -> None:
        if self.broken:
            raise RuntimeError("directory unavailable")

    async def resolve_user(self, user_id: int) -> DirectoryUser | None:
        self._check()
        return self.users.get(user_id)

    async def resolve_users(self, user_ids: list[int]) -> list[DirectoryUser]:
        self._check()
        return [self.users[i] for i in user_ids if i in self.users]

    async def list_active_staff(self) -> list[DirectoryUser]:
        self._check()
        return [u for u in self.users.values() if u.active and u.role in STAFF_ROLES]

    async def list_active_users_by_role(self, role: Role) -> list[DirectoryUser]:
        self._check()
        return [u for u in self.users.values() if u.active and u.role is role]

    async def list_active_users(self) -> list[DirectoryUser]:
        self._check()
        return [u for u in self.users.values() if u.active]


@dataclass
class FakeCaseChecker:
    transmitted: set[tuple[str, int]] = field(default_factory=set)

    async def is_transmitted_to_partner(self, case_ref: str, partner_id: int) -> bool:
        return (case_ref, partner_id) in self.transmitted


@dataclass
class FakeSms:
    sent: list[tuple[str, str, dict[str, Any]]] = field(default_factory=list)
    fail: bool = False

    async def send_notification_sms(self, phone: str, template_kind: str, variables: dict[str, Any]) -> SmsResult:
        if self.fail:
            raise RuntimeError("provider down")
        self.sent.append((phone, template_kind, variables))
        return SmsResult(success=True, provider_id=f"SM{len(self.sent)}")


@dataclass
class FakeAttachmentStore:
    """Maps storage keys to paths; unknown keys are missing files."""
    files: dict[str, Path] = field(default_factory=dict)

    async def locate(self, key: str) -> Path | None:
        return self.files.get(key)


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests. ``rollback`` restores the last committed state."""
    messages: FakeMessageReader = field(default_factory=FakeMessageReader)
    messages_w: FakeMessageWriter | None = None
    markers: FakeMarkerWriter | None = None
    notifications: FakeNotificationReader = field(default_factory=FakeNotificationReader)
    notifications_w: FakeNotificationWriter | None = None
    trash: FakeTrashReader = field(default_factory=FakeTrashReader)
    trash_w: FakeTrashWriter | None = None
    directory: FakeDirectory = field(default_factory=FakeDirectory)
    cases: FakeCaseChecker = field(default_factory=FakeCaseChecker)
    commits: int = 0
    rollbacks: int = 0
    _snapshot: tuple[dict, dict, dict] | None = None

    def __post_init__(self) -> None:
        if self.messages_w is None:
            self.messages_w = FakeMessageWriter(self.messages)
        if self.markers is None:
            self.markers = FakeMarkerWriter(self.messages)
        if self.notifications_w is None:
            self.notifications_w = FakeNotificationWriter(self.notifications)
        if self.trash_w is None:
            self.trash_w = FakeTrashWriter(self.trash)
        self._save()

    def _save(self) -> None:
        self._snapshot = (
            dict(self.messages._store),
            dict(self.notifications._store),
            dict(self.trash._store),
        )

    def seed(self, *items: Message | TrashEntry | Notification) -> None:
        for item in items:
            if isinstance(item, Message):
                self.messages._store[item.id] = item
            elif isinstance(item, TrashEntry):
                self.trash._store[item.id] = item
            else:
                self.notifications._store[item.id] = item
        self._save()

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self.commits += 1
        self._save()

    async def rollback(self) -> None:
        self.rollbacks += 1
        assert self._snapshot is not None
        messages, notifications, trash = self._snapshot
        self.messages._store = dict(messages)
        self.notifications._store = dict(notifications)
        self.trash._store = dict(trash)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def uow() -> FakeUoW:
    """A UoW with a small office: three active admins, one inactive, clients, a partner."""
    uow = FakeUoW()
    uow.directory.add(
        make_user(ALICE, Role.ADMIN, name="Alice Martin"),
        make_user(BRUNO, Role.SUPERADMIN, name="Bruno Lefevre"),
        make_user(CARLA, Role.ADMIN, name="Carla Nguyen"),
        make_user(DORMANT, Role.ADMIN, active=False, name="Dormant Admin"),
        make_user(CLIENT, Role.CLIENT, name="Chloe Durand", phone="06 12 34 56 78"),
        make_user(OTHER_CLIENT, Role.CLIENT, name="Olivier Petit"),
        make_user(PARTNER, Role.PARTNER, name="Partner Firm"),
        make_user(ASSISTANT, Role.ASSISTANT, name="Ines Assistant"),
    )
    uow.cases.transmitted.add((CASE_REF, PARTNER))
    return uow


@pytest.fixture
def client_principal() -> Principal:
    return principal_for(CLIENT, Role.CLIENT, "Chloe Durand")


@pytest.fixture
def admin_principal() -> Principal:
    return principal_for(ALICE, Role.ADMIN, "Alice Martin")


@pytest.fixture
def partner_principal() -> Principal:
    return principal_for(PARTNER, Role.PARTNER, "Partner Firm")
