from __future__ import annotations

import uuid
from collections import defaultdict
from collections.abc import Iterable

from case_messaging.application.dto.principal import Principal
from case_messaging.application.exceptions import ForbiddenError, NotFoundError
from case_messaging.application.policies.permissions import assert_message_access
from case_messaging.application.ports.clock import Clock, system_clock
from case_messaging.application.uow import UnitOfWork
from case_messaging.domain.entities.message import Message
from case_messaging.domain.entities.thread import Thread
from case_messaging.domain.value_objects.enums import InboxFilter, RoleTier
from case_messaging.services import read_state_service


def _chronological(messages: Iterable[Message]) -> list[Message]:
    return sorted(messages, key=lambda m: (m.created_at, str(m.id)))


def _build_thread(thread_id: str, messages: list[Message], user_id: int) -> Thread:
    ordered = _chronological(messages)
    root = next((m for m in ordered if m.parent_id is None), ordered[0])
    participants: set[int] = set()
    for m in ordered:
        participants.add(m.sender_id)
        participants.update(m.recipient_ids)
        participants.update(m.copy_ids)
    return Thread(
        thread_id=thread_id,
        root=root,
        messages=tuple(ordered),
        last_message=ordered[-1],
        unread=any(not m.is_read_by(user_id) for m in ordered),
        participants=frozenset(participants),
    )


def assemble_threads(messages: Iterable[Message], user_id: int) -> list[Thread]:
    """Group messages by thread and order the result for display.

    Unread threads come first; each group is sorted by the last message's
    timestamp, newest first, with the thread id breaking ties.
    """
    grouped: dict[str, list[Message]] = defaultdict(list)
    for message in messages:
        grouped[message.thread_id].append(message)

    threads = [_build_thread(tid, msgs, user_id) for tid, msgs in grouped.items()]
    # Stable sorts, least significant key first
    threads.sort(key=lambda t: t.thread_id)
    threads.sort(key=lambda t: t.last_message.created_at, reverse=True)
    threads.sort(key=lambda t: not t.unread)
    return threads


async def build_inbox(
    principal: Principal,
    inbox_filter: InboxFilter,
    uow: UnitOfWork,
    *,
    case_ref: str | None = None,
    sender_id: int | None = None,
    addressee_id: int | None = None,
) -> list[Thread]:
    """Threads built from the messages matching every given filter.

    Only matching messages make up each thread here; open the thread to see
    the rest of it.
    """
    if case_ref is not None and principal.tier is RoleTier.PARTNER:
        if not await uow.cases.is_transmitted_to_partner(case_ref, principal.user_id):
            raise ForbiddenError("This case has not been transmitted to you")

    messages = await uow.messages.list_for_user(
        principal.user_id,
        inbox_filter,
        case_ref=case_ref,
        sender_id=sender_id,
        addressee_id=addressee_id,
    )
    return assemble_threads(messages, principal.user_id)


async def peek_thread(thread_id: str, principal: Principal, uow: UnitOfWork) -> Thread:
    """Return the thread as the user sees it, without touching read state."""
    messages = await uow.messages.list_thread(thread_id, principal.user_id)
    if not messages:
        raise NotFoundError("Thread not found")
    return _build_thread(thread_id, messages, principal.user_id)


async def view_thread(
    thread_id: str,
    principal: Principal,
    uow: UnitOfWork,
    *,
    clock: Clock = system_clock,
) -> Thread:
    """Return the thread and mark it read for the viewing user.

    Every message addressed to the user that was still unread is marked read,
    and each of those transitions fans out like an explicit read.
    """
    thread = await peek_thread(thread_id, principal, uow)
    uid = principal.user_id
    pending = [m.id for m in thread.messages if m.is_addressed_to(uid) and not m.is_read_by(uid)]
    if not pending:
        return thread

    await read_state_service.batch_mark_read(pending, principal, uow, clock=clock)
    return await peek_thread(thread_id, principal, uow)


async def view_message(
    message_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
    *,
    clock: Clock = system_clock,
) -> tuple[Message, Thread]:
    message = await uow.messages.get_by_id(message_id)
    message = assert_message_access(principal, message)
    thread = await view_thread(message.thread_id, principal, uow, clock=clock)
    current = next((m for m in thread.messages if m.id == message.id), message)
    return current, thread


async def count_unread(principal: Principal, uow: UnitOfWork) -> int:
    return await uow.messages.count_unread(principal.user_id)
