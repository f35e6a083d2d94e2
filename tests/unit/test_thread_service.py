from __future__ import annotations

from datetime import timedelta

import pytest

from case_messaging.application.exceptions import ForbiddenError, NotFoundError
from case_messaging.domain.value_objects.enums import InboxFilter, MessageCategory, NotificationKind
from case_messaging.services import thread_service
from tests.conftest import (
    ALICE,
    BRUNO,
    CASE_REF,
    CLIENT,
    OTHER_CLIENT,
    PARTNER,
    T0,
    make_message,
)


def test_old_unread_thread_sorts_before_new_read_thread():
    old_unread = make_message(created_at=T0)
    new_read = make_message(created_at=T0 + timedelta(days=3), read_by=(CLIENT, ALICE))

    threads = thread_service.assemble_threads([new_read, old_unread], ALICE)

    assert [t.thread_id for t in threads] == [old_unread.thread_id, new_read.thread_id]
    assert threads[0].unread and not threads[1].unread


def test_threads_ordered_by_last_message_then_thread_id():
    a = make_message(thread_id="a", created_at=T0, read_by=(CLIENT, ALICE))
    b = make_message(thread_id="b", created_at=T0, read_by=(CLIENT, ALICE))
    c = make_message(thread_id="c", created_at=T0 + timedelta(hours=1), read_by=(CLIENT, ALICE))

    threads = thread_service.assemble_threads([b, c, a], ALICE)

    assert [t.thread_id for t in threads] == ["c", "a", "b"]


def test_thread_projection_fields():
    root = make_message(thread_id="t1", created_at=T0, read_by=(CLIENT, ALICE))
    reply = make_message(
        thread_id="t1",
        parent_id=root.id,
        sender_id=ALICE,
        recipients={CLIENT},
        copies={BRUNO},
        category=MessageCategory.STAFF_TO_CLIENT,
        created_at=T0 + timedelta(minutes=10),
    )

    [thread] = thread_service.assemble_threads([reply, root], ALICE)

    assert thread.root == root
    assert thread.last_message == reply
    assert thread.messages == (root, reply)
    assert thread.message_count == 2
    assert thread.participants == {CLIENT, ALICE, BRUNO}
    assert thread.case_ref == CASE_REF
    assert not thread.unread


def test_root_falls_back_to_first_message():
    # The parent was trashed, only replies remain
    first = make_message(thread_id="t", parent_id=make_message().id, created_at=T0)
    second = make_message(thread_id="t", parent_id=first.id, created_at=T0 + timedelta(minutes=1))

    [thread] = thread_service.assemble_threads([second, first], CLIENT)

    assert thread.root == first


@pytest.mark.asyncio
async def test_build_inbox_filters(uow, admin_principal):
    received = make_message(created_at=T0)
    sent = make_message(
        sender_id=ALICE, recipients={CLIENT}, category=MessageCategory.STAFF_TO_CLIENT,
        created_at=T0 + timedelta(hours=1),
    )
    archived = make_message(archived_by=(ALICE,), created_at=T0 + timedelta(hours=2))
    uow.seed(received, sent, archived)

    all_threads = await thread_service.build_inbox(admin_principal, InboxFilter.ALL, uow)
    sent_threads = await thread_service.build_inbox(admin_principal, InboxFilter.SENT, uow)
    unread = await thread_service.build_inbox(admin_principal, InboxFilter.UNREAD, uow)

    assert [t.thread_id for t in all_threads] == [received.thread_id, sent.thread_id]
    assert [t.thread_id for t in sent_threads] == [sent.thread_id]
    assert [t.thread_id for t in unread] == [received.thread_id]


@pytest.mark.asyncio
async def test_partner_case_filter_requires_transmission(uow, partner_principal):
    uow.seed(make_message(sender_id=PARTNER, category=MessageCategory.PARTNER_TO_STAFF))

    threads = await thread_service.build_inbox(
        partner_principal, InboxFilter.ALL, uow, case_ref=CASE_REF,
    )
    assert len(threads) == 1

    with pytest.raises(ForbiddenError):
        await thread_service.build_inbox(partner_principal, InboxFilter.ALL, uow, case_ref="CASE-OTHER")


@pytest.mark.asyncio
async def test_peek_thread_does_not_mark_read(uow, admin_principal):
    msg = make_message()
    uow.seed(msg)

    thread = await thread_service.peek_thread(msg.thread_id, admin_principal, uow)

    assert thread.unread
    assert not uow.messages._store[msg.id].is_read_by(ALICE)
    assert uow.notifications._store == {}


@pytest.mark.asyncio
async def test_view_thread_marks_addressed_messages_read(uow, clock, admin_principal):
    root = make_message(thread_id="t", created_at=T0)
    reply = make_message(
        thread_id="t", parent_id=root.id, sender_id=ALICE, recipients={CLIENT},
        category=MessageCategory.STAFF_TO_CLIENT, created_at=T0 + timedelta(minutes=5),
    )
    follow_up = make_message(thread_id="t", parent_id=reply.id, created_at=T0 + timedelta(minutes=9))
    uow.seed(root, reply, follow_up)

    thread = await thread_service.view_thread("t", admin_principal, uow, clock=clock)

    assert not thread.unread
    assert all(m.is_read_by(ALICE) for m in thread.messages)
    kinds = [n.kind for n in uow.notifications.for_user(CLIENT)]
    assert kinds == [NotificationKind.MESSAGE_READ, NotificationKind.MESSAGE_READ]


@pytest.mark.asyncio
async def test_view_thread_unknown_or_invisible(uow, client_principal):
    foreign = make_message(sender_id=OTHER_CLIENT)
    uow.seed(foreign)

    with pytest.raises(NotFoundError):
        await thread_service.view_thread(foreign.thread_id, client_principal, uow)
    with pytest.raises(NotFoundError):
        await thread_service.view_thread("missing", client_principal, uow)


@pytest.mark.asyncio
async def test_view_message_returns_updated_message(uow, clock, admin_principal):
    msg = make_message()
    uow.seed(msg)

    message, thread = await thread_service.view_message(msg.id, admin_principal, uow, clock=clock)

    assert message.is_read_by(ALICE)
    assert thread.thread_id == msg.thread_id


@pytest.mark.asyncio
async def test_count_unread(uow, admin_principal):
    uow.seed(
        make_message(),
        make_message(read_by=(CLIENT, ALICE)),
        make_message(archived_by=(ALICE,)),
        make_message(sender_id=OTHER_CLIENT, recipients={BRUNO}),
    )

    assert await thread_service.count_unread(admin_principal, uow) == 1


@pytest.mark.asyncio
async def test_build_inbox_sender_and_addressee_filters(uow, admin_principal):
    def at(hours):
        return T0 + timedelta(hours=hours)

    m1 = make_message(created_at=at(0))
    m2 = make_message(sender_id=OTHER_CLIENT, created_at=at(1))
    m3 = make_message(recipients={ALICE}, created_at=at(2), read_by=(CLIENT, ALICE))
    m4 = make_message(
        sender_id=ALICE, recipients={CLIENT},
        category=MessageCategory.STAFF_TO_CLIENT, created_at=at(3),
    )
    m5 = make_message(recipients={BRUNO}, copies={ALICE}, created_at=at(4))
    uow.seed(m1, m2, m3, m4, m5)

    async def inbox(inbox_filter, **filters):
        threads = await thread_service.build_inbox(admin_principal, inbox_filter, uow, **filters)
        return [t.thread_id for t in threads]

    # unread first, newest first within each group
    assert await inbox(InboxFilter.RECEIVED, sender_id=CLIENT) == [
        m5.thread_id, m1.thread_id, m3.thread_id,
    ]
    assert await inbox(InboxFilter.UNREAD, sender_id=CLIENT) == [m5.thread_id, m1.thread_id]
    assert await inbox(InboxFilter.RECEIVED, addressee_id=BRUNO) == [
        m5.thread_id, m2.thread_id, m1.thread_id,
    ]
    assert await inbox(InboxFilter.ALL, addressee_id=CLIENT) == [m4.thread_id]
    assert await inbox(InboxFilter.UNREAD, sender_id=OTHER_CLIENT, addressee_id=BRUNO) == [m2.thread_id]
    assert await inbox(InboxFilter.SENT, sender_id=CLIENT) == []
