from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Path, Query
from fastapi.responses import FileResponse

from case_messaging.api.deps import (
    AttachmentStoreDep,
    CurrentPrincipal,
    NotifyObserversDep,
    SmsDep,
    UoWDep,
)
from case_messaging.api.v1.schemas.message import (
    BatchRequest,
    BatchResponse,
    ComposeMessageRequest,
    ComposeMessageResponse,
    MarkersResponse,
    MarkerResponse,
    MessageResponse,
    MessageViewResponse,
    RecipientResponse,
    ThreadDetailResponse,
    ThreadSummaryResponse,
    UnreadCountResponse,
)
from case_messaging.application.dto.message import ComposeMessageDTO
from case_messaging.domain.entities.message import Marker
from case_messaging.domain.value_objects.enums import InboxFilter
from case_messaging.services import (
    attachment_service,
    message_service,
    read_state_service,
    thread_service,
)

router = APIRouter(prefix="/api/v1/messages", tags=["messages"])


def _markers(message_id: UUID, markers: list[Marker]) -> MarkersResponse:
    return MarkersResponse(
        message_id=message_id,
        markers=[MarkerResponse.model_validate(m) for m in markers],
    )


@router.post("", response_model=ComposeMessageResponse, status_code=201)
async def compose_message(
    body: ComposeMessageRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
    sms: SmsDep,
    notify_observers: NotifyObserversDep,
) -> ComposeMessageResponse:
    dto = ComposeMessageDTO(
        subject=body.subject,
        body=body.body,
        target=body.target,
        copy=tuple(body.cc),
        case_ref=body.case_ref,
        parent_id=body.parent_id,
        attachments=tuple(a.to_entity() for a in body.attachments),
    )
    outcome = await message_service.create_message(
        dto, principal, uow, sms=sms, notify_observers=notify_observers,
    )
    return ComposeMessageResponse(
        id=outcome.message.id,
        thread_id=outcome.message.thread_id,
        category=outcome.message.category,
        notifications_created=outcome.report.created,
    )


@router.get("", response_model=list[ThreadSummaryResponse])
async def list_threads(
    principal: CurrentPrincipal,
    uow: UoWDep,
    filter: InboxFilter = Query(InboxFilter.ALL),  # noqa: A002
    case_ref: str | None = Query(None, max_length=64),
    sender_id: int | None = Query(None),
    addressee_id: int | None = Query(None),
) -> list[ThreadSummaryResponse]:
    threads = await thread_service.build_inbox(
        principal, filter, uow,
        case_ref=case_ref, sender_id=sender_id, addressee_id=addressee_id,
    )
    return [ThreadSummaryResponse.from_entity(t) for t in threads]


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(principal: CurrentPrincipal, uow: UoWDep) -> UnreadCountResponse:
    return UnreadCountResponse(count=await thread_service.count_unread(principal, uow))


@router.get("/recipients", response_model=list[RecipientResponse])
async def list_recipients(principal: CurrentPrincipal, uow: UoWDep) -> list[RecipientResponse]:
    users = await message_service.list_recipients(principal, uow)
    return [RecipientResponse.model_validate(u) for u in users]


@router.get("/threads/{thread_id}", response_model=ThreadDetailResponse)
async def view_thread(thread_id: str, principal: CurrentPrincipal, uow: UoWDep) -> ThreadDetailResponse:
    thread = await thread_service.view_thread(thread_id, principal, uow)
    return ThreadDetailResponse.from_entity(thread)


@router.post("/batch/read", response_model=BatchResponse)
async def batch_read(body: BatchRequest, principal: CurrentPrincipal, uow: UoWDep) -> BatchResponse:
    updated = await read_state_service.batch_mark_read(body.message_ids, principal, uow)
    return BatchResponse(updated=updated)


@router.post("/batch/unread", response_model=BatchResponse)
async def batch_unread(body: BatchRequest, principal: CurrentPrincipal, uow: UoWDep) -> BatchResponse:
    updated = await read_state_service.batch_mark_unread(body.message_ids, principal, uow)
    return BatchResponse(updated=updated)


@router.post("/batch/archive", response_model=BatchResponse)
async def batch_archive(body: BatchRequest, principal: CurrentPrincipal, uow: UoWDep) -> BatchResponse:
    updated = await read_state_service.batch_archive(body.message_ids, principal, uow)
    return BatchResponse(updated=updated)


@router.post("/batch/delete", response_model=BatchResponse)
async def batch_delete(body: BatchRequest, principal: CurrentPrincipal, uow: UoWDep) -> BatchResponse:
    deleted = await message_service.batch_delete(body.message_ids, principal, uow)
    return BatchResponse(updated=deleted)


@router.get("/{message_id}", response_model=MessageViewResponse)
async def view_message(message_id: UUID, principal: CurrentPrincipal, uow: UoWDep) -> MessageViewResponse:
    message, thread = await thread_service.view_message(message_id, principal, uow)
    return MessageViewResponse(
        message=MessageResponse.from_entity(message),
        thread=ThreadDetailResponse.from_entity(thread),
    )


@router.get("/{message_id}/attachments/{index}", response_class=FileResponse)
async def download_attachment(
    message_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
    store: AttachmentStoreDep,
    index: int = Path(ge=0),
) -> FileResponse:
    attachment, path = await attachment_service.get_attachment(
        message_id, index, principal, uow, store,
    )
    return FileResponse(path, media_type=attachment.mimetype, filename=attachment.original_name)


@router.put("/{message_id}/read", response_model=MarkersResponse)
async def mark_read(message_id: UUID, principal: CurrentPrincipal, uow: UoWDep) -> MarkersResponse:
    markers = await read_state_service.mark_read(message_id, principal, uow)
    return _markers(message_id, markers)


@router.put("/{message_id}/unread", response_model=MarkersResponse)
async def mark_unread(message_id: UUID, principal: CurrentPrincipal, uow: UoWDep) -> MarkersResponse:
    markers = await read_state_service.mark_unread(message_id, principal, uow)
    return _markers(message_id, markers)


@router.put("/{message_id}/archive", response_model=MarkersResponse)
async def archive(message_id: UUID, principal: CurrentPrincipal, uow: UoWDep) -> MarkersResponse:
    markers = await read_state_service.archive(message_id, principal, uow)
    return _markers(message_id, markers)


@router.put("/{message_id}/unarchive", response_model=MarkersResponse)
async def unarchive(message_id: UUID, principal: CurrentPrincipal, uow: UoWDep) -> MarkersResponse:
    markers = await read_state_service.unarchive(message_id, principal, uow)
    return _markers(message_id, markers)


@router.delete("/{message_id}", status_code=204)
async def delete_message(message_id: UUID, principal: CurrentPrincipal, uow: UoWDep) -> None:
    await message_service.delete_message(message_id, principal, uow)
