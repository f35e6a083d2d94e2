from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from case_messaging.domain.entities.message import (
    MAX_ATTACHMENT_BYTES,
    MAX_ATTACHMENTS,
    Attachment,
    Message,
)
from case_messaging.domain.entities.thread import Thread
from case_messaging.domain.value_objects.enums import MessageCategory, Role


class AttachmentRef(BaseModel):
    """A file already placed in attachment storage under ``filename``."""

    filename: str = Field(min_length=1, max_length=255)
    original_name: str = Field(min_length=1, max_length=255)
    size: int = Field(ge=0, le=MAX_ATTACHMENT_BYTES)
    mimetype: str = Field("application/octet-stream", max_length=127)
    uploaded_at: datetime | None = None

    def to_entity(self) -> Attachment:
        return Attachment(
            filename=self.filename,
            original_name=self.original_name,
            size=self.size,
            mimetype=self.mimetype,
            uploaded_at=self.uploaded_at,
        )


class AttachmentResponse(BaseModel):
    index: int
    original_name: str
    size: int
    mimetype: str
    uploaded_at: datetime | None


class ComposeMessageRequest(BaseModel):
    subject: str = Field(max_length=255)
    body: str
    target: int | None = None
    cc: list[int] = Field(default_factory=list, alias="copy")
    case_ref: str | None = Field(None, max_length=64)
    parent_id: UUID | None = None
    attachments: list[AttachmentRef] = Field(default_factory=list, max_length=MAX_ATTACHMENTS)

    model_config = {"populate_by_name": True}


class ComposeMessageResponse(BaseModel):
    id: UUID
    thread_id: str
    category: MessageCategory
    notifications_created: int = 0


class MarkerResponse(BaseModel):
    user_id: int
    at: datetime

    model_config = {"from_attributes": True}


class MarkersResponse(BaseModel):
    message_id: UUID
    markers: list[MarkerResponse]


class MessageResponse(BaseModel):
    id: UUID
    thread_id: str
    parent_id: UUID | None
    sender_id: int
    recipient_ids: list[int]
    copy_ids: list[int]
    category: MessageCategory
    subject: str
    body: str
    case_ref: str | None
    attachments: list[AttachmentResponse]
    read_by: list[MarkerResponse]
    archived_by: list[MarkerResponse]
    created_at: datetime

    @classmethod
    def from_entity(cls, message: Message) -> MessageResponse:
        return cls(
            id=message.id,
            thread_id=message.thread_id,
            parent_id=message.parent_id,
            sender_id=message.sender_id,
            recipient_ids=sorted(message.recipient_ids),
            copy_ids=sorted(message.copy_ids),
            category=message.category,
            subject=message.subject,
            body=message.body,
            case_ref=message.case_ref,
            attachments=[
                AttachmentResponse(
                    index=i,
                    original_name=a.original_name,
                    size=a.size,
                    mimetype=a.mimetype,
                    uploaded_at=a.uploaded_at,
                )
                for i, a in enumerate(message.attachments)
            ],
            read_by=[MarkerResponse.model_validate(m) for m in message.read_by],
            archived_by=[MarkerResponse.model_validate(m) for m in message.archived_by],
            created_at=message.created_at,
        )


class ThreadSummaryResponse(BaseModel):
    thread_id: str
    root_id: UUID
    subject: str
    case_ref: str | None
    unread: bool
    participants: list[int]
    message_count: int
    last_message: MessageResponse

    @classmethod
    def from_entity(cls, thread: Thread) -> ThreadSummaryResponse:
        return cls(
            thread_id=thread.thread_id,
            root_id=thread.root.id,
            subject=thread.root.subject,
            case_ref=thread.case_ref,
            unread=thread.unread,
            participants=sorted(thread.participants),
            message_count=thread.message_count,
            last_message=MessageResponse.from_entity(thread.last_message),
        )


class ThreadDetailResponse(ThreadSummaryResponse):
    messages: list[MessageResponse]

    @classmethod
    def from_entity(cls, thread: Thread) -> ThreadDetailResponse:
        summary = ThreadSummaryResponse.from_entity(thread)
        return cls(
            **summary.model_dump(exclude={"last_message"}),
            last_message=summary.last_message,
            messages=[MessageResponse.from_entity(m) for m in thread.messages],
        )


class MessageViewResponse(BaseModel):
    message: MessageResponse
    thread: ThreadDetailResponse


class BatchRequest(BaseModel):
    message_ids: list[UUID] = Field(min_length=1, max_length=500)


class BatchResponse(BaseModel):
    updated: int


class UnreadCountResponse(BaseModel):
    count: int


class RecipientResponse(BaseModel):
    id: int
    role: Role
    display_name: str

    model_config = {"from_attributes": True}
