from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import BigInteger, ForeignKey, Index, String, Text, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from case_messaging.infrastructure.db.base import Base


class MessageModel(Base):
    __tablename__ = "messages"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )
    thread_id: Mapped[str] = mapped_column(String(64), nullable=False)
    # No FK: a reply keeps pointing at its parent even after the parent is trashed
    parent_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    sender_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    recipient_ids: Mapped[list[int]] = mapped_column(
        ARRAY(BigInteger), nullable=False, server_default=text("'{}'"),
    )
    copy_ids: Mapped[list[int]] = mapped_column(
        ARRAY(BigInteger), nullable=False, server_default=text("'{}'"),
    )
    category: Mapped[str] = mapped_column(String(32), nullable=False)
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    case_ref: Mapped[str | None] = mapped_column(String(64), nullable=True)
    attachments: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONB, nullable=False, default=list, server_default=text("'[]'::jsonb"),
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )

    markers: Mapped[list[MessageMarkerModel]] = relationship(
        back_populates="message",
        lazy="selectin",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="MessageMarkerModel.at",
    )

    __table_args__ = (
        Index("ix_messages_thread_timeline", "thread_id", "created_at"),
        Index("ix_messages_sender", "sender_id", "created_at"),
        Index("ix_messages_recipient_ids", "recipient_ids", postgresql_using="gin"),
        Index("ix_messages_copy_ids", "copy_ids", postgresql_using="gin"),
        Index("ix_messages_case_ref", "case_ref"),
    )


class MessageMarkerModel(Base):
    """Read or archive mark of one user on one message."""

    __tablename__ = "message_markers"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )
    message_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("messages.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    kind: Mapped[str] = mapped_column(String(16), nullable=False)
    at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )

    message: Mapped[MessageModel] = relationship(back_populates="markers")

    __table_args__ = (
        UniqueConstraint("message_id", "user_id", "kind", name="uq_message_marker"),
        Index("ix_message_markers_user", "user_id", "kind"),
    )
