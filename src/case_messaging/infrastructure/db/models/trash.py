from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import BigInteger, Index, String, text
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from case_messaging.infrastructure.db.base import Base


class TrashEntryModel(Base):
    __tablename__ = "trash_entries"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )
    item_type: Mapped[str] = mapped_column(String(32), nullable=False)
    original_id: Mapped[str] = mapped_column(String(64), nullable=False)
    snapshot: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False)
    deleted_by: Mapped[int] = mapped_column(BigInteger, nullable=False)
    original_owner: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    origin: Mapped[str] = mapped_column(String(64), nullable=False, server_default="unknown")
    meta: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSONB, nullable=False, default=dict, server_default=text("'{}'::jsonb"),
    )
    deleted_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )

    __table_args__ = (
        Index("ix_trash_entries_deleted_at", "deleted_at"),
        Index("ix_trash_entries_owner", "deleted_by", "original_owner"),
        Index("ix_trash_entries_original", "item_type", "original_id"),
    )
