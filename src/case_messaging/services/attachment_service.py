from __future__ import annotations

import logging
import uuid
from pathlib import Path

from case_messaging.application.dto.principal import Principal
from case_messaging.application.exceptions import NotFoundError, ValidationError
from case_messaging.application.policies.permissions import assert_message_access
from case_messaging.application.ports.attachments import AttachmentStore
from case_messaging.application.uow import UnitOfWork
from case_messaging.domain.entities.message import Attachment

logger = logging.getLogger(__name__)


async def get_attachment(
    message_id: uuid.UUID,
    index: int,
    principal: Principal,
    uow: UnitOfWork,
    store: AttachmentStore,
) -> tuple[Attachment, Path]:
    """Resolve the ``index``-th attachment of a message the principal is involved in."""
    message = assert_message_access(principal, await uow.messages.get_by_id(message_id))
    if not message.attachments:
        raise NotFoundError("This message has no attachments")
    if not 0 <= index < len(message.attachments):
        raise ValidationError(
            f"Attachment index must be between 0 and {len(message.attachments) - 1}"
        )

    attachment = message.attachments[index]
    path = await store.locate(attachment.filename)
    if path is None:
        logger.warning(
            "Attachment %d of message %s missing from storage (%s)",
            index, message_id, attachment.filename,
        )
        raise NotFoundError("Attachment file not found")
    return attachment, path
