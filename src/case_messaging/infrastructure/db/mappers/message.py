from __future__ import annotations

from case_messaging.domain.entities.message import Attachment, Marker, Message
from case_messaging.domain.value_objects.enums import MarkerKind, MessageCategory
from case_messaging.infrastructure.db.models.message import MessageMarkerModel, MessageModel


def _markers(model: MessageModel, kind: MarkerKind) -> tuple[Marker, ...]:
    rows = sorted((m for m in model.markers if m.kind == kind.value), key=lambda m: m.at)
    return tuple(Marker(user_id=m.user_id, at=m.at) for m in rows)


def model_to_entity(model: MessageModel) -> Message:
    return Message(
        id=model.id,
        thread_id=model.thread_id,
        parent_id=model.parent_id,
        sender_id=model.sender_id,
        recipient_ids=frozenset(model.recipient_ids or ()),
        copy_ids=frozenset(model.copy_ids or ()),
        category=MessageCategory(model.category),
        subject=model.subject,
        body=model.body,
        case_ref=model.case_ref,
        created_at=model.created_at,
        attachments=tuple(Attachment.from_json(a) for a in model.attachments or ()),
        read_by=_markers(model, MarkerKind.READ),
        archived_by=_markers(model, MarkerKind.ARCHIVED),
    )


def entity_to_model(entity: Message) -> MessageModel:
    markers = [
        MessageMarkerModel(message_id=entity.id, user_id=m.user_id, kind=kind.value, at=m.at)
        for kind, group in ((MarkerKind.READ, entity.read_by), (MarkerKind.ARCHIVED, entity.archived_by))
        for m in group
    ]
    return MessageModel(
        id=entity.id,
        thread_id=entity.thread_id,
        parent_id=entity.parent_id,
        sender_id=entity.sender_id,
        recipient_ids=sorted(entity.recipient_ids),
        copy_ids=sorted(entity.copy_ids),
        category=entity.category.value,
        subject=entity.subject,
        body=entity.body,
        case_ref=entity.case_ref,
        attachments=[a.as_json() for a in entity.attachments],
        created_at=entity.created_at,
        markers=markers,
    )
