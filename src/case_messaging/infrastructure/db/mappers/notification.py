from __future__ import annotations

from case_messaging.domain.entities.notification import Notification
from case_messaging.domain.value_objects.enums import NotificationKind
from case_messaging.infrastructure.db.models.notification import NotificationModel


def model_to_entity(model: NotificationModel) -> Notification:
    return Notification(
        id=model.id,
        recipient_id=model.recipient_id,
        kind=NotificationKind(model.kind),
        title=model.title,
        body=model.body,
        link=model.link,
        message_id=model.message_id,
        dedupe_key=model.dedupe_key,
        created_at=model.created_at,
        read=model.read,
        metadata=dict(model.meta or {}),
    )


def entity_to_model(entity: Notification) -> NotificationModel:
    return NotificationModel(
        id=entity.id,
        recipient_id=entity.recipient_id,
        kind=entity.kind.value,
        title=entity.title,
        body=entity.body,
        link=entity.link,
        message_id=entity.message_id,
        dedupe_key=entity.dedupe_key,
        meta=dict(entity.metadata),
        read=entity.read,
        created_at=entity.created_at,
    )
