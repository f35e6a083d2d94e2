from __future__ import annotations

from case_messaging.domain.entities.trash import TrashEntry
from case_messaging.domain.value_objects.enums import TrashItemType
from case_messaging.infrastructure.db.models.trash import TrashEntryModel


def model_to_entity(model: TrashEntryModel) -> TrashEntry:
    return TrashEntry(
        id=model.id,
        item_type=TrashItemType(model.item_type),
        original_id=model.original_id,
        snapshot=model.snapshot,
        deleted_by=model.deleted_by,
        original_owner=model.original_owner,
        deleted_at=model.deleted_at,
        origin=model.origin,
        metadata=dict(model.meta or {}),
    )


def entity_to_model(entity: TrashEntry) -> TrashEntryModel:
    return TrashEntryModel(
        id=entity.id,
        item_type=entity.item_type.value,
        original_id=entity.original_id,
        snapshot=entity.snapshot,
        deleted_by=entity.deleted_by,
        original_owner=entity.original_owner,
        origin=entity.origin,
        meta=dict(entity.metadata),
        deleted_at=entity.deleted_at,
    )
