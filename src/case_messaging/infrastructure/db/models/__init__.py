"""Import all models so Alembic can discover them via Base.metadata."""
from case_messaging.infrastructure.db.models.directory import CaseTransmissionModel, UserModel
from case_messaging.infrastructure.db.models.message import MessageMarkerModel, MessageModel
from case_messaging.infrastructure.db.models.notification import NotificationModel
from case_messaging.infrastructure.db.models.trash import TrashEntryModel

__all__ = [
    "CaseTransmissionModel",
    "MessageMarkerModel",
    "MessageModel",
    "NotificationModel",
    "TrashEntryModel",
    "UserModel",
]
