"""Import all models so Alembic can discover them via Base.metadata."""
from messaging_hub.infrastructure.db.models.case import CaseModel
from messaging_hub.infrastructure.db.models.conversation import ConversationModel
from messaging_hub.infrastructure.db.models.document import DocumentModel
from messaging_hub.infrastructure.db.models.message import MessageModel, message_attachments
from messaging_hub.infrastructure.db.models.user import UserModel

__all__ = [
    "CaseModel",
    "ConversationModel",
    "DocumentModel",
    "MessageModel",
    "UserModel",
    "message_attachments",
]
