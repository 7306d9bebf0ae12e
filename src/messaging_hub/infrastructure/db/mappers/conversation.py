from __future__ import annotations

from messaging_hub.domain.entities.conversation import Conversation
from messaging_hub.infrastructure.db.models.conversation import ConversationModel


def model_to_entity(model: ConversationModel) -> Conversation:
    return Conversation(
        id=model.id,
        case_id=model.case_id,
        title=model.title,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def entity_to_model(entity: Conversation) -> ConversationModel:
    return ConversationModel(
        id=entity.id,
        case_id=entity.case_id,
        title=entity.title,
        created_at=entity.created_at,
        updated_at=entity.updated_at,
    )
