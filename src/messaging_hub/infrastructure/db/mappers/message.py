from __future__ import annotations

from collections.abc import Iterable

from messaging_hub.domain.entities.message import Attachment, Message, Sender
from messaging_hub.infrastructure.db.mappers import user as user_mapper
from messaging_hub.infrastructure.db.models.document import DocumentModel
from messaging_hub.infrastructure.db.models.message import MessageModel


def document_to_attachment(model: DocumentModel) -> Attachment:
    return Attachment(
        document_id=model.id,
        file_name=model.file_name,
        file_type=model.file_type,
        file_url=model.file_url,
    )


def model_to_entity(
    model: MessageModel,
    *,
    documents: Iterable[DocumentModel] = (),
    sender: Sender | None = None,
) -> Message:
    return Message(
        id=model.id,
        conversation_id=model.conversation_id,
        sender_id=model.sender_id,
        sender_kind=model.sender_kind,
        content=model.content,
        content_type=model.content_type,
        is_read=model.is_read,
        created_at=model.created_at,
        attachments=tuple(document_to_attachment(d) for d in documents),
        sender=sender,
    )


def loaded_model_to_entity(model: MessageModel) -> Message:
    """For rows fetched with their sender and documents eagerly loaded."""
    return model_to_entity(
        model,
        documents=model.documents,
        sender=user_mapper.model_to_sender(model.sender),
    )


def entity_to_model(entity: Message) -> MessageModel:
    return MessageModel(
        id=entity.id,
        conversation_id=entity.conversation_id,
        sender_id=entity.sender_id,
        sender_kind=entity.sender_kind,
        content=entity.content,
        content_type=entity.content_type,
        is_read=entity.is_read,
        created_at=entity.created_at,
    )
