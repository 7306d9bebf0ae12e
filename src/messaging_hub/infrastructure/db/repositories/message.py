from __future__ import annotations

from uuid import UUID

from sqlalchemy import and_, delete, exists, func, insert, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from messaging_hub.domain.entities.message import Message
from messaging_hub.infrastructure.db.mappers import message as mapper
from messaging_hub.infrastructure.db.models.case import CaseModel
from messaging_hub.infrastructure.db.models.conversation import ConversationModel
from messaging_hub.infrastructure.db.models.document import DocumentModel
from messaging_hub.infrastructure.db.models.message import MessageModel, message_attachments


class MessageReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, message_id: UUID) -> Message | None:
        result = await self._session.get(MessageModel, message_id)
        return mapper.loaded_model_to_entity(result) if result else None

    async def list_messages(
        self,
        conversation_id: UUID,
        *,
        offset: int = 0,
        limit: int = 20,
    ) -> list[Message]:
        stmt = (
            select(MessageModel)
            .where(MessageModel.conversation_id == conversation_id)
            .order_by(MessageModel.created_at.asc(), MessageModel.id.asc())
            .offset(offset)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [mapper.loaded_model_to_entity(m) for m in result.unique().scalars().all()]

    async def has_sender(self, conversation_id: UUID, user_id: UUID) -> bool:
        stmt = select(
            exists().where(
                MessageModel.conversation_id == conversation_id,
                MessageModel.sender_id == user_id,
            )
        )
        result = await self._session.execute(stmt)
        return bool(result.scalar())

    async def list_sender_ids(self, conversation_id: UUID) -> set[UUID]:
        stmt = (
            select(MessageModel.sender_id)
            .where(MessageModel.conversation_id == conversation_id)
            .distinct()
        )
        result = await self._session.execute(stmt)
        return set(result.scalars().all())

    async def count_unread_for_user(self, user_id: UUID) -> int:
        posted = aliased(MessageModel)
        has_posted = (
            select(posted.id)
            .where(posted.sender_id == user_id, posted.conversation_id == ConversationModel.id)
            .exists()
        )
        stmt = (
            select(func.count(MessageModel.id))
            .join(ConversationModel, ConversationModel.id == MessageModel.conversation_id)
            .outerjoin(CaseModel, CaseModel.id == ConversationModel.case_id)
            .where(
                MessageModel.sender_id != user_id,
                MessageModel.is_read.is_(False),
                or_(
                    CaseModel.owner_id == user_id,
                    CaseModel.assigned_specialist_id == user_id,
                    and_(ConversationModel.case_id.is_(None), has_posted),
                ),
            )
        )
        result = await self._session.execute(stmt)
        return int(result.scalar_one())


class MessageWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, message: Message, attachment_ids: tuple[UUID, ...] = ()) -> Message:
        model = mapper.entity_to_model(message)
        self._session.add(model)
        await self._session.flush()

        documents: list[DocumentModel] = []
        if attachment_ids:
            await self._session.execute(
                insert(message_attachments),
                [{"message_id": model.id, "document_id": doc_id} for doc_id in attachment_ids],
            )
            result = await self._session.execute(
                select(DocumentModel).where(DocumentModel.id.in_(attachment_ids))
            )
            by_id = {d.id: d for d in result.scalars().all()}
            documents = [by_id[doc_id] for doc_id in attachment_ids if doc_id in by_id]

        return mapper.model_to_entity(model, documents=documents)

    async def delete(self, message_id: UUID) -> None:
        await self._session.execute(delete(MessageModel).where(MessageModel.id == message_id))

    async def redact(self, message_id: UUID, content: str, content_type: str) -> None:
        stmt = (
            update(MessageModel)
            .where(MessageModel.id == message_id)
            .values(content=content, content_type=content_type)
        )
        await self._session.execute(stmt)

    async def mark_read(self, conversation_id: UUID, reader_id: UUID) -> int:
        stmt = (
            update(MessageModel)
            .where(
                MessageModel.conversation_id == conversation_id,
                MessageModel.sender_id != reader_id,
                MessageModel.is_read.is_(False),
            )
            .values(is_read=True)
            .returning(MessageModel.id)
        )
        result = await self._session.execute(stmt)
        return len(result.scalars().all())
