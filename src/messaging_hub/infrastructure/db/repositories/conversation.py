from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import ColumnElement, and_, case, exists, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from messaging_hub.domain.entities.conversation import Conversation, ConversationSummary
from messaging_hub.infrastructure.db.mappers import conversation as mapper
from messaging_hub.infrastructure.db.models.case import CaseModel
from messaging_hub.infrastructure.db.models.conversation import ConversationModel
from messaging_hub.infrastructure.db.models.message import MessageModel


def _visible_to(user_id: UUID) -> ColumnElement[bool]:
    """Case owner or assigned specialist; posters only for conversations without a case."""
    has_posted = exists().where(
        MessageModel.conversation_id == ConversationModel.id,
        MessageModel.sender_id == user_id,
    )
    return or_(
        CaseModel.owner_id == user_id,
        CaseModel.assigned_specialist_id == user_id,
        and_(ConversationModel.case_id.is_(None), has_posted),
    )


class ConversationReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        result = await self._session.get(ConversationModel, conversation_id)
        return mapper.model_to_entity(result) if result else None

    async def get_by_case(self, case_id: UUID) -> Conversation | None:
        stmt = (
            select(ConversationModel)
            .where(ConversationModel.case_id == case_id)
            .order_by(ConversationModel.created_at.asc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def list_for_user(self, user_id: UUID) -> list[ConversationSummary]:
        unread = (
            select(func.count())
            .where(
                MessageModel.conversation_id == ConversationModel.id,
                MessageModel.sender_id != user_id,
                MessageModel.is_read.is_(False),
            )
            .correlate(ConversationModel)
            .scalar_subquery()
        )
        last_message_at = (
            select(func.max(MessageModel.created_at))
            .where(MessageModel.conversation_id == ConversationModel.id)
            .correlate(ConversationModel)
            .scalar_subquery()
        )
        display_title = case(
            (ConversationModel.case_id.is_not(None), CaseModel.issue_type),
            else_=ConversationModel.title,
        )
        stmt = (
            select(
                ConversationModel,
                display_title.label("display_title"),
                unread.label("unread_count"),
                last_message_at.label("last_message_at"),
            )
            .outerjoin(CaseModel, CaseModel.id == ConversationModel.case_id)
            .where(_visible_to(user_id))
            .order_by(last_message_at.desc().nullslast(), ConversationModel.id)
        )
        result = await self._session.execute(stmt)
        return [
            ConversationSummary(
                conversation=mapper.model_to_entity(row.ConversationModel),
                display_title=row.display_title,
                unread_count=row.unread_count or 0,
                last_message_at=row.last_message_at,
            )
            for row in result.all()
        ]

    async def list_ids_for_user(self, user_id: UUID) -> list[UUID]:
        stmt = (
            select(ConversationModel.id)
            .outerjoin(CaseModel, CaseModel.id == ConversationModel.case_id)
            .where(_visible_to(user_id))
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())


class ConversationWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, conversation: Conversation) -> Conversation:
        model = mapper.entity_to_model(conversation)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)

    async def touch(self, conversation_id: UUID, ts: datetime) -> None:
        stmt = (
            update(ConversationModel)
            .where(ConversationModel.id == conversation_id)
            .values(updated_at=ts)
        )
        await self._session.execute(stmt)
