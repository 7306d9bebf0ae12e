from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from messaging_hub.domain.entities.user import User
from messaging_hub.infrastructure.db.mappers import user as mapper
from messaging_hub.infrastructure.db.models.user import UserModel


class UserReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, user_id: UUID) -> User | None:
        result = await self._session.get(UserModel, user_id)
        return mapper.model_to_entity(result) if result else None

    async def get_many(self, user_ids: list[UUID]) -> list[User]:
        if not user_ids:
            return []
        stmt = select(UserModel).where(UserModel.id.in_(user_ids))
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def list_ids_by_role(self, role: str) -> list[UUID]:
        stmt = select(UserModel.id).where(UserModel.role == role)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())
