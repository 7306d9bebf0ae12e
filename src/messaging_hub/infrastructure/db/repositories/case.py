from __future__ import annotations

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from messaging_hub.domain.entities.case import Case
from messaging_hub.infrastructure.db.mappers import case as mapper
from messaging_hub.infrastructure.db.models.case import CaseModel


class CaseReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, case_id: UUID) -> Case | None:
        # populate_existing: reassignments made by the case service must be visible
        result = await self._session.get(CaseModel, case_id, populate_existing=True)
        return mapper.model_to_entity(result) if result else None
