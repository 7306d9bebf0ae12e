from __future__ import annotations

from typing import Protocol
from uuid import UUID

from messaging_hub.domain.entities.case import Case


class CaseReader(Protocol):
    async def get_by_id(self, case_id: UUID) -> Case | None: ...
