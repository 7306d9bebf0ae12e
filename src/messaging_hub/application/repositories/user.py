from __future__ import annotations

from typing import Protocol
from uuid import UUID

from messaging_hub.domain.entities.user import User


class UserReader(Protocol):
    async def get_by_id(self, user_id: UUID) -> User | None: ...

    async def get_many(self, user_ids: list[UUID]) -> list[User]: ...

    async def list_ids_by_role(self, role: str) -> list[UUID]: ...
