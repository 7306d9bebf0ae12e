from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from messaging_hub.domain.value_objects.enums import Role, SenderKind


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """Verified bearer token contents."""

    user_id: UUID


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller identity, fixed for the lifetime of a connection."""

    user_id: UUID
    role: Role
    display_name: str

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def sender_kind(self) -> SenderKind:
        if self.role == Role.USER:
            return SenderKind.USER
        return SenderKind.SPECIALIST
