from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class User:
    id: UUID
    email: str
    first_name: str
    last_name: str
    role: str

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
