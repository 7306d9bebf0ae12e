from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Case:
    """Read-only view of a case owned by the case service."""

    id: UUID
    case_number: str
    owner_id: UUID
    assigned_specialist_id: UUID | None
    status: str
    priority: str
    issue_type: str | None = None

    def party_ids(self) -> set[UUID]:
        ids = {self.owner_id}
        if self.assigned_specialist_id is not None:
            ids.add(self.assigned_specialist_id)
        return ids
