from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class CaseEvent:
    """Case mutation published by the case service on the bus."""

    event_type: str  # case.created | case.updated | case.document_added
    data: dict[str, Any]
