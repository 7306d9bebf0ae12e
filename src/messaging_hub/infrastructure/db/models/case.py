from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from messaging_hub.infrastructure.db.base import Base


class CaseModel(Base):
    """Read-only mapping of the case service's ``cases`` table."""

    __tablename__ = "cases"

    id: Mapped[uuid.UUID] = mapped_column("case_id", UUID(as_uuid=True), primary_key=True)
    case_number: Mapped[str] = mapped_column(String(50), nullable=False)
    owner_id: Mapped[uuid.UUID] = mapped_column(
        "user_id",
        UUID(as_uuid=True),
        ForeignKey("users.user_id"),
        nullable=False,
    )
    assigned_specialist_id: Mapped[uuid.UUID | None] = mapped_column(
        "assigned_to",
        UUID(as_uuid=True),
        ForeignKey("users.user_id"),
        nullable=True,
    )
    status: Mapped[str] = mapped_column(String(30), nullable=False, default="open")
    priority: Mapped[str] = mapped_column(String(20), nullable=False, default="normal")
    issue_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
