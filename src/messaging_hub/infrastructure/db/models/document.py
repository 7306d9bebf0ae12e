from __future__ import annotations

import uuid

from sqlalchemy import String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from messaging_hub.infrastructure.db.base import Base


class DocumentModel(Base):
    """Documents are uploaded through the document service; the hub only links them."""

    __tablename__ = "documents"

    id: Mapped[uuid.UUID] = mapped_column("document_id", UUID(as_uuid=True), primary_key=True)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    file_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    document_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
