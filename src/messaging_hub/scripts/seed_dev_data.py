"""Seed development data: a client, a specialist, an admin, one case and its conversation."""
from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timezone

from messaging_hub.domain.entities.conversation import Conversation
from messaging_hub.domain.entities.message import Message
from messaging_hub.domain.value_objects.enums import ContentType, Role, SenderKind
from messaging_hub.infrastructure.db.models.case import CaseModel
from messaging_hub.infrastructure.db.models.user import UserModel
from messaging_hub.infrastructure.db.session import AsyncSessionLocal
from messaging_hub.infrastructure.db.uow import SqlAlchemyUoW
from messaging_hub.logging_config import configure_logging

logger = logging.getLogger(__name__)


async def seed() -> None:
    async with AsyncSessionLocal() as session:
        uow = SqlAlchemyUoW(session)
        now = datetime.now(timezone.utc)

        client = UserModel(
            id=uuid.uuid4(), email="client@example.com", first_name="Dana", last_name="Client", role=Role.USER,
        )
        specialist = UserModel(
            id=uuid.uuid4(), email="spec@example.com", first_name="Sam", last_name="Specialist",
            role=Role.SPECIALIST,
        )
        admin = UserModel(
            id=uuid.uuid4(), email="admin@example.com", first_name="Alex", last_name="Admin", role=Role.ADMIN,
        )
        session.add_all([client, specialist, admin])
        await session.flush()

        case = CaseModel(
            id=uuid.uuid4(),
            case_number="CASE-0001",
            owner_id=client.id,
            assigned_specialist_id=specialist.id,
            status="in_progress",
            priority="normal",
            issue_type="Benefits enrollment",
        )
        session.add(case)
        await session.flush()

        conv = await uow.conversations_w.create(
            Conversation(id=uuid.uuid4(), case_id=case.id, title=None, created_at=now, updated_at=now)
        )

        messages_data = [
            (client.id, SenderKind.USER, "Hi, my enrollment form was rejected."),
            (specialist.id, SenderKind.SPECIALIST, "Hello! Could you upload the signed form again?"),
            (client.id, SenderKind.USER, "Done, just uploaded it."),
        ]
        for sender_id, sender_kind, content in messages_data:
            await uow.messages_w.create(
                Message(
                    id=uuid.uuid4(),
                    conversation_id=conv.id,
                    sender_id=sender_id,
                    sender_kind=sender_kind,
                    content=content,
                    content_type=ContentType.TEXT,
                    is_read=False,
                    created_at=datetime.now(timezone.utc),
                )
            )

        await uow.commit()
        logger.info(
            "Seeded case %s (conversation %s) for client=%s specialist=%s admin=%s",
            case.case_number, conv.id, client.id, specialist.id, admin.id,
        )


def main() -> None:
    configure_logging()
    asyncio.run(seed())


if __name__ == "__main__":
    main()
