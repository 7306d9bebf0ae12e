"""Reactions to case mutations published by the case service.

Events arrive on the bus as ``{"event": <type>, "data": {...}}``. Each handler
returns effects for the connection manager; nothing here touches sockets.
"""
from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from messaging_hub.application.dto.effects import Effect, Notify
from messaging_hub.application.dto.events import CaseEvent
from messaging_hub.application.exceptions import ValidationError
from messaging_hub.application.policies.permissions import authorized_user_ids
from messaging_hub.application.uow import UnitOfWork
from messaging_hub.domain.entities.case import Case
from messaging_hub.domain.events.notifications import Actor, CaseUpdate, DocumentRef, FieldChange
from messaging_hub.services import message_service, notification_service

logger = logging.getLogger(__name__)

CASE_CREATED_TEXT = "Case created. Please wait for a specialist to be assigned."


def _actor(data: dict[str, Any]) -> Actor:
    return Actor(
        id=UUID(str(data["actor_id"])),
        name=data.get("actor_name") or "System",
        role=data.get("actor_role"),
    )


def _change(data: dict[str, Any], key: str) -> FieldChange | None:
    raw = data.get(key)
    if not raw:
        return None
    before, after = raw.get("from"), raw.get("to")
    return FieldChange(
        from_value=str(before) if before is not None else None,
        to_value=str(after) if after is not None else None,
    )


async def _load_case(data: dict[str, Any], uow: UnitOfWork) -> Case | None:
    case_id = UUID(str(data["case_id"]))
    case = await uow.cases.get_by_id(case_id)
    if case is None:
        logger.warning("Case event for unknown case %s", case_id)
    return case


async def _system_message(
    case: Case,
    actor: Actor,
    content: str,
    uow: UnitOfWork,
    attachment_ids: tuple[UUID, ...] = (),
) -> list[Effect]:
    conversation = await uow.conversations.get_by_case(case.id)
    if conversation is None:
        return []
    try:
        _, effects = await message_service.post_system_message(
            conversation.id, actor, content, uow, attachment_ids=attachment_ids,
        )
    except Exception:
        logger.exception("System message for case %s failed", case.id)
        return []
    return effects


def _case_update_effects(case: Case, update: CaseUpdate) -> list[Effect]:
    targets = notification_service.case_recipients(case, update.updated_by.id)
    if not targets:
        return []
    return [Notify(targets, notification_service.case_update_notification(case, update))]


async def _on_case_updated(data: dict[str, Any], uow: UnitOfWork) -> list[Effect]:
    case = await _load_case(data, uow)
    if case is None:
        return []

    actor = _actor(data)
    update = CaseUpdate(
        type="update",
        updated_by=actor,
        timestamp=datetime.now(timezone.utc),
        status=data.get("status") or case.status,
        status_changed=_change(data, "status_changed"),
        assignment_changed=_change(data, "assignment_changed"),
        priority_changed=_change(data, "priority_changed"),
    )
    effects = _case_update_effects(case, update)

    if update.status_changed is not None:
        change = update.status_changed
        effects.extend(
            await _system_message(
                case, actor, f"Case status changed from {change.from_value} to {change.to_value}", uow,
            )
        )
    return effects


async def _on_document_added(data: dict[str, Any], uow: UnitOfWork) -> list[Effect]:
    case = await _load_case(data, uow)
    if case is None:
        return []

    raw = data["document"]
    document = DocumentRef(
        id=UUID(str(raw["id"])),
        file_name=raw["file_name"],
        file_type=raw.get("file_type"),
        document_type=raw.get("document_type"),
    )
    actor = _actor(data)
    update = CaseUpdate(
        type="document_added",
        updated_by=actor,
        timestamp=datetime.now(timezone.utc),
        status=case.status,
        document=document,
    )
    effects = _case_update_effects(case, update)
    effects.extend(
        await _system_message(
            case, actor, f"Document {document.file_name} uploaded", uow,
            attachment_ids=(document.id,),
        )
    )
    return effects


async def _on_case_created(data: dict[str, Any], uow: UnitOfWork) -> list[Effect]:
    case = await _load_case(data, uow)
    if case is None:
        return []
    conversation = await uow.conversations.get_by_case(case.id)
    if conversation is None:
        return []

    actor = _actor(data)
    effects = await _system_message(case, actor, CASE_CREATED_TEXT, uow)

    targets = frozenset(await authorized_user_ids(conversation, uow)) - {actor.id}
    if targets:
        envelope = notification_service.new_conversation_notification(
            conversation,
            actor,
            datetime.now(timezone.utc),
            title=conversation.title or case.issue_type,
        )
        effects.append(Notify(targets, envelope))
    return effects


_Handler = Callable[[dict[str, Any], UnitOfWork], Awaitable[list[Effect]]]

_HANDLERS: dict[str, _Handler] = {
    "case.created": _on_case_created,
    "case.updated": _on_case_updated,
    "case.document_added": _on_document_added,
}


async def handle_case_event(event: CaseEvent, uow: UnitOfWork) -> list[Effect]:
    handler = _HANDLERS.get(event.event_type)
    if handler is None:
        logger.debug("Ignoring case event %s", event.event_type)
        return []
    try:
        return await handler(event.data, uow)
    except (KeyError, TypeError, ValueError) as exc:
        raise ValidationError(f"Malformed {event.event_type} event") from exc
