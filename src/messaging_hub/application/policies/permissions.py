"""Conversation access rules.

Case conversations are open to the case owner, the assigned specialist and
admins. Free-form conversations are open to anyone who has posted in them.
Nothing here is cached: every call goes back to the unit of work so a case
reassignment takes effect on the next action.
"""
from __future__ import annotations

from uuid import UUID

from messaging_hub.application.dto.principal import Principal
from messaging_hub.application.exceptions import AccessDeniedError, NotFoundError
from messaging_hub.application.uow import UnitOfWork
from messaging_hub.domain.entities.conversation import Conversation
from messaging_hub.domain.value_objects.enums import Role


async def _is_authorized(
    principal: Principal,
    conversation: Conversation,
    uow: UnitOfWork,
) -> bool:
    if conversation.case_id is not None:
        case = await uow.cases.get_by_id(conversation.case_id)
        if case is None:
            return False
        if principal.is_admin:
            return True
        return principal.user_id in case.party_ids()

    return await uow.messages.has_sender(conversation.id, principal.user_id)


async def authorize(
    principal: Principal,
    conversation_id: UUID,
    uow: UnitOfWork,
) -> bool:
    conversation = await uow.conversations.get_by_id(conversation_id)
    if conversation is None:
        return False
    return await _is_authorized(principal, conversation, uow)


async def assert_conversation_access(
    principal: Principal,
    conversation_id: UUID,
    uow: UnitOfWork,
) -> Conversation:
    """Raise if conversation doesn't exist or principal has no access."""
    conversation = await uow.conversations.get_by_id(conversation_id)
    if conversation is None:
        raise NotFoundError("Conversation not found")

    if not await _is_authorized(principal, conversation, uow):
        raise AccessDeniedError("Access denied to conversation")

    return conversation


async def authorized_user_ids(conversation: Conversation, uow: UnitOfWork) -> set[UUID]:
    """Every identity the access rule admits for ``conversation``."""
    if conversation.case_id is not None:
        case = await uow.cases.get_by_id(conversation.case_id)
        if case is None:
            return set()
        admins = await uow.users.list_ids_by_role(Role.ADMIN)
        return case.party_ids() | set(admins)

    return await uow.messages.list_sender_ids(conversation.id)
