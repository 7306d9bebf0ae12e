from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter

from messaging_hub.api.deps import CurrentPrincipal, HubDep, UoWDep
from messaging_hub.api.v1.schemas.conversation import (
    ConversationResponse,
    ConversationSummaryResponse,
    CreateConversationRequest,
)
from messaging_hub.application.dto.conversation import ConversationDraft
from messaging_hub.services import conversation_service

router = APIRouter(prefix="/api/v1/messaging/conversations", tags=["conversations"])


@router.get("", response_model=list[ConversationSummaryResponse])
async def list_conversations(
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> list[ConversationSummaryResponse]:
    summaries = await conversation_service.list_user_conversations(principal, uow)
    return [
        ConversationSummaryResponse(
            id=s.conversation.id,
            case_id=s.conversation.case_id,
            title=s.conversation.title,
            created_at=s.conversation.created_at,
            updated_at=s.conversation.updated_at,
            display_title=s.display_title,
            unread_count=s.unread_count,
            last_message_at=s.last_message_at,
        )
        for s in summaries
    ]


@router.post("", response_model=ConversationResponse, status_code=201)
async def create_conversation(
    body: CreateConversationRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
    hub: HubDep,
) -> ConversationResponse:
    draft = ConversationDraft(
        participant_ids=tuple(body.participants),
        title=body.title,
        case_id=body.case_id,
    )
    conv, effects = await conversation_service.create_conversation(draft, principal, uow)
    await hub.apply(effects)
    return ConversationResponse.model_validate(conv, from_attributes=True)


@router.get("/{conversation_id}", response_model=ConversationResponse)
async def get_conversation(
    conversation_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> ConversationResponse:
    conv = await conversation_service.get_conversation(conversation_id, principal, uow)
    return ConversationResponse.model_validate(conv, from_attributes=True)
