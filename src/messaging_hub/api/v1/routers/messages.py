from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, HTTPException, Query

from messaging_hub.api.deps import CurrentPrincipal, HubDep, UoWDep
from messaging_hub.api.v1.schemas.message import (
    DeleteMessageResponse,
    MarkReadResponse,
    MessageResponse,
    SendMessageRequest,
    UnreadCountResponse,
)
from messaging_hub.application.dto.message import MessageDraft
from messaging_hub.infrastructure.ws.protocol import message_out
from messaging_hub.services import message_service, read_state_service

router = APIRouter(prefix="/api/v1/messaging", tags=["messages"])


@router.get("/conversations/{conversation_id}/messages", response_model=list[MessageResponse])
async def list_messages(
    conversation_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
    hub: HubDep,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100, alias="pageSize"),
) -> list[MessageResponse]:
    messages = await message_service.list_messages(
        conversation_id, principal, page, page_size, uow,
    )
    # Fetching a page counts as reading the conversation.
    _count, effects = await read_state_service.mark_read(
        conversation_id, principal, uow, include_reader=True,
    )
    await hub.apply(effects)
    return [message_out(m) for m in messages]


@router.post(
    "/conversations/{conversation_id}/messages",
    response_model=MessageResponse,
    status_code=201,
)
async def send_message(
    conversation_id: UUID,
    body: SendMessageRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
    hub: HubDep,
) -> MessageResponse:
    draft = MessageDraft(
        content=body.content,
        content_type=body.content_type,
        attachment_ids=tuple(body.attachments),
    )
    message, effects = await message_service.send_message(
        conversation_id, principal, draft, hub.registry, uow, typing=hub.typing,
    )
    await hub.apply(effects)
    return message_out(message)


@router.post("/conversations/{conversation_id}/read", response_model=MarkReadResponse)
async def mark_read(
    conversation_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
    hub: HubDep,
) -> MarkReadResponse:
    count, effects = await read_state_service.mark_read(
        conversation_id, principal, uow, include_reader=True,
    )
    await hub.apply(effects)
    return MarkReadResponse(count=count, message=f"{count} messages marked as read")


@router.get("/unread", response_model=UnreadCountResponse)
async def unread_count(principal: CurrentPrincipal, uow: UoWDep) -> UnreadCountResponse:
    return UnreadCountResponse(unread_count=await message_service.unread_count(principal, uow))


@router.delete("/messages/{message_id}", response_model=DeleteMessageResponse)
async def delete_message(
    message_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> DeleteMessageResponse:
    if not await message_service.delete_or_redact(message_id, principal, uow):
        raise HTTPException(status_code=404, detail="Message not found or not owned by you")
    return DeleteMessageResponse(message="Message deleted successfully")
