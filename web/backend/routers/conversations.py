#!/usr/bin/env python3
"""
Conversation endpoints - start, read, message, end, archive and complete swaps.
"""

import logging

from fastapi import APIRouter, Depends, Query, Request

from ..dependencies import get_current_user_id, get_conversation_coordinator
from ..rate_limit import limiter, CONVERSATION_START_LIMIT, MESSAGE_SEND_LIMIT
from ..services import ConversationCoordinator
from ..services.presenters import conversation_summary, listing_summary, message_summary
from ..models.requests import (
    ConversationArchiveRequest,
    ConversationEndRequest,
    ConversationStartRequest,
    MessageCreateRequest,
    SwapCompleteRequest,
)
from ..models.responses import (
    ArchiveResponse,
    ConversationDetailResponse,
    ConversationResponse,
    ConversationsResponse,
    SendMessageResponse,
    SwapCompleteResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["conversations"])


@router.post("/conversations", response_model=ConversationResponse)
@limiter.limit(CONVERSATION_START_LIMIT)
def start_conversation(
    request: Request,
    body: ConversationStartRequest,
    user_id: str = Depends(get_current_user_id),
    coordinator: ConversationCoordinator = Depends(get_conversation_coordinator)
):
    """
    Get or create the conversation between the caller and another user,
    optionally about one of that user's listings.

    Repeated and concurrent calls return the same conversation. With
    pay-to-chat enabled a new conversation costs credits; 402 reports
    credits_required and current_credits when the caller cannot pay.
    """
    conversation = coordinator.start_or_get_conversation(user_id, body.other_user_id, body.listing_id)
    return ConversationResponse(success=True, conversation=conversation_summary(conversation, user_id))


@router.get("/conversations", response_model=ConversationsResponse)
def list_conversations(
    include_archived: bool = Query(True),
    user_id: str = Depends(get_current_user_id),
    coordinator: ConversationCoordinator = Depends(get_conversation_coordinator)
):
    overviews = coordinator.list_conversations(user_id, include_archived=include_archived)
    return ConversationsResponse(
        success=True,
        count=len(overviews),
        conversations=[
            conversation_summary(o.conversation, user_id, last_message=o.last_message)
            for o in overviews
        ]
    )


@router.get("/conversations/{conversation_id}", response_model=ConversationDetailResponse)
def get_conversation(
    conversation_id: str,
    user_id: str = Depends(get_current_user_id),
    coordinator: ConversationCoordinator = Depends(get_conversation_coordinator)
):
    conversation = coordinator.get_conversation(conversation_id, user_id)
    return ConversationDetailResponse(
        success=True,
        conversation=conversation_summary(conversation, user_id),
        messages=[message_summary(m) for m in conversation.messages]
    )


@router.post("/conversations/{conversation_id}/messages", response_model=SendMessageResponse)
@limiter.limit(MESSAGE_SEND_LIMIT)
def send_message(
    request: Request,
    conversation_id: str,
    body: MessageCreateRequest,
    user_id: str = Depends(get_current_user_id),
    coordinator: ConversationCoordinator = Depends(get_conversation_coordinator)
):
    result = coordinator.send_message(conversation_id, user_id, body.text)
    return SendMessageResponse(
        success=True,
        message=message_summary(result.message),
        suggest_set_inactive=result.suggest_set_inactive,
        listing_id=result.listing_id
    )


@router.patch("/conversations/{conversation_id}/end", response_model=ConversationResponse)
def end_conversation(
    conversation_id: str,
    body: ConversationEndRequest,
    user_id: str = Depends(get_current_user_id),
    coordinator: ConversationCoordinator = Depends(get_conversation_coordinator)
):
    conversation = coordinator.end_conversation(
        conversation_id,
        user_id,
        body.reason,
        other_reason_text=body.other_reason_text
    )
    return ConversationResponse(success=True, conversation=conversation_summary(conversation, user_id))


@router.patch("/conversations/{conversation_id}/archive", response_model=ArchiveResponse)
def archive_conversation(
    conversation_id: str,
    body: ConversationArchiveRequest,
    user_id: str = Depends(get_current_user_id),
    coordinator: ConversationCoordinator = Depends(get_conversation_coordinator)
):
    archived = coordinator.archive_conversation(conversation_id, user_id, body.archived)
    return ArchiveResponse(success=True, conversation_id=conversation_id, archived=archived)


@router.post("/swap-complete", response_model=SwapCompleteResponse)
def complete_swap(
    body: SwapCompleteRequest,
    user_id: str = Depends(get_current_user_id),
    coordinator: ConversationCoordinator = Depends(get_conversation_coordinator)
):
    """Mark both listings of a finished swap as MATCHED."""
    mine, theirs = coordinator.complete_swap(user_id, body.my_listing_id, body.their_listing_id)
    return SwapCompleteResponse(
        success=True,
        my_listing=listing_summary(mine),
        their_listing=listing_summary(theirs)
    )
