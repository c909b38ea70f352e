#!/usr/bin/env python3
"""
Conversion of ORM rows into API response models.
"""

from typing import Optional

from database.models import Conversation, CreditTransaction, Listing, Message, Notification
from ..models.responses import (
    ConversationSummary,
    CreditTransactionSummary,
    ListingSummary,
    MessageSummary,
    NotificationSummary,
)
from ..utils import safe_float, safe_datetime_iso, safe_date_iso


def listing_summary(listing: Listing) -> ListingSummary:
    return ListingSummary(
        id=listing.id,
        owner_id=listing.owner_id,
        team_id=listing.team_id,
        game_date=safe_date_iso(listing.game_date),
        kind=listing.kind,
        section=listing.section or "",
        row=listing.row or "",
        seat=listing.seat or "",
        zone=listing.zone or "",
        want_zones=list(listing.want_zones or []),
        want_sections=list(listing.want_sections or []),
        face_value=safe_float(listing.face_value),
        status=listing.status,
        boosted=bool(listing.boosted),
        boosted_at=safe_datetime_iso(listing.boosted_at),
        created_at=safe_datetime_iso(listing.created_at),
        updated_at=safe_datetime_iso(listing.updated_at),
    )


def message_summary(message: Message) -> MessageSummary:
    return MessageSummary(
        id=message.id,
        conversation_id=message.conversation_id,
        sender_id=message.sender_id,
        text=message.text,
        created_at=safe_datetime_iso(message.created_at),
    )


def conversation_summary(
    conversation: Conversation,
    user_id: Optional[str] = None,
    last_message: Optional[Message] = None
) -> ConversationSummary:
    archived = any(p.archived for p in conversation.participants if p.user_id == user_id)
    return ConversationSummary(
        id=conversation.id,
        listing_id=conversation.listing_id,
        status=conversation.status,
        participant_ids=conversation.participant_ids,
        archived=archived,
        ended_at=safe_datetime_iso(conversation.ended_at),
        ended_by=conversation.ended_by,
        ended_reason=conversation.ended_reason,
        created_at=safe_datetime_iso(conversation.created_at),
        updated_at=safe_datetime_iso(conversation.updated_at),
        last_message=message_summary(last_message) if last_message else None,
    )


def notification_summary(notification: Notification) -> NotificationSummary:
    return NotificationSummary(
        id=notification.id,
        type=notification.type,
        data=dict(notification.data or {}),
        is_read=bool(notification.is_read),
        created_at=safe_datetime_iso(notification.created_at),
    )


def credit_transaction_summary(transaction: CreditTransaction) -> CreditTransactionSummary:
    return CreditTransactionSummary(
        id=transaction.id,
        amount=transaction.amount,
        note=transaction.note,
        created_at=safe_datetime_iso(transaction.created_at),
    )
