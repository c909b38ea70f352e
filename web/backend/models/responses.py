#!/usr/bin/env python3
"""
Response models for API endpoints.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict, Any


class ListingSummary(BaseModel):
    """A seat listing as shown in browse and detail views."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "550e8400-e29b-41d4-a716-446655440000",
                "owner_id": "6ba7b810-9dad-11d1-80b4-00c04fd430c8",
                "team_id": "lakers",
                "game_date": "2026-03-14",
                "kind": "HAVE",
                "section": "101",
                "row": "F",
                "seat": "12",
                "zone": "Lower Bowl",
                "want_zones": ["Courtside"],
                "want_sections": [],
                "face_value": 120.0,
                "status": "ACTIVE",
                "boosted": False,
                "created_at": "2026-02-01T12:00:00+00:00"
            }
        }
    )

    id: str
    owner_id: str
    team_id: str
    game_date: str
    kind: str
    section: str
    row: str
    seat: str
    zone: str
    want_zones: List[str] = Field(default_factory=list)
    want_sections: List[str] = Field(default_factory=list)
    face_value: float = Field(ge=0)
    status: str
    boosted: bool = False
    boosted_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ListingResponse(BaseModel):
    success: bool
    listing: ListingSummary


class ListingsResponse(BaseModel):
    success: bool
    count: int
    listings: List[ListingSummary]


class ScoredListingSummary(BaseModel):
    """A listing with its compatibility score against some base listing."""
    listing: ListingSummary
    score: int
    reason: str


class RelatedListingsResponse(BaseModel):
    success: bool
    count: int
    listings: List[ScoredListingSummary]


class UserMatchSummary(BaseModel):
    my_listing: ListingSummary
    matched_listing: ListingSummary
    score: int
    reason: str


class MatchesResponse(BaseModel):
    """Response containing the caller's matches, best first."""
    success: bool
    count: int
    matches: List[UserMatchSummary]


class DeleteResponse(BaseModel):
    success: bool
    id: str


class MessageSummary(BaseModel):
    id: str
    conversation_id: str
    sender_id: str
    text: str
    created_at: Optional[str] = None


class ConversationSummary(BaseModel):
    id: str
    listing_id: Optional[str] = None
    status: str
    participant_ids: List[str]
    archived: bool = False
    ended_at: Optional[str] = None
    ended_by: Optional[str] = None
    ended_reason: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    last_message: Optional[MessageSummary] = None


class ConversationResponse(BaseModel):
    success: bool
    conversation: ConversationSummary


class ConversationDetailResponse(BaseModel):
    success: bool
    conversation: ConversationSummary
    messages: List[MessageSummary]


class ConversationsResponse(BaseModel):
    success: bool
    count: int
    conversations: List[ConversationSummary]


class SendMessageResponse(BaseModel):
    """
    A sent message. suggest_set_inactive is set when the text reads like the
    swap is done and the sender owns the conversation's ACTIVE listing.
    """
    success: bool
    message: MessageSummary
    suggest_set_inactive: bool = False
    listing_id: Optional[str] = None


class ArchiveResponse(BaseModel):
    success: bool
    conversation_id: str
    archived: bool


class SwapCompleteResponse(BaseModel):
    success: bool
    my_listing: ListingSummary
    their_listing: ListingSummary


class NotificationSummary(BaseModel):
    id: str
    type: str
    data: Dict[str, Any] = Field(default_factory=dict)
    is_read: bool
    created_at: Optional[str] = None


class NotificationsResponse(BaseModel):
    success: bool
    notifications: List[NotificationSummary]
    unread_count: int


class NotificationReadResponse(BaseModel):
    success: bool
    updated: int
    unread_count: int


class UnreadCountResponse(BaseModel):
    success: bool
    unread_count: int


class CreditTransactionSummary(BaseModel):
    id: str
    amount: int
    note: Optional[str] = None
    created_at: Optional[str] = None


class CreditBalanceResponse(BaseModel):
    success: bool
    credits: int
    transactions: List[CreditTransactionSummary]


class CreditPurchaseResponse(BaseModel):
    success: bool
    credits: int
    transaction: CreditTransactionSummary
    message: str
