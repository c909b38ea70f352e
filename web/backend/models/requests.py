#!/usr/bin/env python3
"""
Request models for API endpoints.
"""

from datetime import date
from pydantic import BaseModel, Field, StrictBool, StrictInt
from typing import List, Literal, Optional


class ListingCreateRequest(BaseModel):
    """Request to create a seat listing."""
    team_id: str = Field(..., min_length=1, description="Team whose game the seat is for")
    game_date: date = Field(..., description="Game date (YYYY-MM-DD)")
    kind: Literal["HAVE", "WANT"] = Field(default="HAVE", description="HAVE: I hold this seat; WANT: I am looking for one")
    section: Optional[str] = None
    row: Optional[str] = None
    seat: Optional[str] = None
    zone: Optional[str] = None
    want_zones: List[str] = Field(default_factory=list)
    want_sections: List[str] = Field(default_factory=list)
    face_value: float = Field(..., ge=0, description="Face value of the ticket")


class ListingStatusRequest(BaseModel):
    """Request to change a listing's status."""
    status: str = Field(..., description="ACTIVE or INACTIVE")


class ConversationStartRequest(BaseModel):
    """Request to start (or reopen) a conversation with another user."""
    other_user_id: Optional[str] = Field(None, description="User to talk to")
    listing_id: Optional[str] = Field(None, description="Listing the conversation is about")


class MessageCreateRequest(BaseModel):
    text: str = Field(..., description="Message body")


class ConversationEndRequest(BaseModel):
    reason: str = Field(..., description="completed, unsafe, not_interested or other")
    other_reason_text: Optional[str] = Field(None, description="Free text when reason is 'other'")


class ConversationArchiveRequest(BaseModel):
    archived: StrictBool


class SwapCompleteRequest(BaseModel):
    my_listing_id: Optional[str] = None
    their_listing_id: Optional[str] = None


class NotificationReadRequest(BaseModel):
    """Mark one notification ({id}) or all of them ({all: true}) as read."""
    id: Optional[str] = None
    all: Optional[bool] = None


class CreditPurchaseRequest(BaseModel):
    amount: StrictInt = Field(..., gt=0, description="Number of credits to buy")
