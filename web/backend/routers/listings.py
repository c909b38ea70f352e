#!/usr/bin/env python3
"""
Listing endpoints - create, browse, manage and relate seat listings.
"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query

from ..dependencies import get_current_user_id, get_listing_service
from ..services import ListingService
from ..services.presenters import listing_summary
from ..models.requests import ListingCreateRequest, ListingStatusRequest
from ..models.responses import (
    DeleteResponse,
    ListingResponse,
    ListingsResponse,
    RelatedListingsResponse,
    ScoredListingSummary,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/listings", tags=["listings"])


@router.post("", response_model=ListingResponse, status_code=201)
def create_listing(
    request: ListingCreateRequest,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    listing_service: ListingService = Depends(get_listing_service)
):
    """
    Create a listing.

    Matching against the team's other listings, and the resulting match
    notifications, run after the response has been sent.
    """
    listing = listing_service.create_listing(user_id, request.model_dump())
    background_tasks.add_task(listing_service.enrich_new_listing, listing.id)
    return ListingResponse(success=True, listing=listing_summary(listing))


@router.get("", response_model=ListingsResponse)
def browse_listings(
    team_id: Optional[str] = Query(None),
    game_date: Optional[date] = Query(None),
    zone: Optional[str] = Query(None),
    section: Optional[str] = Query(None),
    status: str = Query("ACTIVE", description="Listing status, or 'all'"),
    limit: int = Query(100, ge=1, le=500),
    listing_service: ListingService = Depends(get_listing_service)
):
    """Browse listings, boosted first then newest."""
    listings = listing_service.browse(
        team_id=team_id,
        game_date=game_date,
        zone=zone,
        section=section,
        status=None if status.lower() == "all" else status.upper(),
        limit=limit
    )
    return ListingsResponse(
        success=True,
        count=len(listings),
        listings=[listing_summary(listing) for listing in listings]
    )


@router.get("/{listing_id}", response_model=ListingResponse)
def get_listing(
    listing_id: str,
    listing_service: ListingService = Depends(get_listing_service)
):
    listing = listing_service.get_listing(listing_id)
    return ListingResponse(success=True, listing=listing_summary(listing))


@router.get("/{listing_id}/related", response_model=RelatedListingsResponse)
def get_related_listings(
    listing_id: str,
    listing_service: ListingService = Depends(get_listing_service)
):
    """Up to six similar listings for the same team around the same date."""
    related = listing_service.get_related(listing_id)
    return RelatedListingsResponse(
        success=True,
        count=len(related),
        listings=[
            ScoredListingSummary(
                listing=listing_summary(item.listing),
                score=item.match.score,
                reason=item.match.reason
            )
            for item in related
        ]
    )


@router.patch("/{listing_id}/status", response_model=ListingResponse)
def update_listing_status(
    listing_id: str,
    request: ListingStatusRequest,
    user_id: str = Depends(get_current_user_id),
    listing_service: ListingService = Depends(get_listing_service)
):
    listing = listing_service.update_status(listing_id, user_id, request.status)
    return ListingResponse(success=True, listing=listing_summary(listing))


@router.post("/{listing_id}/boost", response_model=ListingResponse)
def boost_listing(
    listing_id: str,
    user_id: str = Depends(get_current_user_id),
    listing_service: ListingService = Depends(get_listing_service)
):
    listing = listing_service.boost(listing_id, user_id)
    return ListingResponse(success=True, listing=listing_summary(listing))


@router.delete("/{listing_id}", response_model=DeleteResponse)
def delete_listing(
    listing_id: str,
    user_id: str = Depends(get_current_user_id),
    listing_service: ListingService = Depends(get_listing_service)
):
    listing_service.delete_listing(listing_id, user_id)
    return DeleteResponse(success=True, id=listing_id)
