#!/usr/bin/env python3
"""
Match endpoints - the caller's listings ranked against everyone else's.
"""

from fastapi import APIRouter, Depends

from ..dependencies import get_current_user_id, get_listing_service
from ..services import ListingService
from ..services.presenters import listing_summary
from ..models.responses import MatchesResponse, UserMatchSummary

router = APIRouter(prefix="/api/matches", tags=["matches"])


@router.get("", response_model=MatchesResponse)
def get_matches(
    user_id: str = Depends(get_current_user_id),
    listing_service: ListingService = Depends(get_listing_service)
):
    """
    Score each of the caller's ACTIVE listings against other owners'
    ACTIVE listings for the same team, best matches first.
    """
    matches = listing_service.get_matches_for_user(user_id)
    return MatchesResponse(
        success=True,
        count=len(matches),
        matches=[
            UserMatchSummary(
                my_listing=listing_summary(match.my_listing),
                matched_listing=listing_summary(match.matched_listing),
                score=match.score,
                reason=match.reason
            )
            for match in matches
        ]
    )
