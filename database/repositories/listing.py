import logging
from datetime import date, timedelta
from typing import List, Optional, Dict, Any
from sqlalchemy import select

from database.models import Listing, LISTING_STATUS_ACTIVE, utcnow
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ListingRepository(BaseRepository):
    def get_by_id(self, listing_id: str) -> Optional[Listing]:
        stmt = select(Listing).where(Listing.id == listing_id)
        return self._one_or_none(stmt)

    def get_by_ids(self, listing_ids: List[str]) -> List[Listing]:
        if not listing_ids:
            return []
        stmt = select(Listing).where(Listing.id.in_(listing_ids))
        return self._all(stmt)

    def create_listing(self, owner_id: str, fields: Dict[str, Any]) -> Listing:
        listing = Listing(owner_id=owner_id, **fields)
        self.db.add(listing)
        self.db.flush()  # Generate ID
        return listing

    def browse(
        self,
        team_id: Optional[str] = None,
        game_date: Optional[date] = None,
        zone: Optional[str] = None,
        section: Optional[str] = None,
        status: Optional[str] = LISTING_STATUS_ACTIVE,
        owner_id: Optional[str] = None,
        limit: int = 100,
    ) -> List[Listing]:
        stmt = select(Listing)

        if team_id:
            stmt = stmt.where(Listing.team_id == team_id)
        if game_date:
            stmt = stmt.where(Listing.game_date == game_date)
        if zone:
            stmt = stmt.where(Listing.zone == zone)
        if section:
            stmt = stmt.where(Listing.section == section)
        if status:
            stmt = stmt.where(Listing.status == status)
        if owner_id:
            stmt = stmt.where(Listing.owner_id == owner_id)

        stmt = stmt.order_by(Listing.boosted.desc(), Listing.created_at.desc()).limit(limit)
        return self._all(stmt)

    def get_match_pool(self, team_id: str, exclude_owner_id: Optional[str] = None) -> List[Listing]:
        """ACTIVE listings for a team, optionally leaving out one owner's listings."""
        stmt = select(Listing).where(
            Listing.team_id == team_id,
            Listing.status == LISTING_STATUS_ACTIVE
        )
        if exclude_owner_id:
            stmt = stmt.where(Listing.owner_id != exclude_owner_id)
        stmt = stmt.order_by(Listing.created_at.asc())
        return self._all(stmt)

    def get_related_candidates(self, listing: Listing, window_days: int, limit: int) -> List[Listing]:
        """
        Same-team ACTIVE listings within window_days of the listing's game date.

        Ordered boosted first, then newest, and capped before any scoring.
        """
        low = listing.game_date - timedelta(days=window_days)
        high = listing.game_date + timedelta(days=window_days)
        stmt = (
            select(Listing)
            .where(
                Listing.team_id == listing.team_id,
                Listing.status == LISTING_STATUS_ACTIVE,
                Listing.id != listing.id,
                Listing.game_date >= low,
                Listing.game_date <= high,
            )
            .order_by(Listing.boosted.desc(), Listing.created_at.desc())
            .limit(limit)
        )
        return self._all(stmt)

    def set_status(self, listing: Listing, status: str) -> Listing:
        listing.status = status
        listing.updated_at = utcnow()
        self.db.flush()
        return listing

    def boost(self, listing: Listing) -> Listing:
        now = utcnow()
        listing.boosted = True
        listing.boosted_at = now
        listing.updated_at = now
        self.db.flush()
        return listing

    def delete(self, listing: Listing) -> None:
        self.db.delete(listing)
        self.db.flush()
