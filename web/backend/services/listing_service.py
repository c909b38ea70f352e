#!/usr/bin/env python3
"""
Listing service - listing lifecycle, browsing, related listings and match fan-out.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from core.config_loader import FeatureConfig, MatchingConfig
from core.matcher import ListingDTO, MatchFinder, MatchResult
from database.models import (
    Listing,
    LISTING_KIND_HAVE,
    LISTING_KINDS,
    LISTING_STATUS_ACTIVE,
    LISTING_STATUS_INACTIVE,
    TERMINAL_LISTING_STATUSES,
)
from database.repository import SwapRepository
from database.uow import swap_uow
from notification.service import NotificationDispatcher
from ..exceptions import ValidationException, NotFoundException, ForbiddenException

logger = logging.getLogger(__name__)

# Statuses an owner may set directly; MATCHED comes only from swap completion
OWNER_SETTABLE_STATUSES = (LISTING_STATUS_ACTIVE, LISTING_STATUS_INACTIVE)

HAVE_REQUIRED_FIELDS = ('section', 'row', 'seat', 'zone')


@dataclass
class ScoredListing:
    listing: Listing
    match: MatchResult


@dataclass
class UserMatch:
    my_listing: Listing
    matched_listing: Listing
    score: int
    reason: str


def _clean_list(values: Optional[List[str]]) -> List[str]:
    return [v.strip() for v in (values or []) if v and v.strip()]


class ListingService:
    """Service for seat listings."""

    def __init__(
        self,
        session_factory=None,
        finder: Optional[MatchFinder] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
        features: Optional[FeatureConfig] = None,
        matching: Optional[MatchingConfig] = None
    ):
        self.session_factory = session_factory
        self.finder = finder
        self.dispatcher = dispatcher
        self.features = features or FeatureConfig()
        self.matching = matching or MatchingConfig()

    @staticmethod
    def _get_or_404(repo: SwapRepository, listing_id: str) -> Listing:
        listing = repo.listings.get_by_id(listing_id)
        if listing is None:
            raise NotFoundException("Listing not found")
        return listing

    @classmethod
    def _get_owned(cls, repo: SwapRepository, listing_id: str, user_id: str) -> Listing:
        listing = cls._get_or_404(repo, listing_id)
        if listing.owner_id != user_id:
            raise ForbiddenException("You can only modify your own listings")
        return listing

    # ------------------------------------------------------------------
    # Create and enrich
    # ------------------------------------------------------------------

    def create_listing(self, owner_id: str, data: Dict[str, Any]) -> Listing:
        """
        Persist a new ACTIVE listing.

        HAVE listings need section, row, seat and zone. Face value must be non-negative.
        """
        kind = (data.get('kind') or LISTING_KIND_HAVE).upper()
        if kind not in LISTING_KINDS:
            raise ValidationException(f"kind must be one of {', '.join(LISTING_KINDS)}")

        if not data.get('team_id'):
            raise ValidationException("team_id is required")
        if not isinstance(data.get('game_date'), date):
            raise ValidationException("game_date is required")

        face_value = data.get('face_value')
        if face_value is None:
            raise ValidationException("face_value is required")
        if Decimal(str(face_value)) < 0:
            raise ValidationException("face_value cannot be negative")

        fields = {
            'team_id': data['team_id'],
            'game_date': data['game_date'],
            'kind': kind,
            'section': (data.get('section') or '').strip(),
            'row': (data.get('row') or '').strip(),
            'seat': (data.get('seat') or '').strip(),
            'zone': (data.get('zone') or '').strip(),
            'want_zones': _clean_list(data.get('want_zones')),
            'want_sections': _clean_list(data.get('want_sections')),
            'face_value': Decimal(str(face_value)),
            'status': LISTING_STATUS_ACTIVE,
        }

        if kind == LISTING_KIND_HAVE:
            missing = [name for name in HAVE_REQUIRED_FIELDS if not fields[name]]
            if missing:
                raise ValidationException(f"Missing required fields: {', '.join(missing)}")
        else:
            for name in HAVE_REQUIRED_FIELDS:
                fields[name] = ''

        with swap_uow(self.session_factory) as repo:
            if repo.users.get_by_id(owner_id) is None:
                raise NotFoundException("User not found")
            listing = repo.listings.create_listing(owner_id, fields)

        logger.info(f"Created {kind} listing {listing.id} for team {listing.team_id}")
        return listing

    def enrich_new_listing(self, listing_id: str) -> int:
        """
        Score a freshly created listing against its team's ACTIVE pool and notify
        both sides of each of the top matches.

        Runs after the creating request has returned. Failures are logged, never
        raised. Returns the number of notifications created.
        """
        if self.finder is None or self.dispatcher is None:
            return 0

        try:
            with swap_uow(self.session_factory) as repo:
                listing = repo.listings.get_by_id(listing_id)
                if listing is None or listing.status != LISTING_STATUS_ACTIVE:
                    return 0
                target = ListingDTO.from_orm(listing)
                pool = [
                    ListingDTO.from_orm(candidate)
                    for candidate in repo.listings.get_match_pool(listing.team_id, exclude_owner_id=listing.owner_id)
                ]
        except Exception as e:
            logger.error(f"Match enrichment failed to load listing {listing_id}: {e}")
            return 0

        matches = self.finder.top_matches(target, pool, self.matching.notify_top_k)
        candidates = {candidate.id: candidate for candidate in pool}

        created = 0
        for match in matches:
            candidate = candidates[match.listing_id]
            created += self._notify_match(target.owner_id, target.id, candidate.id, match.score, match.reason)

            reverse = self.finder.scorer.score(candidate, target)
            created += self._notify_match(candidate.owner_id, candidate.id, target.id, reverse.value, reverse.reason)

        logger.info(f"Listing {listing_id}: {len(matches)} matches, {created} notifications")
        return created

    def _notify_match(self, user_id: str, listing_id: str, matched_listing_id: str, score: int, reason: str) -> int:
        try:
            self.dispatcher.create_match_notification(
                user_id,
                listing_id,
                matched_listing_id,
                score=score,
                description=f"We found a potential seat match for you! {reason}"
            )
            return 1
        except Exception as e:
            logger.error(f"Failed to create match notification for {user_id}: {e}")
            return 0

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_listing(self, listing_id: str) -> Listing:
        with swap_uow(self.session_factory) as repo:
            return self._get_or_404(repo, listing_id)

    def browse(
        self,
        team_id: Optional[str] = None,
        game_date: Optional[date] = None,
        zone: Optional[str] = None,
        section: Optional[str] = None,
        status: Optional[str] = LISTING_STATUS_ACTIVE,
        owner_id: Optional[str] = None,
        limit: int = 100
    ) -> List[Listing]:
        """Boosted listings first, then newest."""
        with swap_uow(self.session_factory) as repo:
            return repo.listings.browse(
                team_id=team_id,
                game_date=game_date,
                zone=zone,
                section=section,
                status=status,
                owner_id=owner_id,
                limit=limit
            )

    def get_related(self, listing_id: str) -> List[ScoredListing]:
        """
        Up to related_top_k listings similar to this one.

        Candidates are narrowed in the query (same team, ACTIVE, within the
        date window, boosted first then newest, capped) and then re-ranked by
        compatibility score.
        """
        with swap_uow(self.session_factory) as repo:
            listing = self._get_or_404(repo, listing_id)
            if not self.features.related_listings:
                return []
            candidates = repo.listings.get_related_candidates(
                listing,
                window_days=self.matching.related_window_days,
                limit=self.matching.related_top_k
            )

        by_id = {candidate.id: candidate for candidate in candidates}
        ranked = self.finder.top_matches(listing, candidates, self.matching.related_top_k)
        return [ScoredListing(listing=by_id[match.listing_id], match=match) for match in ranked]

    def get_matches_for_user(self, user_id: str) -> List[UserMatch]:
        """The caller's ACTIVE listings, each ranked against other owners' ACTIVE listings."""
        with swap_uow(self.session_factory) as repo:
            my_listings = repo.listings.browse(owner_id=user_id, status=LISTING_STATUS_ACTIVE, limit=1000)
            pools = {
                team_id: repo.listings.get_match_pool(team_id, exclude_owner_id=user_id)
                for team_id in {listing.team_id for listing in my_listings}
            }

        results = []
        for mine in my_listings:
            pool = pools[mine.team_id]
            by_id = {candidate.id: candidate for candidate in pool}
            for match in self.finder.find_matches(mine, pool):
                results.append(UserMatch(
                    my_listing=mine,
                    matched_listing=by_id[match.listing_id],
                    score=match.score,
                    reason=match.reason,
                ))

        results.sort(key=lambda m: m.score, reverse=True)
        return results

    # ------------------------------------------------------------------
    # Owner actions
    # ------------------------------------------------------------------

    def update_status(self, listing_id: str, user_id: str, status: str) -> Listing:
        if status not in OWNER_SETTABLE_STATUSES:
            raise ValidationException("Status must be ACTIVE or INACTIVE")

        with swap_uow(self.session_factory) as repo:
            listing = self._get_owned(repo, listing_id, user_id)
            if listing.status in TERMINAL_LISTING_STATUSES:
                raise ValidationException(f"Cannot change status of a {listing.status.lower()} listing")
            return repo.listings.set_status(listing, status)

    def boost(self, listing_id: str, user_id: str) -> Listing:
        if not self.features.boost_listings:
            raise ForbiddenException("Boosting listings is disabled")

        with swap_uow(self.session_factory) as repo:
            listing = self._get_owned(repo, listing_id, user_id)
            if listing.boosted:
                raise ValidationException("Listing is already boosted")
            listing = repo.listings.boost(listing)

        logger.info(f"Listing {listing_id} boosted by {user_id}")
        return listing

    def delete_listing(self, listing_id: str, user_id: str) -> None:
        """Delete an owned listing together with the conversations bound to it."""
        with swap_uow(self.session_factory) as repo:
            listing = self._get_owned(repo, listing_id, user_id)
            repo.listings.delete(listing)
        logger.info(f"Listing {listing_id} deleted by {user_id}")
