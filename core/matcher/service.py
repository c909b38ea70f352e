"""
Match Finder - ranks a pool of listings against a target listing.

The finder owns no storage: callers load the pool (same team, ACTIVE), hand
it over, and truncate the ranked result to whatever they need.
"""

import logging
from typing import Any, Iterable, List

from core.scorer import CompatibilityScorer
from core.matcher.models import MatchResult

logger = logging.getLogger(__name__)


class MatchFinder:
    def __init__(self, scorer: CompatibilityScorer):
        self.scorer = scorer

    def find_matches(self, target: Any, pool: Iterable[Any]) -> List[MatchResult]:
        """
        Score every pool listing except the target itself, best first.

        The sort is stable, so equal scores keep their pool order.
        """
        results = []
        for candidate in pool:
            if candidate.id == target.id:
                continue
            score = self.scorer.score(target, candidate)
            results.append(MatchResult(listing_id=candidate.id, score=score.value, reason=score.reason))

        results.sort(key=lambda r: r.score, reverse=True)
        logger.debug(f"Ranked {len(results)} candidates for listing {target.id}")
        return results

    def top_matches(self, target: Any, pool: Iterable[Any], k: int) -> List[MatchResult]:
        return self.find_matches(target, pool)[:k]
