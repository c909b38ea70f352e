#!/usr/bin/env python3
"""
Compatibility Scorer - Scores how well a candidate listing suits a base listing.

Pure and deterministic: no I/O, no clock, no randomness. Listings are read
through their attributes only (zone, section, want_zones, want_sections,
game_date, face_value), so ORM rows and plain objects both work.

Usage:
    from core.scorer import CompatibilityScorer

    scorer = CompatibilityScorer(config.matching.scorer)
    score = scorer.score(base_listing, candidate_listing)
    print(score.value, score.reason)
"""

import logging
from typing import Any, Optional

from core.config_loader import ScorerConfig
from core.scorer.factors import FACTORS
from core.scorer.models import MatchScore

logger = logging.getLogger(__name__)


class CompatibilityScorer:
    """Additive weighted scorer over the configured factor set."""

    def __init__(self, config: Optional[ScorerConfig] = None):
        self.config = config or ScorerConfig()

    def score(self, base: Any, candidate: Any) -> MatchScore:
        result = MatchScore()
        for factor in FACTORS:
            result.add(factor(base, candidate, self.config))
        return result
