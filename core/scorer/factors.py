#!/usr/bin/env python3
"""
Scoring Factors - Each factor compares two listings and returns (points, label).

Factors are additive and independent. A factor that does not apply returns
(0, ""), and its label is left out of the match reason.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, Optional, Tuple, Union

from core.config_loader import ScorerConfig

NO_POINTS: Tuple[int, str] = (0, "")


def _as_date(value: Union[date, datetime, None]) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    return value


def _as_float(value: Union[int, float, Decimal, None]) -> Optional[float]:
    if value is None:
        return None
    return float(value)


def _contains(values: Optional[Iterable[str]], needle: str) -> bool:
    return bool(needle) and needle in (values or [])


def days_between(first: Any, second: Any) -> Optional[int]:
    """Absolute whole-day distance between two game dates, None if either is missing."""
    a, b = _as_date(first), _as_date(second)
    if a is None or b is None:
        return None
    return abs((a - b).days)


def same_zone_factor(base: Any, candidate: Any, config: ScorerConfig) -> Tuple[int, str]:
    if base.zone and base.zone == candidate.zone:
        return config.same_zone, "Same zone"
    return NO_POINTS


def same_section_factor(base: Any, candidate: Any, config: ScorerConfig) -> Tuple[int, str]:
    if base.section and base.section == candidate.section:
        return config.same_section, "Same section"
    return NO_POINTS


def wanted_zone_factor(base: Any, candidate: Any, config: ScorerConfig) -> Tuple[int, str]:
    """Candidate's owner is looking for seats in the base listing's zone."""
    if _contains(candidate.want_zones, base.zone):
        return config.wanted_zone, "Wants your zone"
    return NO_POINTS


def wanted_section_factor(base: Any, candidate: Any, config: ScorerConfig) -> Tuple[int, str]:
    """Candidate's owner is looking for seats in the base listing's section."""
    if _contains(candidate.want_sections, base.section):
        return config.wanted_section, "Wants your section"
    return NO_POINTS


def date_proximity_factor(base: Any, candidate: Any, config: ScorerConfig) -> Tuple[int, str]:
    days = days_between(base.game_date, candidate.game_date)
    if days is None:
        return NO_POINTS

    points = max(0, config.date_window_days - days)
    if points == 0:
        return NO_POINTS
    if days == 0:
        return points, "Same game date"
    return points, f"Game {days} day{'s' if days != 1 else ''} apart"


def price_proximity_factor(base: Any, candidate: Any, config: ScorerConfig) -> Tuple[int, str]:
    base_value = _as_float(base.face_value)
    candidate_value = _as_float(candidate.face_value)
    if base_value is None or candidate_value is None:
        return NO_POINTS

    diff = abs(base_value - candidate_value)
    for tier in config.price_tiers:
        if diff < tier.max_diff:
            return tier.points, "Similar price"
    return NO_POINTS


# Evaluation order, which is also the order labels appear in the reason
FACTORS = (
    same_zone_factor,
    same_section_factor,
    wanted_zone_factor,
    wanted_section_factor,
    date_proximity_factor,
    price_proximity_factor,
)
