"""Match result types produced by the MatchFinder."""

from dataclasses import dataclass


@dataclass(frozen=True)
class MatchResult:
    """A scored candidate listing. Transient: computed on demand, never stored."""
    listing_id: str
    score: int
    reason: str
