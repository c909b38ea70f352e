#!/usr/bin/env python3
"""
Scoring Models - Data structures for compatibility scoring results.
"""

from dataclasses import dataclass, field
from typing import List, Tuple

REASON_SEPARATOR = " • "
DEFAULT_REASON = "Compatible listing"


@dataclass
class MatchScore:
    """Total compatibility score of a candidate against a base listing."""
    value: int = 0
    reasons: List[str] = field(default_factory=list)

    @property
    def reason(self) -> str:
        """Human-readable summary of the factors that fired."""
        return REASON_SEPARATOR.join(self.reasons) if self.reasons else DEFAULT_REASON

    def add(self, factor: Tuple[int, str]) -> None:
        points, label = factor
        if points > 0:
            self.value += points
            self.reasons.append(label)
