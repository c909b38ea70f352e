from core.scorer.models import MatchScore
from core.scorer.service import CompatibilityScorer

__all__ = [
    'MatchScore',
    'CompatibilityScorer',
]
