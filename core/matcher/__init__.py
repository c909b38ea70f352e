"""Matcher Module - ranks seat listings by compatibility."""
from core.matcher.models import MatchResult
from core.matcher.dto import ListingDTO
from core.matcher.service import MatchFinder

__all__ = [
    'MatchFinder',
    'MatchResult',
    'ListingDTO',
]
