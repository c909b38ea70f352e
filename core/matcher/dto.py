"""Data Transfer Objects for the match finder.

DTOs are used to transfer data outside of the Unit of Work context,
allowing ORM objects to be converted to plain Python objects that
can be safely used after the database session is closed.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional


@dataclass
class ListingDTO:
    """Plain copy of the listing fields that scoring and fan-out read."""
    id: str
    owner_id: str
    team_id: str
    game_date: date
    kind: str = "HAVE"
    section: str = ""
    row: str = ""
    seat: str = ""
    zone: str = ""
    want_zones: List[str] = field(default_factory=list)
    want_sections: List[str] = field(default_factory=list)
    face_value: Optional[float] = None
    status: str = "ACTIVE"

    @classmethod
    def from_orm(cls, listing) -> "ListingDTO":
        return cls(
            id=listing.id,
            owner_id=listing.owner_id,
            team_id=listing.team_id,
            game_date=listing.game_date,
            kind=listing.kind,
            section=listing.section or "",
            row=listing.row or "",
            seat=listing.seat or "",
            zone=listing.zone or "",
            want_zones=list(listing.want_zones or []),
            want_sections=list(listing.want_sections or []),
            face_value=float(listing.face_value) if listing.face_value is not None else None,
            status=listing.status,
        )
