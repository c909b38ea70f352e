from sqlalchemy import Column, String, Text, Boolean, Date, Numeric, TIMESTAMP, ForeignKey, JSON, Index
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from .base import Base, generate_id, utcnow

LISTING_KIND_HAVE = 'HAVE'
LISTING_KIND_WANT = 'WANT'
LISTING_KINDS = (LISTING_KIND_HAVE, LISTING_KIND_WANT)

LISTING_STATUS_ACTIVE = 'ACTIVE'
LISTING_STATUS_INACTIVE = 'INACTIVE'
LISTING_STATUS_MATCHED = 'MATCHED'
LISTING_STATUS_EXPIRED = 'EXPIRED'
LISTING_STATUSES = (
    LISTING_STATUS_ACTIVE,
    LISTING_STATUS_INACTIVE,
    LISTING_STATUS_MATCHED,
    LISTING_STATUS_EXPIRED,
)

# Owners may not move a listing out of these
TERMINAL_LISTING_STATUSES = (LISTING_STATUS_MATCHED, LISTING_STATUS_EXPIRED)

JsonType = JSON().with_variant(JSONB, 'postgresql')


class Listing(Base):
    """
    A seat a user holds (HAVE) or wants (WANT) for one game.

    WANT listings leave section/row/seat/zone empty and describe their target
    through want_zones and want_sections.
    """
    __tablename__ = 'listings'

    id = Column(String(36), primary_key=True, default=generate_id)
    owner_id = Column(String(36), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    team_id = Column(Text, nullable=False)
    game_date = Column(Date, nullable=False)
    kind = Column(String(8), nullable=False, default=LISTING_KIND_HAVE)

    section = Column(Text, nullable=False, default='')
    row = Column(Text, nullable=False, default='')
    seat = Column(Text, nullable=False, default='')
    zone = Column(Text, nullable=False, default='')

    want_zones = Column(JsonType, nullable=False, default=list)
    want_sections = Column(JsonType, nullable=False, default=list)

    face_value = Column(Numeric(10, 2), nullable=False)
    status = Column(String(16), nullable=False, default=LISTING_STATUS_ACTIVE)

    boosted = Column(Boolean, nullable=False, default=False)
    boosted_at = Column(TIMESTAMP(timezone=True))

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    owner = relationship("User", back_populates="listings")
    conversations = relationship(
        "Conversation",
        back_populates="listing",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index('idx_listings_team_status_date', 'team_id', 'status', 'game_date'),
        Index('idx_listings_owner', 'owner_id'),
    )
