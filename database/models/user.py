from sqlalchemy import Column, String, Text, Boolean, Integer, TIMESTAMP, Index
from sqlalchemy.orm import relationship

from .base import Base, generate_id, utcnow


class User(Base):
    """
    Account holding listings, conversations and a credit balance.

    `credits` is a cached copy of the sum of the user's credit transactions.
    It is only ever written in the same transaction as a ledger append.
    """
    __tablename__ = 'users'

    id = Column(String(36), primary_key=True, default=generate_id)
    email = Column(Text, unique=True)
    display_name = Column(Text)

    credits = Column(Integer, nullable=False, default=0)
    email_notifications_enabled = Column(Boolean, nullable=False, default=True)
    successful_swaps_count = Column(Integer, nullable=False, default=0)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    # Relationships
    listings = relationship("Listing", back_populates="owner", cascade="all, delete-orphan")
    credit_transactions = relationship("CreditTransaction", back_populates="user", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_users_email', 'email'),
    )
