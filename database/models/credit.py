from sqlalchemy import Column, String, Text, Integer, TIMESTAMP, ForeignKey, Index
from sqlalchemy.orm import relationship

from .base import Base, generate_id, utcnow


class CreditTransaction(Base):
    """
    Append-only ledger entry. Positive amounts are purchases, negative are spends.

    A user's balance is the running sum of their entries and never goes negative.
    """
    __tablename__ = 'credit_transactions'

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    amount = Column(Integer, nullable=False)
    note = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    user = relationship("User", back_populates="credit_transactions")

    __table_args__ = (
        Index('idx_credit_transactions_user_created', 'user_id', 'created_at'),
    )
