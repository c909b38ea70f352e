from sqlalchemy import Column, String, Text, Boolean, TIMESTAMP, ForeignKey, UniqueConstraint, Index
from sqlalchemy.orm import relationship

from .base import Base, generate_id, utcnow

CONVERSATION_STATUS_ACTIVE = 'ACTIVE'
CONVERSATION_STATUS_ENDED = 'ENDED'

NO_LISTING_KEY = '*'


def build_dedup_key(user_a: str, user_b: str, listing_id: str = None) -> str:
    """
    Canonical identity of a conversation: the unordered user pair plus the listing.

    The pair is sorted so (a, b) and (b, a) produce the same key.
    """
    low, high = sorted((str(user_a), str(user_b)))
    return f"{low}|{high}|{listing_id or NO_LISTING_KEY}"


class Conversation(Base):
    """
    Two-party conversation, optionally bound to a listing.

    dedup_key is UNIQUE: concurrent creators of the same (pair, listing)
    conversation collide on insert and the loser reads the winner's row.
    """
    __tablename__ = 'conversations'

    id = Column(String(36), primary_key=True, default=generate_id)
    listing_id = Column(String(36), ForeignKey('listings.id', ondelete='CASCADE'), nullable=True)
    dedup_key = Column(Text, nullable=False)
    status = Column(String(16), nullable=False, default=CONVERSATION_STATUS_ACTIVE)

    ended_at = Column(TIMESTAMP(timezone=True))
    ended_by = Column(String(36), ForeignKey('users.id', ondelete='SET NULL'))
    ended_reason = Column(Text)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    # Relationships
    listing = relationship("Listing", back_populates="conversations")
    participants = relationship(
        "ConversationParticipant",
        back_populates="conversation",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    messages = relationship(
        "Message",
        back_populates="conversation",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Message.created_at",
    )

    __table_args__ = (
        UniqueConstraint('dedup_key', name='uq_conversation_dedup'),
        Index('idx_conversations_updated_at', 'updated_at'),
    )

    @property
    def participant_ids(self):
        return [p.user_id for p in self.participants]


class ConversationParticipant(Base):
    """Membership of one user in a conversation, with a per-user archive flag."""
    __tablename__ = 'conversation_participants'

    id = Column(String(36), primary_key=True, default=generate_id)
    conversation_id = Column(String(36), ForeignKey('conversations.id', ondelete='CASCADE'), nullable=False)
    user_id = Column(String(36), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    archived = Column(Boolean, nullable=False, default=False)
    joined_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    conversation = relationship("Conversation", back_populates="participants")
    user = relationship("User")

    __table_args__ = (
        UniqueConstraint('conversation_id', 'user_id', name='uq_conversation_participant'),
        Index('idx_participants_user', 'user_id'),
    )


class Message(Base):
    __tablename__ = 'messages'

    id = Column(String(36), primary_key=True, default=generate_id)
    conversation_id = Column(String(36), ForeignKey('conversations.id', ondelete='CASCADE'), nullable=False)
    sender_id = Column(String(36), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    text = Column(Text, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    conversation = relationship("Conversation", back_populates="messages")
    sender = relationship("User")

    __table_args__ = (
        Index('idx_messages_conversation_created', 'conversation_id', 'created_at'),
    )
