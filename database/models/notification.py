from sqlalchemy import Column, String, Boolean, TIMESTAMP, ForeignKey, JSON, Index
from sqlalchemy.dialects.postgresql import JSONB

from .base import Base, generate_id, utcnow

NOTIFICATION_TYPE_MESSAGE = 'MESSAGE'
NOTIFICATION_TYPE_MATCH = 'MATCH'


class Notification(Base):
    """
    In-app alert for a user.

    Rows are immutable apart from is_read. `data` holds the type-specific
    payload (conversation/message ids and preview for MESSAGE, listing ids,
    score and description for MATCH).
    """
    __tablename__ = 'notifications'

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    type = Column(String(16), nullable=False)
    data = Column(JSON().with_variant(JSONB, 'postgresql'), nullable=False, default=dict)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index('idx_notifications_user_created', 'user_id', 'created_at'),
        Index('idx_notifications_user_unread', 'user_id', 'is_read'),
    )
