from .base import Base, generate_id, utcnow
from .user import User
from .listing import (
    Listing,
    LISTING_KIND_HAVE,
    LISTING_KIND_WANT,
    LISTING_KINDS,
    LISTING_STATUS_ACTIVE,
    LISTING_STATUS_INACTIVE,
    LISTING_STATUS_MATCHED,
    LISTING_STATUS_EXPIRED,
    LISTING_STATUSES,
    TERMINAL_LISTING_STATUSES,
)
from .conversation import (
    Conversation,
    ConversationParticipant,
    Message,
    CONVERSATION_STATUS_ACTIVE,
    CONVERSATION_STATUS_ENDED,
    build_dedup_key,
)
from .notification import Notification, NOTIFICATION_TYPE_MESSAGE, NOTIFICATION_TYPE_MATCH
from .credit import CreditTransaction

__all__ = [
    'Base',
    'generate_id',
    'utcnow',
    'User',
    'Listing',
    'LISTING_KIND_HAVE',
    'LISTING_KIND_WANT',
    'LISTING_KINDS',
    'LISTING_STATUS_ACTIVE',
    'LISTING_STATUS_INACTIVE',
    'LISTING_STATUS_MATCHED',
    'LISTING_STATUS_EXPIRED',
    'LISTING_STATUSES',
    'TERMINAL_LISTING_STATUSES',
    'Conversation',
    'ConversationParticipant',
    'Message',
    'CONVERSATION_STATUS_ACTIVE',
    'CONVERSATION_STATUS_ENDED',
    'build_dedup_key',
    'Notification',
    'NOTIFICATION_TYPE_MESSAGE',
    'NOTIFICATION_TYPE_MATCH',
    'CreditTransaction',
]
