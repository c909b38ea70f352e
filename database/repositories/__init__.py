from database.repositories.base import BaseRepository
from database.repositories.user import UserRepository
from database.repositories.listing import ListingRepository
from database.repositories.conversation import ConversationRepository
from database.repositories.notification import NotificationRepository
from database.repositories.credit import CreditRepository

__all__ = [
    'BaseRepository',
    'UserRepository',
    'ListingRepository',
    'ConversationRepository',
    'NotificationRepository',
    'CreditRepository',
]
