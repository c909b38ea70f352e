"""Business logic services."""

from .credit_service import CreditLedger, PurchaseResult
from .conversation_service import ConversationCoordinator, SendMessageResult, ConversationOverview
from .listing_service import ListingService, ScoredListing, UserMatch
