import logging

from sqlalchemy.orm import Session

from database.repositories import (
    UserRepository,
    ListingRepository,
    ConversationRepository,
    NotificationRepository,
    CreditRepository,
)

logger = logging.getLogger(__name__)


class SwapRepository:
    """
    Facade over the per-aggregate repositories, all sharing one Session.

    Everything reached through a single SwapRepository commits or rolls back
    together, which is what lets the ledger and the conversation insert share
    a transaction.
    """

    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepository(db)
        self.listings = ListingRepository(db)
        self.conversations = ConversationRepository(db)
        self.notifications = NotificationRepository(db)
        self.credits = CreditRepository(db)

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
