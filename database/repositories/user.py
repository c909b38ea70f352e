import logging
from typing import Iterable, Optional
from sqlalchemy import select, update

from database.models import User
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository):
    def get_by_id(self, user_id: str) -> Optional[User]:
        stmt = select(User).where(User.id == user_id)
        return self._one_or_none(stmt)

    def lock_by_id(self, user_id: str) -> Optional[User]:
        """
        Load a user row with a write lock held until the transaction ends.

        Emits SELECT ... FOR UPDATE on PostgreSQL. SQLite has no row locks;
        there the engine opens every transaction with BEGIN IMMEDIATE instead.
        """
        stmt = select(User).where(User.id == user_id).with_for_update()
        return self._one_or_none(stmt)

    def create_user(
        self,
        email: Optional[str] = None,
        display_name: Optional[str] = None,
        email_notifications_enabled: bool = True,
        user_id: Optional[str] = None,
    ) -> User:
        user = User(
            email=email,
            display_name=display_name,
            email_notifications_enabled=email_notifications_enabled,
            credits=0,
        )
        if user_id:
            user.id = user_id
        self.db.add(user)
        self.db.flush()
        return user

    def set_cached_credits(self, user: User, credits: int) -> None:
        user.credits = credits
        self.db.flush()

    def increment_successful_swaps(self, user_ids: Iterable[str]) -> int:
        stmt = (
            update(User)
            .where(User.id.in_(list(user_ids)))
            .values(successful_swaps_count=User.successful_swaps_count + 1)
        )
        return self.db.execute(stmt).rowcount
