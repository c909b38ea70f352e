import logging
from typing import List, Dict, Any
from sqlalchemy import select, update, func

from database.models import Notification
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class NotificationRepository(BaseRepository):
    def create_notification(self, user_id: str, notification_type: str, data: Dict[str, Any]) -> Notification:
        notification = Notification(user_id=user_id, type=notification_type, data=data)
        self.db.add(notification)
        self.db.flush()
        return notification

    def list_for_user(self, user_id: str, unread_only: bool = False, limit: int = 50) -> List[Notification]:
        stmt = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            stmt = stmt.where(Notification.is_read.is_(False))
        stmt = stmt.order_by(Notification.created_at.desc()).limit(limit)
        return self._all(stmt)

    def count_unread(self, user_id: str) -> int:
        stmt = select(func.count(Notification.id)).where(
            Notification.user_id == user_id,
            Notification.is_read.is_(False)
        )
        return self.db.execute(stmt).scalar_one()

    def mark_read(self, notification_id: str, user_id: str) -> int:
        """
        Mark one notification read. Ownership is part of the predicate, so a
        notification belonging to someone else simply matches zero rows.
        """
        stmt = (
            update(Notification)
            .where(Notification.id == notification_id, Notification.user_id == user_id)
            .values(is_read=True)
        )
        return self.db.execute(stmt).rowcount

    def mark_all_read(self, user_id: str) -> int:
        stmt = (
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True)
        )
        return self.db.execute(stmt).rowcount
