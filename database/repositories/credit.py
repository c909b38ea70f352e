import logging
from typing import List, Optional
from sqlalchemy import select, func

from database.models import CreditTransaction
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class CreditRepository(BaseRepository):
    def add_transaction(self, user_id: str, amount: int, note: Optional[str] = None) -> CreditTransaction:
        transaction = CreditTransaction(user_id=user_id, amount=amount, note=note)
        self.db.add(transaction)
        self.db.flush()
        return transaction

    def list_for_user(self, user_id: str, limit: int = 20) -> List[CreditTransaction]:
        stmt = (
            select(CreditTransaction)
            .where(CreditTransaction.user_id == user_id)
            .order_by(CreditTransaction.created_at.desc())
            .limit(limit)
        )
        return self._all(stmt)

    def sum_for_user(self, user_id: str) -> int:
        stmt = select(func.coalesce(func.sum(CreditTransaction.amount), 0)).where(
            CreditTransaction.user_id == user_id
        )
        return int(self.db.execute(stmt).scalar_one())
