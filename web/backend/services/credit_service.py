#!/usr/bin/env python3
"""
Credit ledger - append-only credit transactions with a cached balance.

Every balance change appends a CreditTransaction and rewrites users.credits
in the same database transaction, so the cached balance always equals the
sum of the ledger. Methods take an optional SwapRepository to join a
caller's unit of work; without one they open their own.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, TypeVar

from database.models import CreditTransaction
from database.repository import SwapRepository
from database.uow import swap_uow
from ..exceptions import InsufficientCreditsException, NotFoundException, ValidationException

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass
class PurchaseResult:
    credits: int
    transaction: CreditTransaction


def _validate_amount(amount) -> int:
    # bool is an int subclass; True is not a credit amount
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise ValidationException("Amount must be a positive whole number")
    return amount


class CreditLedger:
    """Service for credit balances, purchases and spends."""

    def __init__(self, session_factory=None):
        self.session_factory = session_factory

    def _run(self, repo: Optional[SwapRepository], operation: Callable[[SwapRepository], T]) -> T:
        if repo is not None:
            return operation(repo)
        with swap_uow(self.session_factory) as own_repo:
            return operation(own_repo)

    @staticmethod
    def _locked_user(repo: SwapRepository, user_id: str):
        user = repo.users.lock_by_id(user_id)
        if user is None:
            raise NotFoundException(f"User {user_id} not found")
        return user

    def balance(self, user_id: str, repo: Optional[SwapRepository] = None) -> int:
        def operation(r: SwapRepository) -> int:
            user = r.users.get_by_id(user_id)
            if user is None:
                raise NotFoundException(f"User {user_id} not found")
            return user.credits
        return self._run(repo, operation)

    def derived_balance(self, user_id: str, repo: Optional[SwapRepository] = None) -> int:
        """Balance recomputed from the ledger itself."""
        return self._run(repo, lambda r: r.credits.sum_for_user(user_id))

    def recent_transactions(self, user_id: str, limit: int = 20) -> List[CreditTransaction]:
        return self._run(None, lambda r: r.credits.list_for_user(user_id, limit=limit))

    def purchase(self, user_id: str, amount: int, repo: Optional[SwapRepository] = None) -> PurchaseResult:
        """Add credits. Payment itself is simulated; amount must be a positive integer."""
        amount = _validate_amount(amount)

        def operation(r: SwapRepository) -> PurchaseResult:
            user = self._locked_user(r, user_id)
            transaction = r.credits.add_transaction(
                user_id, amount, note=f"Purchase of {amount} credits (simulated)"
            )
            r.users.set_cached_credits(user, user.credits + amount)
            return PurchaseResult(credits=user.credits, transaction=transaction)

        result = self._run(repo, operation)
        logger.info(f"User {user_id} purchased {amount} credits, balance now {result.credits}")
        return result

    def spend(self, user_id: str, amount: int, note: str, repo: Optional[SwapRepository] = None) -> int:
        """
        Deduct credits and return the new balance.

        Raises InsufficientCreditsException, leaving the ledger untouched,
        when the balance is below amount.
        """
        amount = _validate_amount(amount)

        def operation(r: SwapRepository) -> int:
            user = self._locked_user(r, user_id)
            if user.credits < amount:
                raise InsufficientCreditsException(
                    "Insufficient credits",
                    credits_required=amount,
                    current_credits=user.credits
                )
            r.credits.add_transaction(user_id, -amount, note=note)
            r.users.set_cached_credits(user, user.credits - amount)
            return user.credits

        return self._run(repo, operation)

    def record_audit(self, user_id: str, note: str, repo: Optional[SwapRepository] = None) -> CreditTransaction:
        """Append a zero-amount entry; leaves the balance unchanged."""
        return self._run(repo, lambda r: r.credits.add_transaction(user_id, 0, note=note))
