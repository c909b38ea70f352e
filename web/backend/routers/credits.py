#!/usr/bin/env python3
"""
Credit endpoints - balance and (simulated) purchases.
"""

from fastapi import APIRouter, Depends

from ..dependencies import get_current_user_id, get_credit_ledger
from ..services import CreditLedger
from ..services.presenters import credit_transaction_summary
from ..models.requests import CreditPurchaseRequest
from ..models.responses import CreditBalanceResponse, CreditPurchaseResponse

router = APIRouter(prefix="/api/credits", tags=["credits"])


@router.get("", response_model=CreditBalanceResponse)
def get_balance(
    user_id: str = Depends(get_current_user_id),
    ledger: CreditLedger = Depends(get_credit_ledger)
):
    credits = ledger.balance(user_id)
    transactions = ledger.recent_transactions(user_id)
    return CreditBalanceResponse(
        success=True,
        credits=credits,
        transactions=[credit_transaction_summary(t) for t in transactions]
    )


@router.post("/purchase", response_model=CreditPurchaseResponse)
def purchase_credits(
    body: CreditPurchaseRequest,
    user_id: str = Depends(get_current_user_id),
    ledger: CreditLedger = Depends(get_credit_ledger)
):
    """Add credits to the caller's balance. No real payment is taken."""
    result = ledger.purchase(user_id, body.amount)
    return CreditPurchaseResponse(
        success=True,
        credits=result.credits,
        transaction=credit_transaction_summary(result.transaction),
        message=f"Successfully purchased {body.amount} credits"
    )
