"""
Fee routes — balances and collection totals.
"""

from fastapi import APIRouter, HTTPException

from config import CURRENCY
from core.fees import collection_by_month, fee_summary
from routes.payload import payments_from_payload, rounded

router = APIRouter()


@router.post("/summary")
async def summary(payload: dict):
    """
    Balance and collection rate for a fee bill.
    Expects: { "total_fees": 45000, "payments": [{"amount_paid": 15000, "payment_date": "2025-02-01"}] }
    """
    total_fees = payload.get("total_fees")
    if isinstance(total_fees, bool) or not isinstance(total_fees, (int, float)):
        raise HTTPException(400, "Provide a numeric 'total_fees'.")

    payments = payments_from_payload(payload)
    result = fee_summary(total_fees, payments)
    result["currency"] = CURRENCY
    result["monthly"] = collection_by_month(payments)
    return rounded(result)
