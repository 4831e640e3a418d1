"""
fees.py — Fee balances and collection totals.
"""

from typing import Any, Dict, List, Sequence

import pandas as pd

from core.errors import EmptyInput
from core.records import FeePayment
from core.trends import MONTH_LABEL_FORMAT


def fee_summary(total_fees: float, payments: Sequence[FeePayment]) -> Dict[str, Any]:
    """
    Amount paid, outstanding balance and collection rate for one fee bill.

    A negative balance is a credit carried by the payer.
    """
    if total_fees <= 0:
        raise EmptyInput("No fees billed; collection rate is undefined.")

    total_paid = float(sum(p.amount_paid for p in payments))
    last_payment = max((p.payment_date for p in payments), default=None)
    return {
        "total_fees": float(total_fees),
        "total_paid": total_paid,
        "balance": float(total_fees) - total_paid,
        "collection_rate": total_paid * 100 / total_fees,
        "payment_count": len(payments),
        "last_payment_date": last_payment.isoformat() if last_payment else None,
    }


def collection_by_month(payments: Sequence[FeePayment]) -> List[Dict[str, Any]]:
    """Amount collected per calendar month, in calendar order."""
    if len(payments) == 0:
        return []

    df = pd.DataFrame({
        "period": pd.to_datetime([p.payment_date for p in payments]).to_period("M"),
        "amount": [p.amount_paid for p in payments],
    })
    grouped = df.groupby("period")["amount"].agg(["sum", "count"]).sort_index()
    return [
        {
            "period_label": period.strftime(MONTH_LABEL_FORMAT),
            "amount_paid": float(row["sum"]),
            "count": int(row["count"]),
        }
        for period, row in grouped.iterrows()
    ]
