"""Balance and income estimation from the ledger"""

import statistics
from datetime import datetime

from spend_guard.domain.ledger import LedgerView
from spend_guard.domain.models import Direction, IncomeStats, Severity
from spend_guard.utils.date_utils import subtract_months

INCOME_LOOKBACK_MONTHS = 3


def current_balance(ledger: LedgerView) -> float:
    """
    Running ledger balance over every transaction ever recorded.

    Income adds, expenses subtract. The result may be negative and does not
    depend on transaction order or recency.
    """
    return ledger.sum(direction=Direction.INCOME) - ledger.sum(direction=Direction.EXPENSE)


def average_monthly_income(
    ledger: LedgerView,
    as_of: datetime,
    lookback_months: int = INCOME_LOOKBACK_MONTHS,
) -> IncomeStats:
    """
    Average income per active calendar month over the lookback window.

    Only months that actually received income count towards the average.
    Volatility is the population standard deviation of monthly totals as a
    percentage of the average.

    Returns a CRITICAL IncomeStats with zero average when no income was received,
    without attempting any ratio.
    """
    window = ledger.window(start=subtract_months(as_of, lookback_months), end=as_of).income()
    monthly_totals = [m.income for m in window.group_by_month().values() if m.income > 0]

    if not monthly_totals:
        return IncomeStats(
            avg_monthly_income=0.0,
            volatility=0.0,
            active_months=0,
            severity=Severity.CRITICAL,
            alert=f"No income detected in last {lookback_months} months",
        )

    avg = statistics.fmean(monthly_totals)
    volatility = statistics.pstdev(monthly_totals) / avg * 100
    return IncomeStats(
        avg_monthly_income=avg,
        volatility=volatility,
        active_months=len(monthly_totals),
    )
