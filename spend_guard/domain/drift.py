"""Behavioral drift detection - month-over-month spending deterioration"""

import logging
from datetime import datetime

from spend_guard.domain.ledger import LedgerView
from spend_guard.domain.models import DriftResult, DriftStatus
from spend_guard.utils.date_utils import subtract_months
from spend_guard.utils.rounding import round_half_up

logger = logging.getLogger(__name__)

DRIFT_LOOKBACK_MONTHS = 3
MIN_TRANSACTIONS = 10
MIN_MONTHS = 2

NON_ESSENTIAL_SURGE_PCT = 20
NON_ESSENTIAL_SURGE_POINTS = 35
EXPENSE_RATIO_LIMIT = 0.85
EXPENSE_RATIO_POINTS = 30
TOTAL_GROWTH_PCT = 15
TOTAL_GROWTH_POINTS = 20
INCOME_DROP_PCT = -5
EXPENSE_RISE_PCT = 5
DIVERGENCE_POINTS = 25

DETERIORATING_THRESHOLD = 60
STABLE_THRESHOLD = 30


def _insufficient_signal() -> DriftResult:
    return DriftResult(status=DriftStatus.STABLE, penalty_factor=1.0, flags=[], drift_score=0)


def _growth_pct(current: float, previous: float) -> float:
    return (current - previous) / previous * 100


def drift_status(drift_score: int) -> tuple[DriftStatus, float]:
    """
    Map drift score to (status, penalty factor).

    STABLE carries a 10% haircut while IMPROVING carries none.
    """
    if drift_score >= DETERIORATING_THRESHOLD:
        return DriftStatus.DETERIORATING, 0.7
    if drift_score >= STABLE_THRESHOLD:
        return DriftStatus.STABLE, 0.9
    return DriftStatus.IMPROVING, 1.0


def detect_behavioral_drift(ledger: LedgerView, as_of: datetime) -> DriftResult:
    """
    Compare the latest month against the one before it.

    Flags (additive):
    - non-essential spend grew > 20%: +35
    - spent > 85% of the month's income: +30
    - total spend grew > 15%: +20
    - income fell > 5% while spend rose > 5%: +25

    Fewer than 10 transactions or fewer than 2 months of data yields a
    neutral result with no penalty.
    """
    window = ledger.window(start=subtract_months(as_of, DRIFT_LOOKBACK_MONTHS), end=as_of)
    if len(window) < MIN_TRANSACTIONS:
        return _insufficient_signal()

    months = list(window.group_by_month().values())
    if len(months) < MIN_MONTHS:
        return _insufficient_signal()

    previous, current = months[-2], months[-1]
    drift_score = 0
    flags = []

    if previous.non_essential_expense > 0:
        growth = _growth_pct(current.non_essential_expense, previous.non_essential_expense)
        if growth > NON_ESSENTIAL_SURGE_PCT:
            drift_score += NON_ESSENTIAL_SURGE_POINTS
            flags.append(f"Non-essential spending surged {round_half_up(growth)}%")

    if current.income > 0:
        expense_ratio = current.total_expense / current.income
        if expense_ratio > EXPENSE_RATIO_LIMIT:
            drift_score += EXPENSE_RATIO_POINTS
            flags.append(f"Spending {round_half_up(expense_ratio * 100)}% of income")

    if previous.total_expense > 0:
        growth = _growth_pct(current.total_expense, previous.total_expense)
        if growth > TOTAL_GROWTH_PCT:
            drift_score += TOTAL_GROWTH_POINTS
            flags.append(f"Total spending increased {round_half_up(growth)}%")

    if previous.income > 0 and previous.total_expense > 0:
        income_change = _growth_pct(current.income, previous.income)
        expense_change = _growth_pct(current.total_expense, previous.total_expense)
        if income_change < INCOME_DROP_PCT and expense_change > EXPENSE_RISE_PCT:
            drift_score += DIVERGENCE_POINTS
            flags.append("Income decreased while spending increased")

    status, penalty_factor = drift_status(drift_score)
    logger.debug("Drift score %s -> %s (penalty %.2f)", drift_score, status.value, penalty_factor)
    return DriftResult(status=status, penalty_factor=penalty_factor, flags=flags, drift_score=drift_score)
