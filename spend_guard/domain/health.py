"""Financial health score - coarse 10-100 summary for dashboards"""

from datetime import datetime, timedelta

from spend_guard.domain.income import current_balance
from spend_guard.domain.ledger import LedgerView
from spend_guard.domain.models import Classification, Direction, FinancialConfig
from spend_guard.utils.rounding import round_half_up

HEALTH_LOOKBACK_DAYS = 30
LOW_BALANCE_THRESHOLD = 2000
LOAN_BURDEN_LIMIT = 0.3
LOAN_KEYWORDS = ("Loan", "EMI")
HIGH_RISK_SCORE = 50


def loan_obligations(config: FinancialConfig) -> float:
    return sum(
        ob.amount for ob in config.fixed_obligations if any(keyword in ob.name for keyword in LOAN_KEYWORDS)
    )


def non_essential_ratio(ledger: LedgerView, as_of: datetime) -> float:
    """Share of the last 30 days' spend that went to non-essential categories"""
    recent = ledger.window(start=as_of - timedelta(days=HEALTH_LOOKBACK_DAYS), end=as_of)
    total = recent.sum(direction=Direction.EXPENSE)
    if total == 0:
        return 0.0
    return recent.sum(classification=Classification.NON_ESSENTIAL) / total


def calculate_health_score(
    ledger: LedgerView,
    config: FinancialConfig,
    risk_score: float,
    as_of: datetime,
) -> int:
    """
    Start from 100 and subtract:
    - 30 if loan obligations exceed 30% of declared income
    - up to 30 in proportion to the non-essential spending share
    - 20 if the balance is below the low-balance threshold
    - 15 if the risk score is above 50

    Clamped to [10, 100].
    """
    score = 100
    if loan_obligations(config) > config.monthly_income * LOAN_BURDEN_LIMIT:
        score -= 30
    score -= round_half_up(non_essential_ratio(ledger, as_of) * 30)
    if current_balance(ledger) < LOW_BALANCE_THRESHOLD:
        score -= 20
    if risk_score > HIGH_RISK_SCORE:
        score -= 15

    return min(100, max(10, score))
