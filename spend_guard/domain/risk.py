"""Risk scoring engine - deterministic 0-100 risk score from spending signals"""

import logging
from datetime import datetime, timedelta
from typing import List

from spend_guard.domain.categories import is_essential
from spend_guard.domain.ledger import LedgerView
from spend_guard.domain.models import Direction, EngineResult, RiskAssessment, RiskSignals
from spend_guard.utils.date_utils import calendar_weeks, start_of_month
from spend_guard.utils.rounding import round_half_up, round_to

logger = logging.getLogger(__name__)

VELOCITY_LOOKBACK_DAYS = 7
VELOCITY_TOLERANCE = 1.2
CATEGORY_SHARE_LIMIT_PCT = 40
OVERSPENDING_WEEKS = 4
WEEKLY_OVERSPEND_THRESHOLD = 5000

VELOCITY_WEIGHT = 2
CATEGORY_WEIGHT = 1.5
BUFFER_WEIGHT = 3
TREND_SCALE = 10
OVERSPENDING_WEIGHT = 2.5

MAX_RISK_SCORE = 100


def count_velocity_breaches(ledger: LedgerView, daily_allowance: float, as_of: datetime) -> int:
    """Days in the trailing week whose spend exceeded the allowance by more than 20%"""
    recent = ledger.window(start=as_of - timedelta(days=VELOCITY_LOOKBACK_DAYS), end=as_of)
    limit = daily_allowance * VELOCITY_TOLERANCE
    return sum(1 for amount in recent.group_by_day().values() if amount > limit)


def count_category_overuse(ledger: LedgerView, as_of: datetime) -> int:
    """Non-essential categories taking more than 40% of this month's spend"""
    month = ledger.window(start=start_of_month(as_of), end=as_of)
    totals = month.by_category()
    month_total = sum(totals.values())
    if month_total == 0:
        return 0

    return sum(
        1
        for category, amount in totals.items()
        if amount / month_total * 100 > CATEGORY_SHARE_LIMIT_PCT and not is_essential(category)
    )


def count_overspending_weeks(ledger: LedgerView, as_of: datetime) -> int:
    """Calendar weeks (current + previous three) with spend above the weekly threshold"""
    overspending = 0
    for week_start, week_end in calendar_weeks(as_of, OVERSPENDING_WEEKS):
        week_total = ledger.window(start=week_start, end=min(week_end, as_of)).sum(direction=Direction.EXPENSE)
        if week_total > WEEKLY_OVERSPEND_THRESHOLD:
            overspending += 1
    return overspending


def explain_risk(signals: RiskSignals) -> List[str]:
    reasons = []

    if signals.velocity_breaches > 0:
        reasons.append(f"Daily spending limit exceeded {signals.velocity_breaches} times this week")

    if signals.category_warnings > 0:
        reasons.append(f"{signals.category_warnings} categories consuming over 40% of budget")

    if signals.buffer_breaches > 0:
        reasons.append("Emergency buffer has been breached")

    if signals.trend_penalty > 0:
        reasons.append("Recent spending trends indicate risk")

    if signals.repeated_overspending > 0:
        reasons.append(f"Overspending detected in {signals.repeated_overspending} of last 4 weeks")

    return reasons or ["No significant risk factors detected"]


def weighted_score(signals: RiskSignals) -> int:
    """
    Weighted sum of signals, rounded and capped at 100.

    Weights:
    - velocity breaches x2
    - category overuse x1.5
    - buffer breach x3
    - trend penalty as-is (already scaled x10)
    - repeated overspending x2.5
    """
    raw = (
        signals.velocity_breaches * VELOCITY_WEIGHT
        + signals.category_warnings * CATEGORY_WEIGHT
        + signals.buffer_breaches * BUFFER_WEIGHT
        + signals.trend_penalty
        + signals.repeated_overspending * OVERSPENDING_WEIGHT
    )
    return min(MAX_RISK_SCORE, round_half_up(raw))


def calculate_risk_score(ledger: LedgerView, engine_result: EngineResult) -> RiskAssessment:
    """
    Main entry point: score risk from the ledger and a prior safe-to-spend result.

    All windows are anchored on engine_result.as_of, so the risk score is
    consistent with the allowance it was computed against.
    """
    as_of = engine_result.as_of
    signals = RiskSignals(
        velocity_breaches=count_velocity_breaches(ledger, engine_result.daily_allowance, as_of),
        category_warnings=count_category_overuse(ledger, as_of),
        buffer_breaches=1 if engine_result.current_balance < engine_result.emergency_buffer else 0,
        trend_penalty=round_to((1 - engine_result.penalty_factor) * TREND_SCALE, 2),
        repeated_overspending=count_overspending_weeks(ledger, as_of),
    )
    risk_score = weighted_score(signals)
    logger.debug("Risk score for %s: %s (%s)", engine_result.user_id, risk_score, signals)

    return RiskAssessment(risk_score=risk_score, signals=signals, explanation=explain_risk(signals))
