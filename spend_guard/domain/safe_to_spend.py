"""Safe-to-Spend calculator - the canonical allowance pipeline"""

import logging
import math
from datetime import datetime, timedelta
from typing import List

from spend_guard.domain.drift import detect_behavioral_drift
from spend_guard.domain.income import average_monthly_income, current_balance
from spend_guard.domain.ledger import LedgerView
from spend_guard.domain.models import (
    Alert,
    Allowance,
    CoverageResult,
    Direction,
    DriftResult,
    DriftStatus,
    EngineResult,
    ExhaustionForecast,
    FinancialConfig,
    Severity,
)
from spend_guard.domain.obligations import income_coverage_ratio, total_monthly_obligations, upcoming_obligations
from spend_guard.utils.date_utils import days_remaining_in_month, end_of_day, start_of_day, start_of_month
from spend_guard.utils.rounding import round_half_up

logger = logging.getLogger(__name__)

SPENDING_LOOKBACK_DAYS = 30
EXHAUSTION_CRITICAL_DAYS = 7
EXHAUSTION_WARNING_DAYS = 15
EXHAUSTION_CAUTION_DAYS = 30
ADEQUATE_COVERAGE_RATIO = 1.2


def emergency_buffer(avg_monthly_income: float, buffer_percent: float) -> float:
    return avg_monthly_income * buffer_percent / 100


def calculate_allowance(
    balance: float,
    buffer: float,
    upcoming: float,
    penalty_factor: float,
    as_of: datetime,
) -> Allowance:
    """
    Split the spendable pool across the rest of the calendar month.

    available = max(0, balance - buffer - upcoming obligations)
    adjusted  = available * drift penalty factor
    daily     = adjusted / days remaining (today included)
    """
    available_pool = max(0.0, balance - buffer - upcoming)
    adjusted_pool = available_pool * penalty_factor
    remaining_days = days_remaining_in_month(as_of.date())

    return Allowance(
        available_pool=available_pool,
        adjusted_pool=adjusted_pool,
        remaining_days=remaining_days,
        daily_allowance=round_half_up(adjusted_pool / remaining_days),
        remaining_safe_to_spend=round_half_up(adjusted_pool),
    )


def forecast_exhaustion(
    ledger: LedgerView,
    balance: float,
    remaining_safe_to_spend: float,
    as_of: datetime,
) -> ExhaustionForecast:
    """
    Project how many days the safe-to-spend amount lasts at the recent pace.

    Pace is the trailing 30-day expense total divided by 30. A non-positive
    balance is exhausted immediately; no recent spending means unlimited runway.
    """
    if balance <= 0:
        return ExhaustionForecast(
            days_until_exhaustion=0,
            severity=Severity.CRITICAL,
            exhaustion_date=as_of.date(),
            alert="Balance is already at or below zero",
        )

    recent = ledger.window(start=as_of - timedelta(days=SPENDING_LOOKBACK_DAYS), end=as_of)
    avg_daily_spending = recent.daily_average(SPENDING_LOOKBACK_DAYS)

    if avg_daily_spending == 0:
        return ExhaustionForecast(days_until_exhaustion=math.inf, severity=Severity.SAFE)

    days = math.floor(remaining_safe_to_spend / avg_daily_spending)
    exhaustion_date = as_of.date() + timedelta(days=days)
    forecast = ExhaustionForecast(
        days_until_exhaustion=days,
        severity=Severity.SAFE,
        exhaustion_date=exhaustion_date,
        avg_daily_spending=avg_daily_spending,
    )

    if days <= EXHAUSTION_CRITICAL_DAYS:
        safe_daily = balance / SPENDING_LOOKBACK_DAYS
        forecast.severity = Severity.CRITICAL
        forecast.required_daily_reduction = round_half_up(avg_daily_spending - safe_daily)
        forecast.alert = (
            f"URGENT: Funds exhausted by {exhaustion_date.isoformat()}. "
            f"Daily spending must drop to {round_half_up(safe_daily)} "
            f"(reduce by {forecast.required_daily_reduction})."
        )
    elif days <= EXHAUSTION_WARNING_DAYS:
        forecast.severity = Severity.WARNING
        forecast.alert = (
            f"WARNING: Balance will run out on {exhaustion_date.isoformat()}. "
            "Reduce non-essential spending immediately."
        )
    elif days <= EXHAUSTION_CAUTION_DAYS:
        forecast.severity = Severity.CAUTION
        forecast.alert = f"Your balance will last {days} days at current pace."

    return forecast


def current_daily_spend(ledger: LedgerView, as_of: datetime) -> int:
    """Month-to-date average daily spend"""
    month_to_date = ledger.window(start=start_of_month(as_of), end=as_of)
    days_elapsed = max(1, as_of.day)
    return round_half_up(month_to_date.sum(direction=Direction.EXPENSE) / days_elapsed)


def today_spending(ledger: LedgerView, as_of: datetime) -> float:
    return ledger.window(start=start_of_day(as_of), end=end_of_day(as_of)).sum(direction=Direction.EXPENSE)


def compile_advice(exhaustion: ExhaustionForecast, coverage: CoverageResult, drift: DriftResult) -> List[str]:
    advice = []
    if exhaustion.required_daily_reduction > 0:
        advice.append(
            f"Reduce daily spending by {exhaustion.required_daily_reduction} to extend balance to 30 days."
        )
    if coverage.ratio < ADEQUATE_COVERAGE_RATIO:
        advice.append(
            "Income does not adequately cover fixed expenses. "
            "Consider increasing income or reducing obligations."
        )
    if drift.status == DriftStatus.DETERIORATING:
        advice.append(
            "Spending patterns are deteriorating. "
            f"Safe-to-Spend reduced by {round_half_up((1 - drift.penalty_factor) * 100)}% as protection."
        )
    return advice


def compute_safe_to_spend(ledger: LedgerView, config: FinancialConfig, as_of: datetime) -> EngineResult:
    """
    Run the full safe-to-spend pipeline over one ledger snapshot.

    Steps:
    1. Running balance
    2. Average monthly income and coverage of fixed obligations
    3. Behavioral drift penalty
    4. Emergency buffer and upcoming obligations
    5. Time-aware allowance
    6. Exhaustion forecast and month-to-date velocity
    7. Alerts and advice
    """
    balance = current_balance(ledger)
    income = average_monthly_income(ledger, as_of)
    coverage = income_coverage_ratio(income.avg_monthly_income, total_monthly_obligations(config))
    drift = detect_behavioral_drift(ledger, as_of)

    buffer = emergency_buffer(income.avg_monthly_income, config.emergency_buffer_percent)
    upcoming = upcoming_obligations(config, as_of.date())
    allowance = calculate_allowance(balance, buffer, upcoming, drift.penalty_factor, as_of)

    exhaustion = forecast_exhaustion(ledger, balance, allowance.remaining_safe_to_spend, as_of)
    velocity = current_daily_spend(ledger, as_of)

    breach_flags = list(drift.flags)
    alerts = []
    if coverage.alert:
        alerts.append(Alert(severity=coverage.severity, message=coverage.alert))
    if exhaustion.alert:
        alerts.append(Alert(severity=exhaustion.severity, message=exhaustion.alert))
    if velocity > allowance.daily_allowance:
        breach_flags.append(f"Daily spending ({velocity}) exceeds allowance ({allowance.daily_allowance})")
        alerts.append(
            Alert(
                severity=Severity.WARNING,
                message=f"Current daily spending ({velocity}) exceeds safe limit ({allowance.daily_allowance})",
            )
        )

    logger.debug(
        "Safe-to-spend for %s: balance=%.2f buffer=%.2f upcoming=%.2f daily=%s",
        config.user_id,
        balance,
        buffer,
        upcoming,
        allowance.daily_allowance,
    )

    return EngineResult(
        user_id=config.user_id,
        as_of=as_of,
        current_balance=balance,
        avg_monthly_income=income.avg_monthly_income,
        income_volatility=income.volatility,
        active_income_months=income.active_months,
        income_coverage_ratio=coverage.ratio,
        coverage_severity=coverage.severity,
        drift=drift,
        emergency_buffer=buffer,
        upcoming_obligations=upcoming,
        allowance=allowance,
        current_daily_spend=velocity,
        today_spending=today_spending(ledger, as_of),
        exhaustion=exhaustion,
        breach_flags=breach_flags,
        alerts=alerts,
        advice=compile_advice(exhaustion, coverage, drift),
        snapshot=ledger,
    )
