"""Unit tests for the safe-to-spend calculator"""

import math
from datetime import datetime, timedelta

import pytest

from spend_guard.domain.ledger import LedgerView
from spend_guard.domain.models import DriftStatus, FinancialConfig, FixedObligation, Severity
from spend_guard.domain.safe_to_spend import calculate_allowance, compute_safe_to_spend, forecast_exhaustion


@pytest.fixture
def steady_ledger(income, expense) -> LedgerView:
    """Three salaries, three rents, and two discretionary purchases in March"""
    return LedgerView([
        income(30000, datetime(2024, 1, 1)),
        income(30000, datetime(2024, 2, 1)),
        income(30000, datetime(2024, 3, 1)),
        expense(10000, datetime(2024, 1, 2), category="Rent"),
        expense(10000, datetime(2024, 2, 2), category="Rent"),
        expense(10000, datetime(2024, 3, 2), category="Rent"),
        expense(1000, datetime(2024, 3, 14, 18)),
        expense(500, datetime(2024, 3, 15, 10)),
    ])


@pytest.fixture
def steady_config() -> FinancialConfig:
    return FinancialConfig(
        user_id="user_1",
        monthly_income=30000,
        fixed_obligations=[
            FixedObligation("Rent", 10000, due_day_of_month=1),
            FixedObligation("Insurance", 2000, due_day_of_month=20),
        ],
        emergency_buffer_percent=10,
    )


def test_allowance_splits_adjusted_pool_over_remaining_days(as_of):
    allowance = calculate_allowance(20000, 3000, 2000, 0.9, as_of)

    assert allowance.available_pool == 15000
    assert allowance.adjusted_pool == pytest.approx(13500)
    assert allowance.remaining_days == 17
    assert allowance.daily_allowance == 794
    assert allowance.remaining_safe_to_spend == 13500


def test_allowance_never_negative(as_of):
    allowance = calculate_allowance(1000, 3000, 500, 1.0, as_of)

    assert allowance.available_pool == 0
    assert allowance.daily_allowance == 0
    assert allowance.remaining_safe_to_spend == 0


def test_last_day_of_month_has_one_remaining_day():
    allowance = calculate_allowance(3100, 0, 0, 1.0, datetime(2024, 3, 31, 23, 0))
    assert allowance.remaining_days == 1
    assert allowance.daily_allowance == 3100


def test_exhaustion_immediate_when_balance_not_positive(expense, as_of):
    """Spending rate is irrelevant once the balance is gone"""
    for ledger in (LedgerView([]), LedgerView([expense(99999, datetime(2024, 3, 10))])):
        forecast = forecast_exhaustion(ledger, -500, 0, as_of)
        assert forecast.days_until_exhaustion == 0
        assert forecast.severity == Severity.CRITICAL


def test_exhaustion_unlimited_without_recent_spending(expense, as_of):
    ledger = LedgerView([expense(5000, datetime(2023, 12, 1))])

    forecast = forecast_exhaustion(ledger, 10000, 8000, as_of)

    assert math.isinf(forecast.days_until_exhaustion)
    assert forecast.severity == Severity.SAFE
    assert forecast.exhaustion_date is None


@pytest.mark.parametrize(
    "remaining,days,severity",
    [
        (500, 5, Severity.CRITICAL),
        (700, 7, Severity.CRITICAL),
        (1200, 12, Severity.WARNING),
        (2500, 25, Severity.CAUTION),
        (5000, 50, Severity.SAFE),
    ],
)
def test_exhaustion_severity_bands(expense, as_of, remaining, days, severity):
    # 3000 over the trailing 30 days = 100 per day
    ledger = LedgerView([expense(3000, datetime(2024, 3, 10))])

    forecast = forecast_exhaustion(ledger, 1500, remaining, as_of)

    assert forecast.days_until_exhaustion == days
    assert forecast.severity == severity
    assert forecast.exhaustion_date == as_of.date() + timedelta(days=days)


def test_critical_exhaustion_reports_required_reduction(expense, as_of):
    ledger = LedgerView([expense(3000, datetime(2024, 3, 10))])

    forecast = forecast_exhaustion(ledger, 1500, 500, as_of)

    # 100/day now, 1500 over 30 days allows 50/day
    assert forecast.required_daily_reduction == 50
    assert "URGENT" in forecast.alert


def test_full_pipeline(steady_ledger, steady_config, as_of):
    result = compute_safe_to_spend(steady_ledger, steady_config, as_of)

    assert result.current_balance == 58500
    assert result.avg_monthly_income == 30000
    assert result.income_coverage_ratio == 2.5
    assert result.emergency_buffer == 3000
    assert result.upcoming_obligations == 2000  # rent due on the 1st already paid
    assert result.drift.status == DriftStatus.STABLE  # fewer than 10 transactions
    assert result.penalty_factor == 1.0
    assert result.remaining_safe_to_spend == 53500
    assert result.daily_allowance == 3147
    assert result.today_spending == 500
    assert result.current_daily_spend == 767
    # 11500 over 30 days
    assert result.days_until_exhaustion == 139
    assert result.exhaustion.severity == Severity.SAFE
    assert result.alerts == []
    assert result.advice == []


def test_pipeline_compiles_alerts_and_advice(income, expense, as_of):
    config = FinancialConfig(
        user_id="user_1",
        monthly_income=10000,
        fixed_obligations=[FixedObligation("Rent", 9000, due_day_of_month=1)],
    )
    ledger = LedgerView([
        income(10000, datetime(2024, 3, 1)),
        expense(9000, datetime(2024, 3, 2), category="Rent"),
        expense(800, datetime(2024, 3, 10)),
    ])

    result = compute_safe_to_spend(ledger, config, as_of)

    assert result.daily_allowance == 0
    assert result.days_until_exhaustion == 0
    assert [a.severity for a in result.alerts] == [Severity.WARNING, Severity.CRITICAL, Severity.WARNING]
    assert result.breach_flags == ["Daily spending (653) exceeds allowance (0)"]
    assert result.advice[0] == "Reduce daily spending by 320 to extend balance to 30 days."
    assert "adequately cover" in result.advice[1]


def test_raising_buffer_never_raises_allowance(steady_ledger, as_of):
    allowances = []
    for percent in (0, 10, 25, 50, 75, 100):
        config = FinancialConfig(user_id="user_1", monthly_income=30000, emergency_buffer_percent=percent)
        allowances.append(compute_safe_to_spend(steady_ledger, config, as_of).daily_allowance)

    assert allowances == sorted(allowances, reverse=True)
    assert allowances[0] > allowances[-1]


def test_zero_income_pipeline_does_not_divide(expense, as_of):
    config = FinancialConfig(
        user_id="user_1",
        monthly_income=0,
        fixed_obligations=[FixedObligation("Rent", 5000)],
    )
    ledger = LedgerView([expense(200, datetime(2024, 3, 5))])

    result = compute_safe_to_spend(ledger, config, as_of)

    assert result.avg_monthly_income == 0
    assert result.income_coverage_ratio == 0
    assert result.coverage_severity == Severity.CRITICAL
    assert result.emergency_buffer == 0
