"""Unit tests for obligation tracking and income coverage"""

import math
from datetime import date

import pytest

from spend_guard.domain.exceptions import InvalidFinancialConfigError
from spend_guard.domain.models import FinancialConfig, FixedObligation, Severity
from spend_guard.domain.obligations import income_coverage_ratio, total_monthly_obligations, upcoming_obligations


@pytest.fixture
def config() -> FinancialConfig:
    return FinancialConfig(
        user_id="user_1",
        monthly_income=50000,
        fixed_obligations=[
            FixedObligation("Rent", 15000, due_day_of_month=5),
            FixedObligation("Car Loan EMI", 8000, due_day_of_month=15),
            FixedObligation("Insurance", 2000, due_day_of_month=28),
        ],
    )


def test_total_monthly_obligations(config):
    assert total_monthly_obligations(config) == 25000


def test_upcoming_excludes_days_already_passed(config):
    # Rent (day 5) counts as paid on the 15th; EMI due today still counts
    assert upcoming_obligations(config, date(2024, 3, 15)) == 10000
    assert upcoming_obligations(config, date(2024, 3, 1)) == 25000
    assert upcoming_obligations(config, date(2024, 3, 29)) == 0


def test_coverage_zero_income_is_critical():
    result = income_coverage_ratio(0, 25000)
    assert result.ratio == 0
    assert result.severity == Severity.CRITICAL
    assert result.alert is not None


def test_coverage_shortfall():
    result = income_coverage_ratio(20000, 25000)
    assert result.ratio == 0.8
    assert result.severity == Severity.CRITICAL
    assert "5,000" in result.alert


def test_coverage_thin_buffer():
    result = income_coverage_ratio(27500, 25000)
    assert result.ratio == 1.1
    assert result.severity == Severity.WARNING
    assert "2,500" in result.alert


def test_coverage_boundaries():
    assert income_coverage_ratio(25000, 25000).severity == Severity.WARNING
    assert income_coverage_ratio(30000, 25000).severity == Severity.SAFE
    assert income_coverage_ratio(30000, 25000).alert is None


def test_coverage_without_obligations():
    result = income_coverage_ratio(30000, 0)
    assert math.isinf(result.ratio)
    assert result.severity == Severity.SAFE


@pytest.mark.parametrize(
    "kwargs",
    [
        {"monthly_income": -1},
        {"monthly_income": math.inf},
        {"monthly_income": math.nan},
        {"monthly_income": 1000, "fixed_obligations": [FixedObligation("Rent", math.inf)]},
        {"monthly_income": 1000, "emergency_buffer_percent": 101},
        {"monthly_income": 1000, "fixed_obligations": [FixedObligation("Rent", 100, due_day_of_month=0)]},
        {"monthly_income": 1000, "fixed_obligations": [FixedObligation("Rent", 100, due_day_of_month=32)]},
        {"monthly_income": 1000, "fixed_obligations": [FixedObligation("Rent", -5)]},
    ],
)
def test_invalid_config_rejected(kwargs):
    with pytest.raises(InvalidFinancialConfigError):
        FinancialConfig(user_id="user_1", **kwargs)
