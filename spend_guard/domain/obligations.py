"""Fixed obligation tracking and income coverage"""

import math
from datetime import date

from spend_guard.domain.models import CoverageResult, FinancialConfig, Severity
from spend_guard.utils.rounding import round_half_up, round_to

COVERAGE_CRITICAL_RATIO = 1.0
COVERAGE_WARNING_RATIO = 1.2


def total_monthly_obligations(config: FinancialConfig) -> float:
    return sum(ob.amount for ob in config.fixed_obligations)


def upcoming_obligations(config: FinancialConfig, today: date) -> float:
    """
    Obligations not yet paid this cycle.

    Due days earlier in the month than today are treated as already paid and
    are not rolled into next month.
    """
    return sum(ob.amount for ob in config.fixed_obligations if ob.due_day_of_month >= today.day)


def income_coverage_ratio(avg_income: float, total_obligations: float) -> CoverageResult:
    """
    How many times average income covers fixed obligations.

    Thresholds:
    - ratio < 1.0: CRITICAL (shortfall)
    - 1.0 <= ratio < 1.2: WARNING (thin buffer)
    - ratio >= 1.2: SAFE
    """
    if avg_income == 0:
        return CoverageResult(
            ratio=0.0,
            severity=Severity.CRITICAL,
            alert="No income to cover fixed obligations",
        )

    if total_obligations == 0:
        return CoverageResult(ratio=math.inf, severity=Severity.SAFE)

    ratio = avg_income / total_obligations

    if ratio < COVERAGE_CRITICAL_RATIO:
        shortfall = round_half_up(total_obligations - avg_income)
        return CoverageResult(
            ratio=round_to(ratio, 2),
            severity=Severity.CRITICAL,
            alert=f"Income does not cover fixed obligations. Shortfall of {shortfall:,}",
        )
    if ratio < COVERAGE_WARNING_RATIO:
        buffer = round_half_up(avg_income - total_obligations)
        return CoverageResult(
            ratio=round_to(ratio, 2),
            severity=Severity.WARNING,
            alert=f"Income barely covers fixed obligations. Buffer of {buffer:,}",
        )
    return CoverageResult(ratio=round_to(ratio, 2), severity=Severity.SAFE)
