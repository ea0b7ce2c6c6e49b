"""Unit tests for the financial health score"""

from datetime import datetime

from spend_guard.domain.health import calculate_health_score, loan_obligations, non_essential_ratio
from spend_guard.domain.ledger import LedgerView
from spend_guard.domain.models import FinancialConfig, FixedObligation


def test_loan_obligations_match_by_name():
    config = FinancialConfig(
        user_id="user_1",
        monthly_income=30000,
        fixed_obligations=[
            FixedObligation("Car Loan", 6000),
            FixedObligation("Phone EMI", 1000),
            FixedObligation("Rent", 9000),
        ],
    )
    assert loan_obligations(config) == 7000


def test_non_essential_ratio_over_last_thirty_days(income, expense, as_of):
    ledger = LedgerView([
        income(5000, datetime(2024, 3, 1)),
        expense(3000, datetime(2024, 3, 5), category="Rent"),
        expense(1000, datetime(2024, 3, 10)),
        expense(9000, datetime(2024, 1, 10)),  # outside the window
    ])
    assert non_essential_ratio(ledger, as_of) == 0.25
    assert non_essential_ratio(LedgerView([]), as_of) == 0


def test_every_deduction_applies(income, expense, as_of):
    config = FinancialConfig(
        user_id="user_1",
        monthly_income=30000,
        fixed_obligations=[FixedObligation("Car Loan", 10000)],
    )
    ledger = LedgerView([
        income(5000, datetime(2024, 3, 1)),
        expense(3000, datetime(2024, 3, 5), category="Rent"),
        expense(1000, datetime(2024, 3, 10)),
    ])

    # 100 - 30 (loans) - 8 (25% non-essential) - 20 (balance 1000) - 15 (risk)
    assert calculate_health_score(ledger, config, 60, as_of) == 27


def test_healthy_user_scores_full_marks(income, as_of):
    config = FinancialConfig(user_id="user_1", monthly_income=30000)
    ledger = LedgerView([income(30000, datetime(2024, 3, 1))])

    assert calculate_health_score(ledger, config, 50, as_of) == 100


def test_score_floor_is_ten(expense, as_of):
    config = FinancialConfig(
        user_id="user_1",
        monthly_income=1000,
        fixed_obligations=[FixedObligation("Home Loan", 5000)],
    )
    ledger = LedgerView([expense(500, datetime(2024, 3, 10))])

    assert calculate_health_score(ledger, config, 90, as_of) == 10
