"""Unit tests for the engine facade"""

from datetime import datetime

import pytest

from spend_guard.domain.engine import FinancialEngine
from spend_guard.domain.exceptions import ConfigMissingError, DataUnavailableError
from spend_guard.domain.models import CandidateTransaction, DecisionStatus, Direction, FinancialConfig, KillSwitchLevel


class UnavailableLedger:
    def find_transactions(self, user_id, start=None, end=None):
        raise DataUnavailableError("ledger offline")


@pytest.fixture
def config() -> FinancialConfig:
    return FinancialConfig(user_id="user_1", monthly_income=30000, emergency_buffer_percent=10)


@pytest.fixture
def transactions(income, expense):
    return [
        income(30000, datetime(2024, 3, 1)),
        expense(1000, datetime(2024, 3, 10)),
        expense(2000, datetime(2024, 3, 20)),  # after as_of
        income(99999, datetime(2024, 3, 1), user_id="user_2"),
    ]


def test_safe_to_spend_uses_only_snapshot_up_to_as_of(transactions, config, in_memory_ledger, in_memory_config_store, as_of):
    engine = FinancialEngine(in_memory_ledger(transactions), in_memory_config_store(config))

    result = engine.compute_safe_to_spend("user_1", as_of)

    assert result.user_id == "user_1"
    assert result.as_of == as_of
    assert result.current_balance == 29000
    assert result.today_spending == 0


def test_repeated_calls_are_identical(transactions, config, in_memory_ledger, in_memory_config_store, as_of):
    engine = FinancialEngine(in_memory_ledger(transactions), in_memory_config_store(config))

    first = engine.compute_safe_to_spend("user_1", as_of)
    second = engine.compute_safe_to_spend("user_1", as_of)

    assert first == second


def test_missing_config_raises(in_memory_ledger, in_memory_config_store, as_of):
    ledger = in_memory_ledger([])
    engine = FinancialEngine(ledger, in_memory_config_store())

    with pytest.raises(ConfigMissingError) as exc_info:
        engine.compute_safe_to_spend("user_1", as_of)

    assert "Complete onboarding first" in str(exc_info.value)
    assert ledger.calls == 0


def test_ledger_failure_propagates(config, in_memory_config_store, as_of):
    engine = FinancialEngine(UnavailableLedger(), in_memory_config_store(config))

    with pytest.raises(DataUnavailableError):
        engine.compute_safe_to_spend("user_1", as_of)


def test_risk_score_reuses_the_result_snapshot(transactions, config, in_memory_ledger, in_memory_config_store, as_of):
    ledger = in_memory_ledger(transactions)
    engine = FinancialEngine(ledger, in_memory_config_store(config))
    result = engine.compute_safe_to_spend("user_1", as_of)
    calls = ledger.calls

    assessment = engine.compute_risk_score("user_1", result)

    assert ledger.calls == calls
    assert 0 <= assessment.risk_score <= 100


def test_writes_after_the_result_do_not_leak_into_scores(
    transactions, expense, config, in_memory_ledger, in_memory_config_store, as_of
):
    ledger = in_memory_ledger(transactions)
    engine = FinancialEngine(ledger, in_memory_config_store(config))
    result = engine.compute_safe_to_spend("user_1", as_of)
    risk_before = engine.compute_risk_score("user_1", result)
    health_before = engine.health_score("user_1", result, risk_before.risk_score)

    ledger.transactions.extend(expense(2000, datetime(2024, 3, day)) for day in range(8, 15))

    assert engine.compute_risk_score("user_1", result) == risk_before
    assert engine.health_score("user_1", result, risk_before.risk_score) == health_before


def test_validate_rejects_foreign_engine_result(engine_result_factory, in_memory_ledger, in_memory_config_store):
    engine = FinancialEngine(in_memory_ledger([]), in_memory_config_store())
    candidate = CandidateTransaction(amount=10, direction=Direction.EXPENSE, category="Dining")

    with pytest.raises(ValueError):
        engine.validate_transaction("user_2", candidate, engine_result_factory(), 10)


def test_validate_delegates_to_policy(engine_result_factory, in_memory_ledger, in_memory_config_store):
    engine = FinancialEngine(in_memory_ledger([]), in_memory_config_store())
    candidate = CandidateTransaction(amount=10, direction=Direction.EXPENSE, category="Dining")

    decision = engine.validate_transaction("user_1", candidate, engine_result_factory(), 80)

    assert decision.status == DecisionStatus.BLOCKED
    assert engine.get_kill_switch_level(80) == KillSwitchLevel.RED


def test_health_score_requires_config(engine_result_factory, in_memory_ledger, in_memory_config_store):
    engine = FinancialEngine(in_memory_ledger([]), in_memory_config_store())

    with pytest.raises(ConfigMissingError):
        engine.health_score("user_1", engine_result_factory(), 0)
