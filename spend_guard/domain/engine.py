"""Engine facade - the four entry points consumed by the integration layer"""

import logging
from datetime import datetime
from typing import List, Optional, Protocol

from spend_guard.domain import health, kill_switch, risk, safe_to_spend
from spend_guard.domain.exceptions import ConfigMissingError
from spend_guard.domain.ledger import LedgerView
from spend_guard.domain.models import (
    CandidateTransaction,
    EngineResult,
    FinancialConfig,
    KillSwitchDecision,
    KillSwitchLevel,
    KillSwitchStatus,
    RecoveryPlan,
    RiskAssessment,
    Transaction,
)

logger = logging.getLogger(__name__)


class Ledger(Protocol):
    def find_transactions(
        self,
        user_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Transaction]: ...


class ConfigStore(Protocol):
    def get_financial_config(self, user_id: str) -> Optional[FinancialConfig]: ...


class FinancialEngine:
    """
    Fetches a ledger snapshot and configuration, then runs the pure domain
    calculations against an explicit as_of instant.

    The engine holds no per-user state. Ledger and config store failures
    (DataUnavailableError) propagate untouched.
    """

    def __init__(self, ledger: Ledger, config_store: ConfigStore):
        self.ledger = ledger
        self.config_store = config_store

    def _config(self, user_id: str) -> FinancialConfig:
        config = self.config_store.get_financial_config(user_id)
        if config is None:
            raise ConfigMissingError(user_id)
        return config

    def _snapshot(self, user_id: str, as_of: datetime) -> LedgerView:
        return LedgerView(self.ledger.find_transactions(user_id, end=as_of))

    def _result_snapshot(self, user_id: str, engine_result: EngineResult) -> LedgerView:
        if engine_result.snapshot is not None:
            return engine_result.snapshot
        return self._snapshot(user_id, engine_result.as_of)

    def compute_safe_to_spend(self, user_id: str, as_of: datetime) -> EngineResult:
        config = self._config(user_id)
        snapshot = self._snapshot(user_id, as_of)
        logger.debug("Loaded %d transactions for %s", len(snapshot), user_id)
        return safe_to_spend.compute_safe_to_spend(snapshot, config, as_of)

    def compute_risk_score(self, user_id: str, engine_result: EngineResult) -> RiskAssessment:
        """Score risk against a prior result and the ledger snapshot it was computed from"""
        return risk.calculate_risk_score(self._result_snapshot(user_id, engine_result), engine_result)

    @staticmethod
    def get_kill_switch_level(risk_score: float) -> KillSwitchLevel:
        return kill_switch.get_kill_switch_level(risk_score)

    def validate_transaction(
        self,
        user_id: str,
        candidate: CandidateTransaction,
        engine_result: EngineResult,
        risk_score: float,
    ) -> KillSwitchDecision:
        if engine_result.user_id != user_id:
            raise ValueError(f"Engine result belongs to {engine_result.user_id}, not {user_id}")
        return kill_switch.validate_transaction(candidate, engine_result, risk_score)

    @staticmethod
    def simulate_recovery(engine_result: EngineResult, risk_score: float) -> RecoveryPlan:
        return kill_switch.simulate_recovery(engine_result, risk_score)

    @staticmethod
    def status(risk_score: float) -> KillSwitchStatus:
        return kill_switch.kill_switch_status(risk_score)

    def health_score(self, user_id: str, engine_result: EngineResult, risk_score: float) -> int:
        config = self._config(user_id)
        snapshot = self._result_snapshot(user_id, engine_result)
        return health.calculate_health_score(snapshot, config, risk_score, engine_result.as_of)
