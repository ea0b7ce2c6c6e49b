"""Pydantic schemas for API request/response validation"""

import math
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from spend_guard.config import settings
from spend_guard.domain.models import (
    DecisionSeverity,
    DecisionStatus,
    Direction,
    DriftStatus,
    EngineResult,
    KillSwitchDecision,
    KillSwitchLevel,
    RecoveryAction,
    RecoveryPlan,
    RiskAssessment,
    Severity,
    Transaction,
)


def _finite(value: float) -> Optional[float]:
    """JSON has no infinity; unlimited values are reported as null"""
    return None if math.isinf(value) else value


class FixedObligationSchema(BaseModel):
    name: str = Field(..., min_length=1)
    amount: float = Field(..., ge=0, allow_inf_nan=False)
    due_day_of_month: int = Field(1, ge=1, le=31)


class FinancialConfigRequest(BaseModel):
    """Request body for PUT /v1/config/{user_id}"""

    monthly_income: float = Field(..., ge=0, allow_inf_nan=False, description="Declared monthly income")
    fixed_obligations: List[FixedObligationSchema] = Field(default_factory=list)
    emergency_buffer_percent: float = Field(
        default_factory=lambda: settings.default_emergency_buffer_percent, ge=0, le=100, allow_inf_nan=False
    )


class FinancialConfigResponse(FinancialConfigRequest):
    user_id: str


class AlertSchema(BaseModel):
    severity: Severity
    message: str


class DriftSchema(BaseModel):
    status: DriftStatus
    drift_score: int
    penalty_factor: float
    flags: List[str]


class SafeToSpendResponse(BaseModel):
    """Response for GET /v1/safe-to-spend"""

    user_id: str
    as_of: datetime
    remaining_safe_to_spend: int
    daily_allowance: int
    current_daily_spend: int
    today_spending: float
    remaining_days: int
    days_until_exhaustion: Optional[float] = None  # null = no recent spending
    exhaustion_date: Optional[date] = None
    exhaustion_severity: Severity
    current_balance: float
    avg_monthly_income: float
    income_volatility: float
    income_coverage_ratio: Optional[float] = None  # null = no obligations declared
    coverage_severity: Severity
    emergency_buffer: float
    upcoming_obligations: float
    available_pool: float
    adjusted_pool: float
    drift: DriftSchema
    breach_flags: List[str]
    alerts: List[AlertSchema]
    advice: List[str]

    @classmethod
    def from_domain(cls, result: EngineResult) -> "SafeToSpendResponse":
        return cls(
            user_id=result.user_id,
            as_of=result.as_of,
            remaining_safe_to_spend=result.remaining_safe_to_spend,
            daily_allowance=result.daily_allowance,
            current_daily_spend=result.current_daily_spend,
            today_spending=result.today_spending,
            remaining_days=result.allowance.remaining_days,
            days_until_exhaustion=_finite(result.days_until_exhaustion),
            exhaustion_date=result.exhaustion.exhaustion_date,
            exhaustion_severity=result.exhaustion.severity,
            current_balance=result.current_balance,
            avg_monthly_income=round(result.avg_monthly_income, 2),
            income_volatility=round(result.income_volatility, 2),
            income_coverage_ratio=_finite(result.income_coverage_ratio),
            coverage_severity=result.coverage_severity,
            emergency_buffer=round(result.emergency_buffer, 2),
            upcoming_obligations=result.upcoming_obligations,
            available_pool=round(result.allowance.available_pool, 2),
            adjusted_pool=round(result.allowance.adjusted_pool, 2),
            drift=DriftSchema(
                status=result.drift.status,
                drift_score=result.drift.drift_score,
                penalty_factor=result.drift.penalty_factor,
                flags=result.drift.flags,
            ),
            breach_flags=result.breach_flags,
            alerts=[AlertSchema(severity=a.severity, message=a.message) for a in result.alerts],
            advice=result.advice,
        )


class RiskSignalsSchema(BaseModel):
    velocity_breaches: int
    category_warnings: int
    buffer_breaches: int
    trend_penalty: float
    repeated_overspending: int


class RiskSchema(BaseModel):
    risk_score: int
    signals: RiskSignalsSchema
    explanation: List[str]

    @classmethod
    def from_domain(cls, assessment: RiskAssessment) -> "RiskSchema":
        s = assessment.signals
        return cls(
            risk_score=assessment.risk_score,
            signals=RiskSignalsSchema(
                velocity_breaches=s.velocity_breaches,
                category_warnings=s.category_warnings,
                buffer_breaches=s.buffer_breaches,
                trend_penalty=s.trend_penalty,
                repeated_overspending=s.repeated_overspending,
            ),
            explanation=assessment.explanation,
        )


class KillSwitchStatusSchema(BaseModel):
    level: KillSwitchLevel
    active: bool
    blocked_categories: List[str]


class KillSwitchStatusResponse(BaseModel):
    """Response for GET /v1/kill-switch/status"""

    safe_to_spend: SafeToSpendResponse
    risk: RiskSchema
    kill_switch: KillSwitchStatusSchema
    health_score: int


class RecoveryScenarioSchema(BaseModel):
    action: RecoveryAction
    description: str
    impact: str
    days_required: Optional[int] = None
    target_daily_spend: Optional[float] = None
    amount_required: Optional[int] = None


class RecoveryPlanSchema(BaseModel):
    scenarios: List[RecoveryScenarioSchema]
    recommendation: RecoveryScenarioSchema

    @classmethod
    def from_domain(cls, plan: RecoveryPlan) -> "RecoveryPlanSchema":
        scenarios = [RecoveryScenarioSchema(**vars(s)) for s in plan.scenarios]
        return cls(scenarios=scenarios, recommendation=RecoveryScenarioSchema(**vars(plan.recommendation)))


class RecoveryResponse(BaseModel):
    """Response for POST /v1/kill-switch/simulate-recovery"""

    recovery: RecoveryPlanSchema
    current_risk: int
    kill_switch_level: KillSwitchLevel


class CandidateRequest(BaseModel):
    """Request body for POST /v1/kill-switch/validate"""

    user_id: str = Field(..., min_length=1, description="User identifier")
    amount: float = Field(..., gt=0, allow_inf_nan=False)
    direction: Direction = Direction.EXPENSE
    category: Optional[str] = None
    description: str = ""


class DecisionSchema(BaseModel):
    allowed: bool
    status: DecisionStatus
    level: KillSwitchLevel
    reason: str
    severity: Optional[DecisionSeverity] = None
    recovery: Optional[RecoveryPlanSchema] = None
    current_daily_spend: Optional[float] = None
    attempted_total: Optional[float] = None
    daily_limit: Optional[float] = None

    @classmethod
    def from_domain(cls, decision: KillSwitchDecision) -> "DecisionSchema":
        return cls(
            allowed=decision.allowed,
            status=decision.status,
            level=decision.level,
            reason=decision.reason,
            severity=decision.severity,
            recovery=RecoveryPlanSchema.from_domain(decision.recovery) if decision.recovery else None,
            current_daily_spend=decision.current_daily_spend,
            attempted_total=decision.attempted_total,
            daily_limit=decision.daily_limit,
        )


class ValidationResponse(BaseModel):
    """Response for POST /v1/kill-switch/validate"""

    validation: DecisionSchema
    can_proceed: bool


class TransactionCreateRequest(BaseModel):
    """Request body for POST /v1/transactions"""

    user_id: str = Field(..., min_length=1, description="User identifier")
    amount: float = Field(..., gt=0, allow_inf_nan=False, description="Unsigned magnitude")
    direction: Direction
    category: Optional[str] = None
    description: str = ""
    timestamp: Optional[datetime] = None


class TransactionSchema(BaseModel):
    id: str
    user_id: str
    timestamp: datetime
    amount: float
    direction: Direction
    category: Optional[str] = None
    description: str = ""

    @classmethod
    def from_domain(cls, t: Transaction) -> "TransactionSchema":
        return cls(
            id=t.id,
            user_id=t.user_id,
            timestamp=t.timestamp,
            amount=t.amount,
            direction=t.direction,
            category=t.category,
            description=t.description,
        )


class TransactionCreateResponse(BaseModel):
    transaction: TransactionSchema
    kill_switch_warning: Optional[DecisionSchema] = None


class BlockedTransactionResponse(BaseModel):
    """403 body when the kill-switch rejects a transaction"""

    blocked: bool = True
    validation: DecisionSchema
    message: str = "Transaction blocked by financial kill-switch"


class TransactionListResponse(BaseModel):
    user_id: str
    transactions: List[TransactionSchema]
