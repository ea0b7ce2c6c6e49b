"""Domain models - pure Python dataclasses representing business entities"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from spend_guard.domain.exceptions import InvalidFinancialConfigError, InvalidTransactionDataError

if TYPE_CHECKING:
    from spend_guard.domain.ledger import LedgerView


class Direction(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class Classification(str, Enum):
    INCOME = "Income"
    ESSENTIAL = "Essential"
    NON_ESSENTIAL = "Non-Essential"


class Severity(str, Enum):
    """Severity attached to engine alerts and forecasts"""

    SAFE = "SAFE"
    CAUTION = "CAUTION"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"


class DriftStatus(str, Enum):
    IMPROVING = "IMPROVING"
    STABLE = "STABLE"
    DETERIORATING = "DETERIORATING"


class KillSwitchLevel(str, Enum):
    GREEN = "GREEN"
    YELLOW = "YELLOW"
    ORANGE = "ORANGE"
    RED = "RED"


class DecisionStatus(str, Enum):
    ALLOWED = "ALLOWED"
    WARNING = "WARNING"
    BLOCKED = "BLOCKED"


class DecisionSeverity(str, Enum):
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class RecoveryAction(str, Enum):
    REDUCE_SPENDING = "REDUCE_SPENDING"
    PAUSE_DISCRETIONARY = "PAUSE_DISCRETIONARY"
    ADD_INCOME = "ADD_INCOME"


@dataclass(frozen=True)
class Transaction:
    """Ledger entry. Amount is always the unsigned magnitude; direction carries the sign."""

    id: str
    user_id: str
    timestamp: datetime
    amount: float
    direction: Direction
    category: Optional[str] = None
    description: str = ""

    def __post_init__(self) -> None:
        if not math.isfinite(self.amount) or self.amount < 0:
            raise InvalidTransactionDataError(
                f"Transaction {self.id} has invalid amount {self.amount}; expected a finite unsigned magnitude"
            )

    @property
    def day(self) -> date:
        return self.timestamp.date()


@dataclass(frozen=True)
class CandidateTransaction:
    """Transaction attempt submitted for kill-switch validation"""

    amount: float
    direction: Direction
    category: Optional[str] = None
    description: str = ""

    def __post_init__(self) -> None:
        if not (math.isfinite(self.amount) and self.amount > 0):
            raise InvalidTransactionDataError(f"Candidate amount {self.amount} must be a finite positive magnitude")


@dataclass
class FixedObligation:
    """Declared recurring monthly payment (rent, EMI, insurance...)"""

    name: str
    amount: float
    due_day_of_month: int = 1


@dataclass
class FinancialConfig:
    """
    Per-user financial configuration captured at onboarding.

    Validated once on construction; components trust it afterwards.
    """

    user_id: str
    monthly_income: float
    fixed_obligations: List[FixedObligation] = field(default_factory=list)
    emergency_buffer_percent: float = 15.0

    def __post_init__(self) -> None:
        if not math.isfinite(self.monthly_income) or self.monthly_income < 0:
            raise InvalidFinancialConfigError("monthly_income must be finite and non-negative")
        if not 0 <= self.emergency_buffer_percent <= 100:
            raise InvalidFinancialConfigError("emergency_buffer_percent must be within [0, 100]")
        for obligation in self.fixed_obligations:
            if not math.isfinite(obligation.amount) or obligation.amount < 0:
                raise InvalidFinancialConfigError(f"Obligation '{obligation.name}' has invalid amount {obligation.amount}")
            if not 1 <= obligation.due_day_of_month <= 31:
                raise InvalidFinancialConfigError(
                    f"Obligation '{obligation.name}' due day {obligation.due_day_of_month} outside [1, 31]"
                )


@dataclass
class MonthlyAggregate:
    """Per-calendar-month totals"""

    income: float = 0.0
    total_expense: float = 0.0
    non_essential_expense: float = 0.0
    transaction_count: int = 0


@dataclass
class IncomeStats:
    avg_monthly_income: float
    volatility: float
    active_months: int
    severity: Optional[Severity] = None
    alert: Optional[str] = None


@dataclass
class CoverageResult:
    ratio: float
    severity: Severity
    alert: Optional[str] = None


@dataclass
class DriftResult:
    status: DriftStatus
    penalty_factor: float
    flags: List[str]
    drift_score: int


@dataclass
class Allowance:
    """Time-aware spendable pool split over the rest of the month"""

    available_pool: float
    adjusted_pool: float
    remaining_days: int
    daily_allowance: int
    remaining_safe_to_spend: int


@dataclass
class ExhaustionForecast:
    """
    Projection of when the spendable amount runs out.

    days_until_exhaustion is math.inf when there is no recent spending.
    """

    days_until_exhaustion: float
    severity: Severity
    exhaustion_date: Optional[date] = None
    avg_daily_spending: float = 0.0
    required_daily_reduction: int = 0
    alert: Optional[str] = None


@dataclass
class Alert:
    severity: Severity
    message: str


@dataclass
class EngineResult:
    """Full safe-to-spend computation for one user at one instant"""

    user_id: str
    as_of: datetime
    current_balance: float
    avg_monthly_income: float
    income_volatility: float
    active_income_months: int
    income_coverage_ratio: float
    coverage_severity: Severity
    drift: DriftResult
    emergency_buffer: float
    upcoming_obligations: float
    allowance: Allowance
    current_daily_spend: int
    today_spending: float
    exhaustion: ExhaustionForecast
    breach_flags: List[str] = field(default_factory=list)
    alerts: List[Alert] = field(default_factory=list)
    advice: List[str] = field(default_factory=list)
    # ledger the figures were computed from; risk and health scoring reuse it
    snapshot: Optional["LedgerView"] = field(default=None, repr=False, compare=False)

    @property
    def daily_allowance(self) -> int:
        return self.allowance.daily_allowance

    @property
    def remaining_safe_to_spend(self) -> int:
        return self.allowance.remaining_safe_to_spend

    @property
    def penalty_factor(self) -> float:
        return self.drift.penalty_factor

    @property
    def days_until_exhaustion(self) -> float:
        return self.exhaustion.days_until_exhaustion


@dataclass
class RiskSignals:
    """Raw counts behind the risk score"""

    velocity_breaches: int = 0
    category_warnings: int = 0
    buffer_breaches: int = 0
    trend_penalty: float = 0.0
    repeated_overspending: int = 0


@dataclass
class RiskAssessment:
    risk_score: int
    signals: RiskSignals
    explanation: List[str]


@dataclass
class RecoveryScenario:
    action: RecoveryAction
    description: str
    impact: str
    days_required: Optional[int] = None
    target_daily_spend: Optional[float] = None
    amount_required: Optional[int] = None


@dataclass
class RecoveryPlan:
    scenarios: List[RecoveryScenario]
    recommendation: RecoveryScenario


@dataclass
class KillSwitchDecision:
    """Outcome of validating a candidate transaction. Never persisted."""

    allowed: bool
    status: DecisionStatus
    level: KillSwitchLevel
    reason: str
    severity: Optional[DecisionSeverity] = None
    recovery: Optional[RecoveryPlan] = None
    current_daily_spend: Optional[float] = None
    attempted_total: Optional[float] = None
    daily_limit: Optional[float] = None


@dataclass
class KillSwitchStatus:
    level: KillSwitchLevel
    active: bool
    blocked_categories: List[str]
