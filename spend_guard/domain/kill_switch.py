"""Kill-switch policy - tiered control over discretionary spending"""

import math

from spend_guard.domain.categories import DISCRETIONARY_BLOCKLIST, is_essential
from spend_guard.domain.models import (
    CandidateTransaction,
    DecisionSeverity,
    DecisionStatus,
    Direction,
    EngineResult,
    KillSwitchDecision,
    KillSwitchLevel,
    KillSwitchStatus,
    RecoveryAction,
    RecoveryPlan,
    RecoveryScenario,
)
from spend_guard.utils.rounding import round_half_up

RED_THRESHOLD = 75
ORANGE_THRESHOLD = 50
YELLOW_THRESHOLD = 25

REDUCED_SPEND_RATIO = 0.7
INCOME_TOP_UP_RATIO = 0.5


def get_kill_switch_level(risk_score: float) -> KillSwitchLevel:
    """
    Map risk score to control level (closed-open bands, no hysteresis).

    - [75, 100]: RED
    - [50, 75):  ORANGE
    - [25, 50):  YELLOW
    - [0, 25):   GREEN
    """
    if risk_score >= RED_THRESHOLD:
        return KillSwitchLevel.RED
    elif risk_score >= ORANGE_THRESHOLD:
        return KillSwitchLevel.ORANGE
    elif risk_score >= YELLOW_THRESHOLD:
        return KillSwitchLevel.YELLOW
    else:
        return KillSwitchLevel.GREEN


def kill_switch_status(risk_score: float) -> KillSwitchStatus:
    level = get_kill_switch_level(risk_score)
    blocked = (
        list(DISCRETIONARY_BLOCKLIST)
        if level in (KillSwitchLevel.ORANGE, KillSwitchLevel.RED)
        else []
    )
    return KillSwitchStatus(level=level, active=level != KillSwitchLevel.GREEN, blocked_categories=blocked)


def simulate_recovery(engine_result: EngineResult, risk_score: float) -> RecoveryPlan:
    """
    Three ways back below the RED threshold, always in the same order.

    1. Reduce daily spend to 70% of the allowance
    2. Pause all non-essential spending (the recommendation)
    3. Add income worth half the emergency buffer
    """
    target_daily_spend = engine_result.daily_allowance * REDUCED_SPEND_RATIO
    reduce_days = math.ceil(15 - (RED_THRESHOLD - risk_score) / 5)
    pause_days = math.ceil(10 - (RED_THRESHOLD - risk_score) / 10)
    income_needed = round_half_up(engine_result.emergency_buffer * INCOME_TOP_UP_RATIO)

    scenarios = [
        RecoveryScenario(
            action=RecoveryAction.REDUCE_SPENDING,
            description=f"Reduce daily spending to {round_half_up(target_daily_spend)}",
            impact=f"Unlock in {reduce_days} days",
            days_required=reduce_days,
            target_daily_spend=target_daily_spend,
        ),
        RecoveryScenario(
            action=RecoveryAction.PAUSE_DISCRETIONARY,
            description="Pause all non-essential spending",
            impact=f"Unlock in {pause_days} days",
            days_required=pause_days,
        ),
        RecoveryScenario(
            action=RecoveryAction.ADD_INCOME,
            description=f"Add income of {income_needed}",
            impact="Unlock immediately",
            amount_required=income_needed,
        ),
    ]
    return RecoveryPlan(scenarios=scenarios, recommendation=scenarios[1])


def validate_transaction(
    candidate: CandidateTransaction,
    engine_result: EngineResult,
    risk_score: float,
) -> KillSwitchDecision:
    """
    Decide whether a candidate transaction may proceed.

    Income and essential categories are never blocked. Otherwise:
    - GREEN: allowed
    - YELLOW: allowed with a warning
    - ORANGE: blocked if today's spend plus this amount exceeds the daily allowance
    - RED: blocked
    """
    level = get_kill_switch_level(risk_score)

    if candidate.direction == Direction.INCOME:
        return KillSwitchDecision(
            allowed=True,
            status=DecisionStatus.ALLOWED,
            level=level,
            reason="Income transactions are always allowed",
        )

    if is_essential(candidate.category):
        return KillSwitchDecision(
            allowed=True,
            status=DecisionStatus.ALLOWED,
            level=level,
            reason="Essential expenses are never blocked",
        )

    if level == KillSwitchLevel.GREEN:
        return KillSwitchDecision(
            allowed=True,
            status=DecisionStatus.ALLOWED,
            level=level,
            reason="Financial health is good",
        )

    if level == KillSwitchLevel.YELLOW:
        return KillSwitchDecision(
            allowed=True,
            status=DecisionStatus.WARNING,
            level=level,
            reason="Spending velocity is elevated. Consider reducing non-essential expenses.",
            severity=DecisionSeverity.MEDIUM,
        )

    if level == KillSwitchLevel.ORANGE:
        projected_total = engine_result.today_spending + candidate.amount
        if projected_total > engine_result.daily_allowance:
            return KillSwitchDecision(
                allowed=False,
                status=DecisionStatus.BLOCKED,
                level=level,
                reason=f"Daily spending limit ({engine_result.daily_allowance}) would be exceeded",
                severity=DecisionSeverity.HIGH,
                recovery=simulate_recovery(engine_result, risk_score),
                current_daily_spend=engine_result.today_spending,
                attempted_total=projected_total,
                daily_limit=engine_result.daily_allowance,
            )
        return KillSwitchDecision(
            allowed=True,
            status=DecisionStatus.WARNING,
            level=level,
            reason="Spending is high but within daily limit. Proceed with caution.",
            severity=DecisionSeverity.MEDIUM,
        )

    return KillSwitchDecision(
        allowed=False,
        status=DecisionStatus.BLOCKED,
        level=level,
        reason="Critical financial risk detected. Non-essential spending is blocked.",
        severity=DecisionSeverity.CRITICAL,
        recovery=simulate_recovery(engine_result, risk_score),
    )
