"""/v1/kill-switch - financial control status, validation and recovery"""

import time
from datetime import datetime
from fastapi import APIRouter, Depends, Query, Request

from spend_guard.api.dependencies import get_clock, get_engine, get_request_id
from spend_guard.api.v1.errors import to_http_exception
from spend_guard.api.v1.schemas import (
    CandidateRequest,
    DecisionSchema,
    KillSwitchStatusResponse,
    KillSwitchStatusSchema,
    RecoveryPlanSchema,
    RecoveryResponse,
    RiskSchema,
    SafeToSpendResponse,
    ValidationResponse,
)
from spend_guard.domain.engine import FinancialEngine
from spend_guard.domain.exceptions import DomainException
from spend_guard.domain.models import CandidateTransaction
from spend_guard.infrastructure.observability.logging import log_engine_run, log_kill_switch_decision
from spend_guard.infrastructure.observability.metrics import record_engine_run, record_kill_switch_decision

router = APIRouter(prefix="/kill-switch")


@router.get("/status", response_model=KillSwitchStatusResponse)
def get_status(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    engine: FinancialEngine = Depends(get_engine),
    now: datetime = Depends(get_clock),
):
    """
    Current financial control status.

    Flow:
    1. Safe-to-spend
    2. Risk score against that result
    3. Kill-switch level, blocked categories and health score
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        result = engine.compute_safe_to_spend(user_id, now)
        assessment = engine.compute_risk_score(user_id, result)
        health_score = engine.health_score(user_id, result, assessment.risk_score)
    except DomainException as e:
        raise to_http_exception(e, request_id)

    status = engine.status(assessment.risk_score)

    duration_ms = (time.time() - start_time) * 1000
    record_engine_run("ok", assessment.risk_score)
    log_engine_run(request_id, user_id, result.daily_allowance, assessment.risk_score, duration_ms)

    return KillSwitchStatusResponse(
        safe_to_spend=SafeToSpendResponse.from_domain(result),
        risk=RiskSchema.from_domain(assessment),
        kill_switch=KillSwitchStatusSchema(
            level=status.level,
            active=status.active,
            blocked_categories=status.blocked_categories,
        ),
        health_score=health_score,
    )


@router.post("/validate", response_model=ValidationResponse)
def validate(
    request_body: CandidateRequest,
    request: Request,
    engine: FinancialEngine = Depends(get_engine),
    now: datetime = Depends(get_clock),
):
    """Dry-run a candidate transaction through the kill-switch without recording it"""
    request_id = get_request_id(request)

    try:
        candidate = CandidateTransaction(
            amount=request_body.amount,
            direction=request_body.direction,
            category=request_body.category,
            description=request_body.description,
        )
        result = engine.compute_safe_to_spend(request_body.user_id, now)
        assessment = engine.compute_risk_score(request_body.user_id, result)
        decision = engine.validate_transaction(request_body.user_id, candidate, result, assessment.risk_score)
    except DomainException as e:
        raise to_http_exception(e, request_id)

    record_kill_switch_decision(decision.level.value, decision.status.value)
    log_kill_switch_decision(
        request_id,
        request_body.user_id,
        decision.level.value,
        decision.status.value,
        candidate.amount,
        candidate.category,
    )

    return ValidationResponse(validation=DecisionSchema.from_domain(decision), can_proceed=decision.allowed)


@router.post("/simulate-recovery", response_model=RecoveryResponse)
def simulate_recovery(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    engine: FinancialEngine = Depends(get_engine),
    now: datetime = Depends(get_clock),
):
    """Recovery scenarios for the user's current risk score"""
    try:
        result = engine.compute_safe_to_spend(user_id, now)
        assessment = engine.compute_risk_score(user_id, result)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))

    plan = engine.simulate_recovery(result, assessment.risk_score)
    return RecoveryResponse(
        recovery=RecoveryPlanSchema.from_domain(plan),
        current_risk=assessment.risk_score,
        kill_switch_level=engine.get_kill_switch_level(assessment.risk_score),
    )
