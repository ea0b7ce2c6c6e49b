"""/v1/transactions - ledger append with kill-switch enforcement"""

import logging
import uuid
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from spend_guard.api.dependencies import get_clock, get_engine, get_request_id
from spend_guard.api.v1.errors import to_http_exception
from spend_guard.api.v1.schemas import (
    BlockedTransactionResponse,
    DecisionSchema,
    TransactionCreateRequest,
    TransactionCreateResponse,
    TransactionListResponse,
    TransactionSchema,
)
from spend_guard.config import settings
from spend_guard.domain.engine import FinancialEngine
from spend_guard.domain.exceptions import DomainException, InvalidTransactionDataError
from spend_guard.domain.models import CandidateTransaction, DecisionStatus, Direction, KillSwitchDecision, Transaction
from spend_guard.infrastructure.database.repositories import TransactionRepository
from spend_guard.infrastructure.database.session import get_db
from spend_guard.infrastructure.observability.logging import log_kill_switch_decision
from spend_guard.infrastructure.observability.metrics import (
    kill_switch_fail_open_counter,
    record_kill_switch_decision,
)

router = APIRouter()


def _naive(moment: Optional[datetime]) -> Optional[datetime]:
    """Ledger timestamps are stored as naive local time"""
    if moment is None or moment.tzinfo is None:
        return moment
    return moment.astimezone().replace(tzinfo=None)


def _enforce_kill_switch(
    engine: FinancialEngine,
    user_id: str,
    candidate: CandidateTransaction,
    now: datetime,
    request_id: str,
) -> Optional[KillSwitchDecision]:
    """
    Run the kill-switch for an expense.

    Returns None when the engine failed and fail-open is enabled.
    """
    try:
        result = engine.compute_safe_to_spend(user_id, now)
        assessment = engine.compute_risk_score(user_id, result)
        return engine.validate_transaction(user_id, candidate, result, assessment.risk_score)
    except Exception as e:
        if not settings.kill_switch_fail_open:
            raise
        kill_switch_fail_open_counter.inc()
        logging.warning(
            f"Kill-switch validation failed, proceeding with transaction: {e}",
            extra={"request_id": request_id, "user_id": user_id},
        )
        return None


@router.post("/transactions", response_model=TransactionCreateResponse)
def create_transaction(
    request_body: TransactionCreateRequest,
    request: Request,
    db: Session = Depends(get_db),
    engine: FinancialEngine = Depends(get_engine),
    now: datetime = Depends(get_clock),
):
    """
    Record a transaction.

    Expenses pass through the kill-switch first: blocked attempts return 403
    with the decision and recovery scenarios; warnings are attached to the
    response. Income is never checked.

    Timestamps may be back-dated but not later than now. The kill-switch always
    evaluates today's allowance, whatever day the expense is dated.
    """
    request_id = get_request_id(request)
    user_id = request_body.user_id
    warning = None

    try:
        candidate = CandidateTransaction(
            amount=request_body.amount,
            direction=request_body.direction,
            category=request_body.category,
            description=request_body.description,
        )
        timestamp = _naive(request_body.timestamp) or now
        if timestamp > now:
            raise InvalidTransactionDataError(f"Transaction timestamp {timestamp.isoformat()} is in the future")

        if candidate.direction == Direction.EXPENSE:
            decision = _enforce_kill_switch(engine, user_id, candidate, now, request_id)
            if decision is not None:
                record_kill_switch_decision(decision.level.value, decision.status.value)
                log_kill_switch_decision(
                    request_id, user_id, decision.level.value, decision.status.value,
                    candidate.amount, candidate.category,
                )
                if not decision.allowed:
                    body = BlockedTransactionResponse(validation=DecisionSchema.from_domain(decision))
                    return JSONResponse(status_code=403, content=body.model_dump(mode="json"))
                if decision.status == DecisionStatus.WARNING:
                    warning = DecisionSchema.from_domain(decision)

        transaction = Transaction(
            id=str(uuid.uuid4()),
            user_id=user_id,
            timestamp=timestamp,
            amount=candidate.amount,
            direction=candidate.direction,
            category=candidate.category,
            description=candidate.description,
        )
        TransactionRepository(db).add_transaction(transaction)
        db.commit()

    except DomainException as e:
        db.rollback()
        raise to_http_exception(e, request_id)

    return TransactionCreateResponse(
        transaction=TransactionSchema.from_domain(transaction),
        kill_switch_warning=warning,
    )


@router.get("/transactions", response_model=TransactionListResponse)
def list_transactions(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    db: Session = Depends(get_db),
):
    """Most recent transactions, newest first"""
    try:
        transactions = TransactionRepository(db).list_recent(user_id, limit=settings.transaction_history_limit)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))

    return TransactionListResponse(
        user_id=user_id,
        transactions=[TransactionSchema.from_domain(t) for t in transactions],
    )
