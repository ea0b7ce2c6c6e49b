"""GET /v1/safe-to-spend - primary allowance endpoint"""

import time
from datetime import datetime
from fastapi import APIRouter, Depends, Query, Request

from spend_guard.api.dependencies import get_clock, get_engine, get_request_id
from spend_guard.api.v1.errors import to_http_exception
from spend_guard.api.v1.schemas import SafeToSpendResponse
from spend_guard.domain.engine import FinancialEngine
from spend_guard.domain.exceptions import DomainException
from spend_guard.infrastructure.observability.logging import log_engine_run
from spend_guard.infrastructure.observability.metrics import record_engine_run

router = APIRouter()


@router.get("/safe-to-spend", response_model=SafeToSpendResponse)
def get_safe_to_spend(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    engine: FinancialEngine = Depends(get_engine),
    now: datetime = Depends(get_clock),
):
    """
    Compute the user's safe-to-spend allowance as of now.

    Returns remaining and daily allowance, exhaustion forecast, income
    coverage, drift penalty, alerts and advice.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        result = engine.compute_safe_to_spend(user_id, now)
    except DomainException as e:
        raise to_http_exception(e, request_id)

    duration_ms = (time.time() - start_time) * 1000
    record_engine_run("ok")
    log_engine_run(request_id, user_id, result.daily_allowance, None, duration_ms)

    return SafeToSpendResponse.from_domain(result)
