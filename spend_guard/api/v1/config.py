"""PUT/GET /v1/config/{user_id} - onboarding financial configuration"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from spend_guard.api.dependencies import get_request_id
from spend_guard.api.v1.errors import to_http_exception
from spend_guard.api.v1.schemas import FinancialConfigRequest, FinancialConfigResponse, FixedObligationSchema
from spend_guard.domain.exceptions import DomainException
from spend_guard.domain.models import FinancialConfig, FixedObligation
from spend_guard.infrastructure.database.repositories import FinancialConfigRepository
from spend_guard.infrastructure.database.session import get_db

router = APIRouter()


def _to_response(config: FinancialConfig) -> FinancialConfigResponse:
    return FinancialConfigResponse(
        user_id=config.user_id,
        monthly_income=config.monthly_income,
        emergency_buffer_percent=config.emergency_buffer_percent,
        fixed_obligations=[
            FixedObligationSchema(name=ob.name, amount=ob.amount, due_day_of_month=ob.due_day_of_month)
            for ob in config.fixed_obligations
        ],
    )


@router.put("/config/{user_id}", response_model=FinancialConfigResponse)
def put_config(
    user_id: str,
    request_body: FinancialConfigRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """Create or replace a user's financial configuration (onboarding)"""
    request_id = get_request_id(request)
    try:
        config = FinancialConfig(
            user_id=user_id,
            monthly_income=request_body.monthly_income,
            emergency_buffer_percent=request_body.emergency_buffer_percent,
            fixed_obligations=[
                FixedObligation(name=ob.name, amount=ob.amount, due_day_of_month=ob.due_day_of_month)
                for ob in request_body.fixed_obligations
            ],
        )
        FinancialConfigRepository(db).save_financial_config(config)
        db.commit()
    except DomainException as e:
        db.rollback()
        raise to_http_exception(e, request_id)

    logging.info("Financial config saved", extra={"request_id": request_id, "user_id": user_id})
    return _to_response(config)


@router.get("/config/{user_id}", response_model=FinancialConfigResponse)
def get_config(user_id: str, request: Request, db: Session = Depends(get_db)):
    try:
        config = FinancialConfigRepository(db).get_financial_config(user_id)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))

    if config is None:
        raise HTTPException(status_code=404, detail="Financial config not found. Complete onboarding first.")
    return _to_response(config)
