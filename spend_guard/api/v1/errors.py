"""Translate domain failures into HTTP errors"""

import logging
from fastapi import HTTPException

from spend_guard.domain.exceptions import (
    ConfigMissingError,
    DataUnavailableError,
    DomainException,
    InvalidFinancialConfigError,
    InvalidTransactionDataError,
)
from spend_guard.infrastructure.observability.metrics import record_engine_run


def to_http_exception(error: DomainException, request_id: str) -> HTTPException:
    """Log the domain failure and build the matching HTTPException"""
    if isinstance(error, ConfigMissingError):
        record_engine_run("config_missing")
        logging.warning(f"Config missing: {error}", extra={"request_id": request_id})
        return HTTPException(status_code=404, detail="Financial config not found. Complete onboarding first.")

    if isinstance(error, DataUnavailableError):
        record_engine_run("data_unavailable")
        logging.error(f"Ledger unavailable: {error}", extra={"request_id": request_id})
        return HTTPException(status_code=503, detail="Ledger service unavailable")

    if isinstance(error, (InvalidTransactionDataError, InvalidFinancialConfigError)):
        logging.warning(f"Invalid input: {error}", extra={"request_id": request_id})
        return HTTPException(status_code=422, detail=str(error))

    logging.error(f"Unexpected domain error: {error}", extra={"request_id": request_id})
    return HTTPException(status_code=500, detail="Internal server error")
