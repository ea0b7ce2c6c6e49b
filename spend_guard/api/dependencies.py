"""Dependency injection for FastAPI endpoints"""

from datetime import datetime

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from spend_guard.domain.engine import FinancialEngine
from spend_guard.infrastructure.database.repositories import FinancialConfigRepository, TransactionRepository
from spend_guard.infrastructure.database.session import get_db


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_clock() -> datetime:
    """Current instant for the request; override in tests for deterministic results"""
    return datetime.now()


def get_engine(db: Session = Depends(get_db)) -> FinancialEngine:
    """Provide an engine bound to the request's database session"""
    return FinancialEngine(TransactionRepository(db), FinancialConfigRepository(db))
