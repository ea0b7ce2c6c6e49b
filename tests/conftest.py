"""Pytest fixtures for testing"""

import itertools
from datetime import datetime
from typing import Callable, Generator, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session

from spend_guard.api.dependencies import get_clock
from spend_guard.api.main import create_app
from spend_guard.domain.models import (
    Allowance,
    Direction,
    DriftResult,
    DriftStatus,
    EngineResult,
    ExhaustionForecast,
    FinancialConfig,
    Severity,
    Transaction,
)
from spend_guard.infrastructure.database.models import Base
from spend_guard.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Friday 15 March 2024, mid-day; 17 days left in the month including today
AS_OF = datetime(2024, 3, 15, 12, 0)


@pytest.fixture
def as_of() -> datetime:
    return AS_OF


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database and a frozen clock"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: AS_OF
    return TestClient(app)


@pytest.fixture
def make_transaction() -> Callable[..., Transaction]:
    """Factory for ledger transactions with sequential IDs"""
    counter = itertools.count(1)

    def _make(
        amount: float,
        timestamp: datetime,
        direction: Direction = Direction.EXPENSE,
        category: Optional[str] = None,
        user_id: str = "user_1",
    ) -> Transaction:
        return Transaction(
            id=f"tx_{next(counter)}",
            user_id=user_id,
            timestamp=timestamp,
            amount=amount,
            direction=direction,
            category=category,
        )

    return _make


@pytest.fixture
def income(make_transaction) -> Callable[..., Transaction]:
    def _income(amount: float, timestamp: datetime, **kwargs) -> Transaction:
        return make_transaction(amount, timestamp, direction=Direction.INCOME, category="Salary", **kwargs)

    return _income


@pytest.fixture
def expense(make_transaction) -> Callable[..., Transaction]:
    def _expense(amount: float, timestamp: datetime, category: Optional[str] = "Shopping", **kwargs) -> Transaction:
        return make_transaction(amount, timestamp, direction=Direction.EXPENSE, category=category, **kwargs)

    return _expense


@pytest.fixture
def engine_result_factory() -> Callable[..., EngineResult]:
    """Build an EngineResult directly, for policy tests that do not need a ledger"""

    def _make(
        daily_allowance: int = 500,
        today_spending: float = 0.0,
        emergency_buffer: float = 3000.0,
        current_balance: float = 20000.0,
        penalty_factor: float = 1.0,
        as_of: datetime = AS_OF,
    ) -> EngineResult:
        return EngineResult(
            user_id="user_1",
            as_of=as_of,
            current_balance=current_balance,
            avg_monthly_income=20000.0,
            income_volatility=0.0,
            active_income_months=3,
            income_coverage_ratio=2.0,
            coverage_severity=Severity.SAFE,
            drift=DriftResult(
                status=DriftStatus.IMPROVING, penalty_factor=penalty_factor, flags=[], drift_score=0
            ),
            emergency_buffer=emergency_buffer,
            upcoming_obligations=0.0,
            allowance=Allowance(
                available_pool=daily_allowance * 17,
                adjusted_pool=daily_allowance * 17,
                remaining_days=17,
                daily_allowance=daily_allowance,
                remaining_safe_to_spend=daily_allowance * 17,
            ),
            current_daily_spend=0,
            today_spending=today_spending,
            exhaustion=ExhaustionForecast(days_until_exhaustion=60, severity=Severity.SAFE),
        )

    return _make


class InMemoryLedger:
    """Ledger collaborator backed by a list"""

    def __init__(self, transactions: List[Transaction]):
        self.transactions = transactions
        self.calls = 0

    def find_transactions(self, user_id: str, start=None, end=None) -> List[Transaction]:
        self.calls += 1
        return [
            t
            for t in self.transactions
            if t.user_id == user_id
            and (start is None or t.timestamp >= start)
            and (end is None or t.timestamp <= end)
        ]


class InMemoryConfigStore:
    def __init__(self, *configs: FinancialConfig):
        self.configs = {c.user_id: c for c in configs}

    def get_financial_config(self, user_id: str) -> Optional[FinancialConfig]:
        return self.configs.get(user_id)


@pytest.fixture
def in_memory_ledger() -> Callable[[List[Transaction]], InMemoryLedger]:
    return InMemoryLedger


@pytest.fixture
def in_memory_config_store() -> Callable[..., InMemoryConfigStore]:
    return InMemoryConfigStore
