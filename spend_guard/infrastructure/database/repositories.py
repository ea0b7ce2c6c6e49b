"""Data access layer - ledger and config store collaborators for the engine"""

from datetime import datetime
from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from spend_guard.domain.exceptions import DataUnavailableError
from spend_guard.domain.models import Direction, FinancialConfig, FixedObligation, Transaction
from spend_guard.infrastructure.database.models import (
    FinancialConfigRecord,
    FixedObligationRecord,
    TransactionRecord,
)
from spend_guard.infrastructure.observability.metrics import ledger_read_failures_counter


def to_domain_transaction(record: TransactionRecord) -> Transaction:
    return Transaction(
        id=record.id,
        user_id=record.user_id,
        timestamp=record.occurred_at,
        amount=record.amount,
        direction=Direction(record.direction),
        category=record.category,
        description=record.description or "",
    )


def to_domain_config(record: FinancialConfigRecord) -> FinancialConfig:
    return FinancialConfig(
        user_id=record.user_id,
        monthly_income=record.monthly_income,
        emergency_buffer_percent=record.emergency_buffer_percent,
        fixed_obligations=[
            FixedObligation(name=ob.name, amount=ob.amount, due_day_of_month=ob.due_day_of_month)
            for ob in record.obligations
        ],
    )


class TransactionRepository:
    """Repository for ledger transactions"""

    def __init__(self, db: Session):
        self.db = db

    def find_transactions(
        self,
        user_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Transaction]:
        """
        Fetch a user's transactions within an optional window.

        Raises:
            DataUnavailableError: On any database failure
        """
        query = self.db.query(TransactionRecord).filter(TransactionRecord.user_id == user_id)
        if start is not None:
            query = query.filter(TransactionRecord.occurred_at >= start)
        if end is not None:
            query = query.filter(TransactionRecord.occurred_at <= end)

        try:
            records = query.order_by(TransactionRecord.occurred_at).all()
        except SQLAlchemyError as e:
            ledger_read_failures_counter.inc()
            raise DataUnavailableError(f"Ledger read failed for user {user_id}") from e

        return [to_domain_transaction(r) for r in records]

    def list_recent(self, user_id: str, limit: int = 50) -> List[Transaction]:
        """Newest transactions first"""
        try:
            records = (
                self.db.query(TransactionRecord)
                .filter(TransactionRecord.user_id == user_id)
                .order_by(TransactionRecord.occurred_at.desc())
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            ledger_read_failures_counter.inc()
            raise DataUnavailableError(f"Ledger read failed for user {user_id}") from e

        return [to_domain_transaction(r) for r in records]

    def add_transaction(self, transaction: Transaction) -> TransactionRecord:
        """Append a transaction to the ledger (flushed, not committed)"""
        record = TransactionRecord(
            id=transaction.id,
            user_id=transaction.user_id,
            occurred_at=transaction.timestamp,
            amount=transaction.amount,
            direction=transaction.direction.value,
            category=transaction.category,
            description=transaction.description,
        )
        self.db.add(record)
        self.db.flush()
        return record


class FinancialConfigRepository:
    """Repository for per-user financial configuration"""

    def __init__(self, db: Session):
        self.db = db

    def get_financial_config(self, user_id: str) -> Optional[FinancialConfig]:
        try:
            record = self.db.get(FinancialConfigRecord, user_id)
        except SQLAlchemyError as e:
            ledger_read_failures_counter.inc()
            raise DataUnavailableError(f"Config read failed for user {user_id}") from e

        return to_domain_config(record) if record else None

    def save_financial_config(self, config: FinancialConfig) -> FinancialConfigRecord:
        """Create or replace the user's configuration, keeping obligation order"""
        record = self.db.get(FinancialConfigRecord, config.user_id)
        if record is None:
            record = FinancialConfigRecord(user_id=config.user_id)
            self.db.add(record)

        record.monthly_income = config.monthly_income
        record.emergency_buffer_percent = config.emergency_buffer_percent
        record.obligations = [
            FixedObligationRecord(
                position=i,
                name=ob.name,
                amount=ob.amount,
                due_day_of_month=ob.due_day_of_month,
            )
            for i, ob in enumerate(config.fixed_obligations)
        ]
        self.db.flush()
        return record
