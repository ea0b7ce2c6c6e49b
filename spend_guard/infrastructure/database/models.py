"""SQLAlchemy ORM models for the ledger and financial configuration"""

import uuid
from sqlalchemy import Column, String, Float, DateTime, Integer, ForeignKey, Text
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


def _uuid_str() -> str:
    return str(uuid.uuid4())


class TransactionRecord(Base):
    """Ledger entry; amount is an unsigned magnitude, direction carries the sign"""

    __tablename__ = "transaction_record"

    id = Column(String(36), primary_key=True, default=_uuid_str)
    user_id = Column(Text, nullable=False, index=True)
    occurred_at = Column(DateTime, nullable=False, index=True)
    amount = Column(Float, nullable=False)
    direction = Column(String(16), nullable=False)  # INCOME | EXPENSE
    category = Column(Text, nullable=True)
    description = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class FinancialConfigRecord(Base):
    """One financial configuration per user, captured at onboarding"""

    __tablename__ = "financial_config"

    user_id = Column(Text, primary_key=True)
    monthly_income = Column(Float, nullable=False)
    emergency_buffer_percent = Column(Float, nullable=False, default=15.0)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    obligations = relationship(
        "FixedObligationRecord",
        back_populates="config",
        cascade="all, delete-orphan",
        order_by="FixedObligationRecord.position",
    )


class FixedObligationRecord(Base):
    """Declared recurring payment belonging to a financial configuration"""

    __tablename__ = "fixed_obligation"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Text, ForeignKey("financial_config.user_id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    name = Column(Text, nullable=False)
    amount = Column(Float, nullable=False)
    due_day_of_month = Column(Integer, nullable=False, default=1)

    config = relationship("FinancialConfigRecord", back_populates="obligations")
