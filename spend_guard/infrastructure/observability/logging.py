"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger

from spend_guard.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_engine_run(
    request_id: str,
    user_id: str,
    daily_allowance: int,
    risk_score: Optional[int],
    duration_ms: float,
) -> None:
    """Log structured safe-to-spend outcome for analysis"""
    logging.info(
        "Engine run completed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "engine_complete",
            "daily_allowance": daily_allowance,
            "risk_score": risk_score,
            "duration_ms": duration_ms,
        },
    )


def log_kill_switch_decision(
    request_id: str,
    user_id: str,
    level: str,
    status: str,
    amount: float,
    category: Optional[str],
) -> None:
    """Log every kill-switch verdict, including allowed ones"""
    logging.info(
        "Kill-switch decision",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "kill_switch",
            "level": level,
            "decision_outcome": status,
            "amount": amount,
            "category": category,
        },
    )
