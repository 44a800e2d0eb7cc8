"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from wealthwise_portal.config import settings


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

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_campaign_created(
    request_id: str,
    client_id: str,
    campaign_id: str,
    investment: float,
    ledger_recorded: bool,
    duration_ms: float,
) -> None:
    """Log structured campaign creation outcome for analysis"""
    logging.info(
        "Campaign created",
        extra={
            "request_id": request_id,
            "client_id": client_id,
            "campaign_id": campaign_id,
            "step": "campaign_created",
            "investment": investment,
            "ledger_recorded": ledger_recorded,
            "duration_ms": duration_ms,
        },
    )


def log_login(request_id: str, method: str, success: bool, reason: str | None = None) -> None:
    """Log a login attempt without credentials or provider internals"""
    logging.info(
        "Login attempt",
        extra={
            "request_id": request_id,
            "step": "login",
            "method": method,
            "login_outcome": "success" if success else "failure",
            "reason": reason,
        },
    )
