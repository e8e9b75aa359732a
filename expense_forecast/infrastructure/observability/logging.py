"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from expense_forecast.config import settings
from expense_forecast.domain.models import Forecast


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


def log_forecast(
    forecast: Forecast,
    cached: bool,
    transaction_count: int,
    duration_ms: float,
) -> None:
    """Log structured forecast outcome for analysis"""
    logging.getLogger("expense_forecast.forecast").info(
        "Forecast completed",
        extra={
            "step": "forecast_complete",
            "period": forecast.period.value,
            "source": forecast.source.value,
            "cached": cached,
            "confidence": forecast.confidence,
            "transaction_count": transaction_count,
            "duration_ms": duration_ms,
        },
    )
