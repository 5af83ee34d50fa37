"""
Logging setup for the calculator API.

JSON lines in production, readable text locally. Both formats carry the
structured `extra_fields` attached by the request middleware and the error
handlers (path, status, rejected input field, error code).
"""
import logging
import sys
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from core.config import settings

SERVICE_NAME = "environmental-calculator"

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    fields = getattr(record, "extra_fields", None) or {}
    return {key: value for key, value in fields.items() if value is not None}


class JSONFormatter(logging.Formatter):
    """One JSON object per record, tagged with service and environment."""

    def __init__(self, service: str = SERVICE_NAME, environment: Optional[str] = None):
        super().__init__()
        self.service = service
        self.environment = environment

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "service": self.service,
            "logger": record.name,
            "message": record.getMessage(),
            "line": record.lineno,
        }
        if self.environment:
            log_data["environment"] = self.environment

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data.update(_extra_fields(record))
        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Plain text with extra fields appended as key=value."""

    def __init__(self):
        super().__init__(TEXT_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = _extra_fields(record)
        if fields:
            line += " | " + " ".join(f"{key}={value}" for key, value in fields.items())
        return line


def rejected_input_fields(path: str, error_code: Optional[str], field: Optional[str]) -> Dict[str, Any]:
    """extra_fields for a calculator request rejected with a 4xx."""
    return {"path": path, "error_code": error_code, "field": field}


def setup_logging():
    """
    Configure the root logger from settings.

    LOG_FORMAT=json (or ENVIRONMENT=production) selects JSONFormatter.
    """
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    if settings.LOG_FORMAT == "json" or settings.ENVIRONMENT == "production":
        formatter: logging.Formatter = JSONFormatter(environment=settings.ENVIRONMENT)
    else:
        formatter = TextFormatter()

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Redis connection chatter only matters when rate limiting breaks
    logging.getLogger("redis").setLevel(logging.WARNING)

    return root_logger
