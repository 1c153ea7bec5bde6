"""
Structured logging configuration

JSON lines in deployed environments, plain text locally. Every handler passes
records through SecretRedactingFilter first: this service logs Stripe errors
and webhook headers, and neither API keys nor signatures may reach log storage.
"""
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from core.config import settings

REDACTED = "[REDACTED]"

SECRET_PATTERNS = (
    re.compile(r"\b(?:sk|rk)_(?:live|test)_[A-Za-z0-9]+"),  # secret and restricted API keys
    re.compile(r"\bwhsec_[A-Za-z0-9_]+"),  # webhook signing secrets
    re.compile(r"(?<=v1=)[0-9a-f]{16,}"),  # Stripe-Signature digests
)

# LogRecord attributes that are never treated as extras
RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}

# Chatty libraries and the level they are held at
QUIET_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "stripe": logging.WARNING,
    "urllib3": logging.WARNING,
}


def redact(text: str) -> str:
    for pattern in SECRET_PATTERNS:
        text = pattern.sub(REDACTED, text)
    return text


class SecretRedactingFilter(logging.Filter):
    """Masks credentials in the rendered message and in string extras"""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        cleaned = redact(message)
        if cleaned != message:
            record.msg = cleaned
            record.args = ()

        for key, value in list(record.__dict__.items()):
            if key not in RESERVED_ATTRS and isinstance(value, str):
                setattr(record, key, redact(value))
        return True


class StorefrontJsonFormatter(jsonlogger.JsonFormatter):
    """One JSON object per record, stamped with service identity"""

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        # Time of the event, not of formatting
        log_record["timestamp"] = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        log_record["app"] = settings.app_name
        log_record["version"] = settings.app_version
        log_record["environment"] = settings.environment
        log_record["level"] = record.levelname
        log_record["logger"] = record.name

        if record.exc_info and "exception" not in log_record:
            log_record["exception"] = self.formatException(record.exc_info)


def build_handler(fmt: str) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if fmt == "json":
        handler.setFormatter(StorefrontJsonFormatter("%(level)s %(name)s %(message)s"))
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
        )
    handler.addFilter(SecretRedactingFilter())
    return handler


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Replace root handlers with one stdout handler; defaults come from settings"""
    root_logger = logging.getLogger()
    root_logger.setLevel((level or settings.log_level).upper())

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.addHandler(build_handler(fmt or settings.log_format))

    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if settings.database_echo else logging.WARNING)


class LoggerAdapter(logging.LoggerAdapter):
    """Carries bound context (store, order, event ids) into every record"""

    def __init__(self, logger: logging.Logger, extra: Optional[Dict[str, Any]] = None):
        super().__init__(logger, extra or {})

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        # Per-call extras win over bound context
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs

    def with_context(self, **context) -> "LoggerAdapter":
        """Create a new logger with additional context"""
        return LoggerAdapter(self.logger, {**self.extra, **context})


def get_logger(name: str, **context) -> LoggerAdapter:
    """
    Get a logger instance with optional context

    Example:
        logger = get_logger(__name__, component="webhooks")
        logger.with_context(order_id=order.id).info("Order marked paid")
    """
    return LoggerAdapter(logging.getLogger(name), context)


setup_logging()
