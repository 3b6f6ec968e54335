"""
Structured logging setup using structlog with data masking for identity evidence.
"""

import logging
import re
import sys
from typing import Any, Dict, Union

import structlog
from rich.console import Console
from rich.logging import RichHandler

from app.core.config import settings


def setup_logging() -> None:
    """Configure structured logging for the application."""

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.LOG_LEVEL),
    )

    # Configure structlog processors
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        mask_processor,
        structlog.processors.StackInfoRenderer(),
    ]

    if settings.LOG_FORMAT == "json":
        processors.extend(
            [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
        )
    else:
        processors.extend([structlog.dev.ConsoleRenderer(colors=True)])

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.LOG_LEVEL)
        ),
        logger_factory=structlog.WriteLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if settings.ENVIRONMENT == "development" and settings.LOG_FORMAT == "text":
        console = Console()
        rich_handler = RichHandler(
            console=console,
            show_time=True,
            show_path=True,
            markup=True,
            rich_tracebacks=True,
        )

        # Replace the root logger handler
        root_logger = logging.getLogger()
        root_logger.handlers.clear()
        root_logger.addHandler(rich_handler)


# Sensitive data patterns for masking free text
SENSITIVE_PATTERNS = {
    "email": re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Z|a-z]{2,}\b"),
    "phone": re.compile(r"(?<![\w-])\+?\(?\d{3}\)?[\s\-]?\d{3}[\s\-]?\d{4}(?![\w-])"),
    "ssn": re.compile(r"\b\d{3}-\d{2}-\d{4}\b"),
    "credit_card": re.compile(r"\b\d{4}[\s\-]\d{4}[\s\-]\d{4}[\s\-]\d{4}\b"),
}

# Field names whose values are evidence or personal data
SENSITIVE_FIELDS = {
    "password",
    "token",
    "secret",
    "front_photo",
    "back_photo",
    "image",
    "identification_number",
    "id_number",
    "license_number",
    "birthdate",
    "date_of_birth",
    "ssn",
}


def mask_sensitive_data(data: Union[str, Dict, Any]) -> Union[str, Dict, Any]:
    """Mask sensitive data in logs."""
    if isinstance(data, str):
        return _mask_string(data)
    elif isinstance(data, dict):
        return _mask_dict(data)
    elif isinstance(data, (list, tuple)):
        return [mask_sensitive_data(item) for item in data]
    else:
        return data


def _mask_string(text: str) -> str:
    """Mask sensitive patterns in a string."""
    masked_text = text

    masked_text = SENSITIVE_PATTERNS["email"].sub(
        lambda m: f"{m.group()[:2]}***@{m.group().split('@')[1]}", masked_text
    )
    masked_text = SENSITIVE_PATTERNS["phone"].sub("***-***-****", masked_text)
    masked_text = SENSITIVE_PATTERNS["ssn"].sub("***-**-****", masked_text)
    masked_text = SENSITIVE_PATTERNS["credit_card"].sub(
        "****-****-****-****", masked_text
    )

    return masked_text


def _mask_dict(data: Dict[str, Any]) -> Dict[str, Any]:
    """Mask sensitive fields in a dictionary."""
    masked_data = {}

    for key, value in data.items():
        key_lower = str(key).lower()

        if any(sensitive_field in key_lower for sensitive_field in SENSITIVE_FIELDS):
            masked_data[key] = _mask_value(value)
        else:
            masked_data[key] = mask_sensitive_data(value)

    return masked_data


def _mask_value(value: Any) -> str:
    """Mask a single sensitive value, keeping its edges for debugging."""
    if isinstance(value, str) and value:
        if len(value) <= 4:
            return "***"
        return f"{value[:2]}***{value[-2:]}"
    return "***"


def mask_processor(logger, method_name, event_dict):
    """Structlog processor to mask sensitive data."""
    if "event" in event_dict:
        event_dict["event"] = mask_sensitive_data(event_dict["event"])

    for key, value in list(event_dict.items()):
        if key == "event":
            continue
        if any(sensitive_field in key.lower() for sensitive_field in SENSITIVE_FIELDS):
            event_dict[key] = _mask_value(value)
        else:
            event_dict[key] = mask_sensitive_data(value)

    return event_dict


def get_logger(name: str = None) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def log_business_event(
    event_type: str,
    entity_type: str,
    entity_id: str,
    details: Dict[str, Any] = None,
    **kwargs: Any,
) -> None:
    """Log business logic events for audit trail."""
    logger = get_logger("business")

    log_data = {
        "event_type": event_type,
        "entity_type": entity_type,
        "entity_id": entity_id,
        **kwargs,
    }

    if details:
        log_data["details"] = details

    logger.info("Business event occurred", **log_data)
