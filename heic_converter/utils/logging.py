import logging
import re
import sys
import uuid
from typing import Any, Dict, Optional

import structlog

# Log events never carry user file names, paths or image bytes
SENSITIVE_KEYS = {
    "filename",
    "file_name",
    "name",
    "output_name",
    "path",
    "file_path",
    "directory",
    "data",
    "blob",
    "image_data",
    "exif",
    "metadata",
    "gps",
    "location",
}

_PATH_PATTERN = re.compile(r"^(/|[A-Za-z]:\\|\\\\)")
_FILENAME_PATTERN = re.compile(
    r"\.(jpg|jpeg|png|heic|heif|zip)$",
    re.IGNORECASE,
)


def filter_sensitive_data(_, __, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Remove or mask file names, paths and blobs from log entries."""

    def _recursive_filter(obj: Any, depth: int = 0) -> Any:
        if depth > 10:
            return "***DEPTH_LIMIT***"

        if isinstance(obj, dict):
            filtered = {}
            for key, value in obj.items():
                key_lower = str(key).lower()
                if any(
                    sensitive == key_lower
                    or f"_{sensitive}" in key_lower
                    or f"{sensitive}_" in key_lower
                    for sensitive in SENSITIVE_KEYS
                ):
                    filtered[key] = "***REDACTED***"
                else:
                    filtered[key] = _recursive_filter(value, depth + 1)
            return filtered
        elif isinstance(obj, list):
            return [_recursive_filter(item, depth + 1) for item in obj]
        elif isinstance(obj, (bytes, bytearray)):
            return f"***{len(obj)} BYTES***"
        elif isinstance(obj, str):
            if _PATH_PATTERN.match(obj):
                return "***PATH_REDACTED***"
            if _FILENAME_PATTERN.search(obj):
                return "***FILENAME_REDACTED***"
        return obj

    return _recursive_filter(event_dict)


def add_correlation_id(_, __, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Add correlation ID to log entries."""
    if "correlation_id" not in event_dict:
        event_dict["correlation_id"] = structlog.contextvars.get_contextvars().get(
            "correlation_id", str(uuid.uuid4())
        )
    return event_dict


def setup_logging(log_level: str = "INFO", json_logs: bool = True) -> None:
    """Configure structured logging with privacy filtering.

    Output goes to stderr only; nothing is written to disk.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Use JSON format for logs
    """
    level = getattr(logging, log_level.upper())

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        add_correlation_id,
        filter_sensitive_data,
    ]

    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        handlers=[console_handler],
        level=level,
        force=True,
    )

    # Suppress noisy loggers
    logging.getLogger("PIL").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Get a configured logger instance."""
    return structlog.get_logger(name)


class LoggingContext:
    """Context manager for adding context to logs."""

    def __init__(self, **kwargs) -> None:
        self.context = kwargs
        self.tokens = None

    def __enter__(self) -> "LoggingContext":
        self.tokens = structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        structlog.contextvars.reset_contextvars(**self.tokens)
