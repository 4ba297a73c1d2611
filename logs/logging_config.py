"""
Logging setup for the translate proxy.

Features:
- Console logging, plus optional rotating file logs
- Request tracing via a context-local request_id
- Structured helpers for upstream attempts, backoff and outcomes

Usage:
    from logs.logging_config import get_proxy_logger, RequestContext

    logger = get_proxy_logger()

    with RequestContext() as request_id:
        logger.info(f"[TRANSLATE] START | request_id={request_id}")
"""
import os
import sys
import uuid
import logging
from contextvars import ContextVar, Token
from logging.handlers import RotatingFileHandler
from typing import Any, Optional

from .config import (
    LOG_LEVEL,
    LOG_TO_FILE,
    LOG_OUTPUT_DIR,
    LOG_MAX_BYTES,
    LOG_BACKUP_COUNT,
    LOG_PREVIEW_LENGTH,
    LOG_DATE_FORMAT,
    LOG_DETAILED_FORMAT,
    LOG_SIMPLE_FORMAT,
    LOG_FILE_REQUESTS,
    LOG_FILE_ERRORS,
)

PROXY_LOGGER_NAME = "translate_proxy"

LOG_DIR = LOG_OUTPUT_DIR

_request_id: ContextVar[str] = ContextVar("request_id", default="-")
_configured = False


# =========================
# Request Context
# =========================

def generate_request_id() -> str:
    return str(uuid.uuid4())


def set_request_id(request_id: str) -> Token:
    return _request_id.set(request_id)


def get_request_id() -> str:
    return _request_id.get()


def clear_request_id(token: Optional[Token] = None) -> None:
    if token is not None:
        _request_id.reset(token)
    else:
        _request_id.set("-")


class RequestContext:
    """
    Binds a request_id to every log record emitted inside the block.

    Example:
        with RequestContext() as request_id:
            ...
    """

    def __init__(self, request_id: Optional[str] = None):
        self.request_id = request_id or generate_request_id()
        self._token: Optional[Token] = None

    def __enter__(self) -> str:
        self._token = set_request_id(self.request_id)
        return self.request_id

    def __exit__(self, exc_type, exc, tb) -> None:
        clear_request_id(self._token)
        self._token = None


class ContextFilter(logging.Filter):
    """Injects the current request_id into log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id()
        return True


# =========================
# Setup
# =========================

def setup_logging(level: Optional[str] = None, to_file: Optional[bool] = None) -> logging.Logger:
    """
    Configure the proxy logger. Safe to call more than once.

    Args:
        level: Log level name (defaults to LOG_LEVEL)
        to_file: Write rotating log files (defaults to LOG_TO_FILE)

    Returns:
        The configured proxy logger
    """
    global _configured

    logger = logging.getLogger(PROXY_LOGGER_NAME)
    if _configured:
        return logger

    logger.setLevel(level or LOG_LEVEL)
    logger.propagate = False
    context_filter = ContextFilter()

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(logging.Formatter(LOG_SIMPLE_FORMAT, LOG_DATE_FORMAT))
    console.addFilter(context_filter)
    logger.addHandler(console)

    write_files = LOG_TO_FILE if to_file is None else to_file
    if write_files:
        os.makedirs(LOG_DIR, exist_ok=True)
        detailed = logging.Formatter(LOG_DETAILED_FORMAT, LOG_DATE_FORMAT)

        requests_handler = RotatingFileHandler(
            os.path.join(LOG_DIR, LOG_FILE_REQUESTS),
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        requests_handler.setFormatter(detailed)
        requests_handler.addFilter(context_filter)
        logger.addHandler(requests_handler)

        errors_handler = RotatingFileHandler(
            os.path.join(LOG_DIR, LOG_FILE_ERRORS),
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        errors_handler.setLevel(logging.ERROR)
        errors_handler.setFormatter(detailed)
        errors_handler.addFilter(context_filter)
        logger.addHandler(errors_handler)

    _configured = True
    logger.debug(f"[LOGGING] Configured | level={logger.level} | log_dir={LOG_DIR}")
    return logger


def get_proxy_logger(name: Optional[str] = None) -> logging.Logger:
    """Get the proxy logger, or a child of it when name is given."""
    if name:
        return logging.getLogger(f"{PROXY_LOGGER_NAME}.{name}")
    return logging.getLogger(PROXY_LOGGER_NAME)


# =========================
# Structured Helpers
# =========================

def preview(value: Any, length: int = LOG_PREVIEW_LENGTH) -> str:
    """Single-line, truncated rendering of a value for log lines."""
    text = value if isinstance(value, str) else repr(value)
    text = text.replace("\n", "\\n")
    if len(text) > length:
        return text[:length] + "..."
    return text


def log_upstream_attempt(task: str, url: str, attempt: int, max_attempts: int) -> None:
    get_proxy_logger().info(
        f"[{task.upper()}_UPSTREAM] Attempt {attempt}/{max_attempts} | url={url}"
    )


def log_backoff(task: str, attempt: int, delay_ms: int, reason: str) -> None:
    get_proxy_logger().warning(
        f"[{task.upper()}_UPSTREAM] Retrying | attempt={attempt} | "
        f"delay_ms={delay_ms} | reason={reason}"
    )


def log_upstream_outcome(
    task: str,
    outcome: str,
    attempt: int,
    latency_ms: float,
    status: Optional[int] = None,
    detail: Optional[str] = None,
) -> None:
    """Log the classified outcome of a single upstream attempt."""
    logger = get_proxy_logger()
    message = (
        f"[{task.upper()}_UPSTREAM] {outcome} | attempt={attempt} | "
        f"status={status if status is not None else '-'} | latency_ms={latency_ms:.1f}"
    )
    if detail:
        message += f" | detail={preview(detail)}"

    if outcome == "Success":
        logger.info(message)
    else:
        logger.warning(message)
