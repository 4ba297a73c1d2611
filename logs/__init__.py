"""
Logs Module

Provides:
- Logging configuration for the translate proxy
- Structured upstream attempt/outcome logging
- Context tracking (request_id)
"""

from .logging_config import (
    setup_logging,
    get_proxy_logger,
    log_upstream_attempt,
    log_upstream_outcome,
    log_backoff,
    preview,
    RequestContext,
    ContextFilter,
    set_request_id,
    get_request_id,
    clear_request_id,
    generate_request_id,
    LOG_DIR,
)

__all__ = [
    "setup_logging",
    "get_proxy_logger",
    "log_upstream_attempt",
    "log_upstream_outcome",
    "log_backoff",
    "preview",
    "RequestContext",
    "ContextFilter",
    "set_request_id",
    "get_request_id",
    "clear_request_id",
    "generate_request_id",
    "LOG_DIR",
]
