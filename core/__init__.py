"""
Core Module

Shared infrastructure components for all modules:
- Upstream client base class (timeout, retry, backoff)
- Validators
"""

from .upstream_client_base import (
    BaseUpstreamClient,
    UpstreamConfig,
    AttemptOutcome,
    Success,
    TransientFailure,
    PermanentFailure,
    NetworkError,
    is_retryable,
)
from .validators import (
    validate_text_length,
    validate_required_field,
)

__all__ = [
    "BaseUpstreamClient",
    "UpstreamConfig",
    "AttemptOutcome",
    "Success",
    "TransientFailure",
    "PermanentFailure",
    "NetworkError",
    "is_retryable",
    "validate_text_length",
    "validate_required_field",
]
