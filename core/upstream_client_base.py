"""
Base Upstream Client

Provides the bounded retry loop around a single JSON POST endpoint.
Each module creates its own instance with its own configuration.

Features:
- Per-attempt hard timeout (the in-flight call is aborted)
- Linear backoff between attempts (backoff_ms * attempt)
- Shared attempt budget for 5xx responses and retryable network errors
- Connection pooling per instance
- Best-effort body reading and JSON parsing
- Attempt/outcome logging

Usage:
    # In module's translator.py
    from core.upstream_client_base import BaseUpstreamClient, UpstreamConfig

    config = UpstreamConfig(
        url="https://translate.argosopentech.com/translate",
        timeout_ms=10000,
        max_attempts=2,
        task_name="translate"
    )

    client = BaseUpstreamClient(config)
    outcome = await client.post_json({"q": "hello", "target": "es"})
"""

import json
import time
import errno
import socket
import asyncio
import aiohttp
from dataclasses import dataclass
from typing import Optional, Dict, Any, Tuple, Union

from logs.logging_config import (
    get_proxy_logger,
    log_upstream_attempt,
    log_upstream_outcome,
    log_backoff,
)

logger = get_proxy_logger("upstream")


def is_retryable(error: Exception) -> bool:
    """
    Whether a failed request is worth another attempt.

    Timeouts, dropped or reset connections and DNS lookup failures are retried.
    Refused connections and every other client error are not.
    """
    if isinstance(error, (asyncio.TimeoutError, aiohttp.ServerDisconnectedError)):
        return True
    if isinstance(error, aiohttp.ClientConnectorError):
        return isinstance(error.os_error, socket.gaierror)
    if isinstance(error, ConnectionResetError):
        return True
    if isinstance(error, aiohttp.ClientOSError):
        return error.errno == errno.ECONNRESET
    return False


@dataclass(frozen=True)
class UpstreamConfig:
    """
    Configuration for an upstream client instance.

    Values are fixed for the lifetime of the client; modules build one from
    their config.py at import time.
    """
    url: str

    # Retry policy
    timeout_ms: int = 10000
    max_attempts: int = 2
    backoff_ms: int = 300

    # Connection settings
    pool_limit: int = 10

    # Logging identifier
    task_name: str = "upstream"

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "url": self.url,
            "timeout_ms": self.timeout_ms,
            "max_attempts": self.max_attempts,
            "backoff_ms": self.backoff_ms,
            "pool_limit": self.pool_limit,
            "task_name": self.task_name,
        }


# =========================
# Attempt Outcomes
# =========================

@dataclass(frozen=True)
class Success:
    """2xx response; data is the parsed JSON body or None if it did not parse."""
    status: int
    data: Any


@dataclass(frozen=True)
class TransientFailure:
    """5xx response, retried while the attempt budget allows."""
    status: int
    body: str


@dataclass(frozen=True)
class PermanentFailure:
    """Non-OK response below 500. Never retried."""
    status: int
    body: str


@dataclass(frozen=True)
class NetworkError:
    """The request did not produce a response."""
    reason: str
    retryable: bool = True


AttemptOutcome = Union[Success, TransientFailure, PermanentFailure, NetworkError]


def parse_json(body: str) -> Any:
    """Parse a response body, returning None instead of raising."""
    if not body:
        return None
    try:
        return json.loads(body)
    except ValueError:
        return None


class BaseUpstreamClient:
    """
    JSON POST client with timeout, retry and backoff.

    Each instance maintains its own aiohttp session and connection pool.
    Attempts within one post_json call are strictly sequential.

    Example:
        client = BaseUpstreamClient(UpstreamConfig(url="https://example.com/api"))
        outcome = await client.post_json({"q": "hi"})
        if isinstance(outcome, Success):
            print(outcome.data)
    """

    def __init__(self, config: UpstreamConfig):
        """
        Initialize upstream client with module-specific configuration.

        Args:
            config: UpstreamConfig with URL, timeout and retry settings
        """
        self.config = config
        self._session: Optional[aiohttp.ClientSession] = None

        logger.debug(
            f"[{config.task_name.upper()}_UPSTREAM] Initialized | "
            f"url={config.url} | timeout_ms={config.timeout_ms} | "
            f"max_attempts={config.max_attempts}"
        )

    def is_available(self) -> bool:
        """Whether an upstream endpoint is configured."""
        return bool(self.config.url)

    async def get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session for this instance."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout_ms / 1000)
            connector = aiohttp.TCPConnector(
                limit=self.config.pool_limit,
                limit_per_host=self.config.pool_limit
            )
            self._session = aiohttp.ClientSession(
                timeout=timeout,
                connector=connector
            )
            logger.debug(f"[{self.config.task_name.upper()}_UPSTREAM] Session created")
        return self._session

    async def close(self):
        """Close this instance's session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None
            logger.debug(f"[{self.config.task_name.upper()}_UPSTREAM] Session closed")

    async def post_json(self, payload: Dict[str, Any]) -> AttemptOutcome:
        """
        POST payload to the upstream, retrying transient failures.

        Returns the first terminal outcome:
        - Success on a 2xx response
        - PermanentFailure on a non-OK status below 500 (no retry)
        - TransientFailure when the last attempt still got a 5xx
        - NetworkError when attempts ran out on timeouts/connection errors,
          or on a non-retryable client error

        Args:
            payload: JSON-serializable request body

        Returns:
            The final AttemptOutcome
        """
        max_attempts = self.config.max_attempts
        attempt = 0
        last_error: Optional[NetworkError] = None

        while attempt < max_attempts:
            attempt += 1
            outcome = await self._attempt(payload, attempt)

            if isinstance(outcome, (Success, PermanentFailure)):
                return outcome

            if isinstance(outcome, TransientFailure):
                if attempt < max_attempts:
                    await self._backoff(attempt, f"status={outcome.status}")
                    continue
                return outcome

            last_error = outcome
            if outcome.retryable and attempt < max_attempts:
                await self._backoff(attempt, outcome.reason)
                continue
            break

        if last_error is None:
            last_error = NetworkError(reason="No upstream attempts were made", retryable=False)

        logger.error(
            f"[{self.config.task_name.upper()}_UPSTREAM] Giving up | "
            f"attempts={attempt} | error={last_error.reason}"
        )
        return last_error

    async def _attempt(self, payload: Dict[str, Any], attempt: int) -> AttemptOutcome:
        """Run one attempt and classify its result."""
        task = self.config.task_name
        log_upstream_attempt(task, self.config.url, attempt, self.config.max_attempts)

        start_time = time.time()
        try:
            status, body = await self._send(payload)

        except (asyncio.TimeoutError, aiohttp.ClientError) as e:
            outcome = NetworkError(reason=self._describe_error(e), retryable=is_retryable(e))
            log_upstream_outcome(task, "NetworkError", attempt, (time.time() - start_time) * 1000,
                                 detail=outcome.reason)
            return outcome

        latency_ms = (time.time() - start_time) * 1000

        if 200 <= status < 300:
            log_upstream_outcome(task, "Success", attempt, latency_ms, status=status)
            return Success(status=status, data=parse_json(body))

        if status >= 500:
            log_upstream_outcome(task, "TransientFailure", attempt, latency_ms, status=status, detail=body)
            return TransientFailure(status=status, body=body)

        log_upstream_outcome(task, "PermanentFailure", attempt, latency_ms, status=status, detail=body)
        return PermanentFailure(status=status, body=body)

    async def _send(self, payload: Dict[str, Any]) -> Tuple[int, str]:
        """
        Issue one POST bounded by the per-attempt timeout.

        Returns:
            Tuple of (status, body text); body is "" if it could not be read
        """
        session = await self.get_session()
        timeout = aiohttp.ClientTimeout(total=self.config.timeout_ms / 1000)

        async with session.post(
            self.config.url,
            json=payload,
            headers={"Content-Type": "application/json"},
            timeout=timeout,
        ) as r:
            try:
                body = await r.text()
            except (aiohttp.ClientError, asyncio.TimeoutError, UnicodeDecodeError):
                body = ""
            return r.status, body

    async def _backoff(self, attempt: int, reason: str) -> None:
        delay_ms = self.config.backoff_ms * attempt
        log_backoff(self.config.task_name, attempt, delay_ms, reason)
        await asyncio.sleep(delay_ms / 1000)

    def _describe_error(self, error: Exception) -> str:
        if isinstance(error, asyncio.TimeoutError):
            return f"Upstream request timed out after {self.config.timeout_ms} ms"
        return str(error) or error.__class__.__name__

    def get_upstream_info(self) -> Dict[str, Any]:
        """
        Get information about this client's upstream configuration.

        Returns:
            Dictionary with upstream configuration details
        """
        return self.config.to_dict()
