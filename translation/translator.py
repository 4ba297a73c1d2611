"""
Core translation logic: upstream call and response-shape extraction.
"""
from typing import Any, Optional

from config import API_TAG
from core import (
    BaseUpstreamClient,
    UpstreamConfig,
    Success,
    TransientFailure,
    PermanentFailure,
)
from logs.logging_config import get_proxy_logger
from schemas import ErrorResponse
from .config import (
    TRANSLATION_UPSTREAM_URL,
    TRANSLATION_SOURCE_LANGUAGE,
    TRANSLATION_FORMAT,
    TRANSLATION_TIMEOUT_MS,
    TRANSLATION_MAX_ATTEMPTS,
    TRANSLATION_RETRY_BACKOFF_MS,
    TRANSLATION_CONNECTION_POOL_LIMIT,
)
from .schemas import (
    TranslationParams,
    TranslationResponse,
    TranslationResult,
    UpstreamTranslateRequest,
)

logger = get_proxy_logger("translator")


def extract_translated_text(data: Any) -> Optional[Any]:
    """
    Find the translated string in an upstream body of unknown shape.

    Tried in order, first non-empty value wins:
        {"translatedText": ...}
        {"translation": ...}
        {"result": ...}
        [{"translatedText": ...}, ...]
        {"translations": [{"text": ...}, ...]}

    Returns:
        The extracted value, or None if no shape matched
    """
    match data:
        case {"translatedText": value} if value:
            return value
        case {"translation": value} if value:
            return value
        case {"result": value} if value:
            return value
        case [{"translatedText": value}, *_] if value:
            return value
        case {"translations": [{"text": value}, *_]} if value:
            return value
    return None


class Translator:
    """Translates text through the upstream client and normalizes the result."""

    def __init__(self, client: BaseUpstreamClient, api_tag: str = API_TAG):
        """
        Initialize the translator.

        Args:
            client: Upstream client that owns timeout/retry policy
            api_tag: Service tag reported in successful responses
        """
        self.client = client
        self.api_tag = api_tag

    def is_available(self) -> bool:
        return self.client.is_available()

    async def close(self):
        await self.client.close()

    async def translate(self, params: TranslationParams) -> TranslationResult:
        """
        Translate text to the target language.

        Upstream failures are returned as 502/504 results, never raised.

        Args:
            params: Validated translation parameters

        Returns:
            TranslationResult with HTTP status and response body
        """
        payload = UpstreamTranslateRequest(
            q=params.text,
            source=TRANSLATION_SOURCE_LANGUAGE,
            target=params.target_language,
            format=TRANSLATION_FORMAT,
        )

        logger.info(
            f"[TRANSLATOR] Translating | chars={len(params.text) if isinstance(params.text, str) else '-'} | "
            f"target={params.target_language}"
        )

        outcome = await self.client.post_json(payload.model_dump())

        if isinstance(outcome, Success):
            translated_text = extract_translated_text(outcome.data)
            if translated_text is None:
                logger.warning("[TRANSLATOR] No translated text in upstream body; returning raw data")
            else:
                logger.info("[TRANSLATOR] Translation complete")

            return TranslationResult(
                status_code=200,
                body=TranslationResponse(
                    original_text=params.text,
                    translated_text=translated_text,
                    target_language=params.target_language,
                    api=self.api_tag,
                    raw=outcome.data,
                ),
            )

        if isinstance(outcome, (PermanentFailure, TransientFailure)):
            return TranslationResult(
                status_code=502,
                body=ErrorResponse(
                    error="Bad upstream response",
                    status=outcome.status,
                    body=outcome.body,
                ),
            )

        return TranslationResult(
            status_code=504,
            body=ErrorResponse(error="Upstream request failed", details=outcome.reason),
        )


# =========================
# Module-level default instance
# =========================

_config = UpstreamConfig(
    url=TRANSLATION_UPSTREAM_URL,
    timeout_ms=TRANSLATION_TIMEOUT_MS,
    max_attempts=TRANSLATION_MAX_ATTEMPTS,
    backoff_ms=TRANSLATION_RETRY_BACKOFF_MS,
    pool_limit=TRANSLATION_CONNECTION_POOL_LIMIT,
    task_name="translate",
)

_translator = Translator(BaseUpstreamClient(_config))


def get_translator() -> Translator:
    """Shared translator; FastAPI dependency for the translate route."""
    return _translator


async def close_session():
    """Close the translation session. Call this on application shutdown."""
    await _translator.close()
