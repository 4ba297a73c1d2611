"""
Translation Service

FastAPI endpoints for the translation proxy.

The route adapts a Starlette request into an InboundRequest and delegates to
handle_translate, which can be driven by any host that can build one.
"""
import json
from typing import Any, AsyncIterable, Awaitable, Callable, Mapping, Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from config import get_cors_headers
from core import validate_required_field, validate_text_length
from logs.logging_config import get_proxy_logger, RequestContext
from schemas import ErrorResponse
from .config import (
    TRANSLATION_MAX_TEXT_LENGTH,
    TRANSLATION_DEFAULT_TARGET_LANGUAGE,
)
from .schemas import InboundRequest, TranslationParams, TranslationConfigResponse
from .translator import Translator, get_translator

logger = get_proxy_logger("service")


# =====================
# Response Emitter
# =====================

def emit(status_code: int, body: Optional[BaseModel] = None) -> Response:
    """Build the HTTP response; CORS headers are always attached."""
    headers = get_cors_headers()
    if body is None:
        return Response(status_code=status_code, headers=headers)
    return JSONResponse(status_code=status_code, content=body.to_payload(), headers=headers)


# =====================
# Request Normalizer
# =====================

async def read_json_body(stream: Optional[AsyncIterable[bytes]]) -> Any:
    """
    Read a raw body stream to completion and parse it as JSON.

    Empty or malformed bodies yield an empty mapping instead of an error.
    """
    if stream is None:
        return {}

    chunks = []
    async for chunk in stream:
        chunks.append(chunk)
    raw = b"".join(chunks)

    if not raw:
        return {}
    try:
        return json.loads(raw)
    except ValueError:
        logger.debug("[TRANSLATE] Ignoring unparseable request body")
        return {}


async def extract_params(inbound: InboundRequest) -> TranslationParams:
    """
    Pull text and target language from the inbound request.

    GET reads the query string; every other method reads the body, using the
    host-parsed body when supplied and the raw stream otherwise.
    """
    if inbound.method.upper() == "GET":
        text = inbound.query.get("text")
        to = inbound.query.get("to")
    else:
        body = inbound.body
        if body is None:
            body = await read_json_body(inbound.stream)
        if not isinstance(body, Mapping):
            body = {}
        text = body.get("text") or body.get("q")
        to = body.get("to")

    return TranslationParams(
        text=text,
        target_language=to or TRANSLATION_DEFAULT_TARGET_LANGUAGE,
    )


# =====================
# Handler
# =====================

async def handle_translate(inbound: InboundRequest, translator: Translator) -> Response:
    """
    Run one translation request end to end.

    Never raises: every failure is converted into a JSON error response.
    """
    if inbound.method.upper() == "OPTIONS":
        return emit(204)

    with RequestContext() as request_id:
        try:
            params = await extract_params(inbound)

            try:
                validate_required_field(params.text, "text")
                validate_text_length(params.text, TRANSLATION_MAX_TEXT_LENGTH)
            except ValueError as e:
                logger.warning(f"[TRANSLATE] Rejected | request_id={request_id} | error={e}")
                return emit(400, ErrorResponse(error=str(e)))

            if not translator.is_available():
                logger.error(f"[TRANSLATE] Upstream URL not configured | request_id={request_id}")
                return emit(500, ErrorResponse(
                    error="Server misconfiguration: upstream translation URL not set. "
                          "Configure TRANSLATION_UPSTREAM_URL."
                ))

            logger.info(
                f"[TRANSLATE] START | request_id={request_id} | method={inbound.method} | "
                f"target={params.target_language}"
            )

            result = await translator.translate(params)

            logger.info(f"[TRANSLATE] END | request_id={request_id} | status={result.status_code}")
            return emit(result.status_code, result.body)

        except Exception as e:
            logger.exception(f"[TRANSLATE] ERROR | request_id={request_id} | error={e}")
            return emit(500, ErrorResponse(error="Server error", details=str(e)))


# Create router
router = APIRouter(prefix="/api/translate", tags=["Translation"])


class AnyMethodEndpoint:
    """
    ASGI adapter for a request handler that must match every HTTP method.

    Function endpoints are bound to explicit methods, so unknown verbs would
    get a bare 405 without CORS headers.
    """

    def __init__(self, handler: Callable[[Request], Awaitable[Response]]):
        self.handler = handler

    async def __call__(self, scope, receive, send):
        response = await self.handler(Request(scope, receive))
        await response(scope, receive, send)


# =====================
# API Endpoints
# =====================

async def translate_endpoint(request: Request) -> Response:
    """
    Translate text to a target language.

    **GET:** query `text` (required), `to` (optional, default `en`)

    **POST (and any other method):** JSON body `{"text" | "q": ..., "to": ...}`

    **Returns:**
    - `success`: true on upstream success
    - `originalText`: Original input text
    - `translatedText`: Translated text, or null if the upstream shape was unrecognized
    - `targetLanguage`: Target language
    - `api`: Service tag
    - `raw`: Parsed upstream body
    """
    inbound = InboundRequest(
        method=request.method,
        query=request.query_params,
        stream=request.stream(),
    )
    return await handle_translate(inbound, get_translator())


router.add_route(
    router.prefix,
    AnyMethodEndpoint(translate_endpoint),
    methods=None,
    name="translate",
    include_in_schema=False,
)


@router.get("/config", response_model=TranslationConfigResponse)
async def get_translation_config():
    """
    Get the effective translation proxy configuration.

    **Returns:**
    - Upstream URL, retry policy and input limits
    """
    upstream = get_translator().client.get_upstream_info()
    return TranslationConfigResponse(
        upstream_url=upstream["url"],
        timeout_ms=upstream["timeout_ms"],
        max_attempts=upstream["max_attempts"],
        retry_backoff_ms=upstream["backoff_ms"],
        max_text_length=TRANSLATION_MAX_TEXT_LENGTH,
        default_target_language=TRANSLATION_DEFAULT_TARGET_LANGUAGE,
    )
