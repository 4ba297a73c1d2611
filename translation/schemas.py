"""
Schemas for the translation proxy.

InboundRequest and TranslationResult are plain dataclasses; the wire-level
bodies are pydantic models serialized with camelCase aliases.
"""
from dataclasses import dataclass, field
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, AsyncIterable, Dict, Mapping, Optional, Union

from schemas import ErrorResponse


@dataclass(frozen=True)
class InboundRequest:
    """Host-neutral view of one incoming request."""
    method: str
    query: Mapping[str, str] = field(default_factory=dict)
    # Body already parsed by the host, if any
    body: Any = None
    # Raw body chunks, read only when body is not supplied
    stream: Optional[AsyncIterable[bytes]] = None


class TranslationParams(BaseModel):
    """Parameters extracted from the inbound request."""
    text: Any = Field(None, description="Text to translate; strings are length-checked")
    target_language: Any = Field("en", description="Target language code")


class UpstreamTranslateRequest(BaseModel):
    """Body sent to the LibreTranslate-compatible upstream."""
    q: Any = Field(..., description="Text to translate")
    source: str = Field("auto", description="Source language")
    target: Any = Field(..., description="Target language")
    format: str = Field("text", description="Input format")


class TranslationResponse(BaseModel):
    """Successful translation. translatedText is null when extraction failed."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = Field(True, description="Always true")
    original_text: Any = Field(..., alias="originalText", description="Text as received")
    translated_text: Any = Field(None, alias="translatedText", description="Extracted translation or null")
    target_language: Any = Field(..., alias="targetLanguage", description="Target language")
    api: str = Field(..., description="Service tag")
    raw: Any = Field(None, description="Parsed upstream body for diagnostics")

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class TranslationConfigResponse(BaseModel):
    """Effective settings reported by the config endpoint."""
    upstream_url: str
    timeout_ms: int
    max_attempts: int
    retry_backoff_ms: int
    max_text_length: int
    default_target_language: str


@dataclass(frozen=True)
class TranslationResult:
    """HTTP status plus the body to emit."""
    status_code: int
    body: Union[TranslationResponse, ErrorResponse]
