from pydantic import BaseModel, Field
from typing import Any, Dict, Optional


class ErrorResponse(BaseModel):
    """Failure body shared by every endpoint. Unset fields are omitted."""
    success: bool = Field(False, description="Always false for errors")
    error: str = Field(..., description="Human-readable error message")
    details: Optional[str] = Field(None, description="Underlying error detail")
    status: Optional[int] = Field(None, description="Upstream HTTP status, if any")
    body: Optional[str] = Field(None, description="Upstream response body, if any")

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class HealthResponse(BaseModel):
    """Liveness check response."""
    status: str = "ok"
    service: str
