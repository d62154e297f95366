"""
Response shapes shared by every router.
"""
from typing import Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """`{code, message, details}` body sent with every 4xx/5xx response."""
    code: str
    message: str
    details: Optional[dict[str, Any]] = None


class HealthResponse(BaseModel):
    ok: bool
