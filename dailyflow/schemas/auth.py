from typing import Optional
from pydantic import BaseModel, Field


class AuthRequest(BaseModel):
    mobile: Optional[str] = Field(
        default=None,
        description="Mobile number identifying the user. Leading/trailing whitespace is ignored.",
        examples=["+15551234567"],
    )


class AuthResponse(BaseModel):
    mobile: str
