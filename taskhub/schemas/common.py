"""
Common schemas used across the application.
"""
from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Simple message response, with any non-blocking warnings."""
    message: str
    warnings: list[str] = Field(default_factory=list)


class HealthResponse(BaseModel):
    code: int = 200
    message: str = "API is healthy."
