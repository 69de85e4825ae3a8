"""
Shared schemas.
"""

from pydantic import BaseModel


class Message(BaseModel):
    """Plain status message"""
    message: str


class ErrorBody(BaseModel):
    kind: str
    message: str
    request_id: str | None = None


class ErrorResponse(BaseModel):
    """Envelope returned for every failed request"""
    error: ErrorBody
