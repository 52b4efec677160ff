"""Schemas shared by every router."""

from typing import Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Error body returned by the exception handlers."""
    detail: str
    code: str
    request_id: Optional[str] = None
