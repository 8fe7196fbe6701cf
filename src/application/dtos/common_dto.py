"""Common DTOs for API responses, error envelopes and request validation helpers."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field
from pydantic_core import PydanticCustomError


def required(value: Any, message: str) -> Any:
    """Reject ``None`` and blank strings with ``message`` as the client-facing error."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise PydanticCustomError("missing", message)
    return value.strip() if isinstance(value, str) else value


class MessageResponse(BaseModel):
    """Error or status message."""
    msg: str = Field(..., description="Human readable message", examples=["Profile not found"])


class ValidationErrorItem(BaseModel):
    msg: str = Field(..., description="Error message", examples=["Status is required"])
    param: str | None = Field(None, description="Name of the offending field", examples=["status"])
    location: str | None = Field(None, description="Where the field was read from", examples=["body"])


class ValidationErrorResponse(BaseModel):
    """Validation error envelope."""
    errors: list[ValidationErrorItem] = Field(..., description="List of validation errors")


class HealthResponse(BaseModel):
    status: str = Field(..., description="Health status", examples=["healthy"])


class RootResponse(BaseModel):
    status: str = Field(..., description="API status", examples=["ok"])
    service: str = Field(..., description="Service name", examples=["devconnector-backend"])
    version: str = Field(..., description="API version", examples=["0.1.0"])
