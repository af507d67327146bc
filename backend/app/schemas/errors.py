# backend/app/schemas/errors.py
"""
Error envelopes returned by the global exception handlers in main.py.

Every failure leaves the API as {error, message, details}; only the shape
of `details` differs between domain errors and request validation.
"""

from pydantic import BaseModel, ConfigDict, Field


class ErrorDetail(BaseModel):
    """Domain or HTTP error (400, 401, 403, 404, 409, 429, 5xx)."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "error": "HoldingNotFoundError",
                    "message": "Holding with id 42 not found",
                    "details": {"resource_type": "Holding", "resource_id": 42},
                },
                {
                    "error": "ValidationError",
                    "message": "Cannot sell 11 units of VAS. Only 10 units held as of 2024-03-01.",
                    "details": {"field": "quantity"},
                },
            ]
        }
    )

    error: str = Field(..., description="Exception class or HTTP error name")
    message: str = Field(..., description="Human-readable error message")
    details: dict | None = Field(default=None, description="Structured context, when any")


class FieldError(BaseModel):
    """One offending request field."""

    field: str = Field(..., description="Dotted location, e.g. 'body.quantity'")
    message: str
    type: str = Field(..., description="Pydantic error type, e.g. 'greater_than'")


class ValidationErrorDetail(BaseModel):
    """Request validation failure (422)."""

    error: str = Field(default="ValidationError")
    message: str = Field(default="Request validation failed")
    details: list[FieldError]
