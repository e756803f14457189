"""
Error envelope models returned by exception self-conversion.

The envelope follows a common shape so callers can map every library
failure onto their own response layer uniformly:
- code: Machine-readable error code (string)
- msg: Human-readable error description
- details: Optional additional context (field, operator, entity, key)

Example:
    {
        "error": {
            "code": "unknown_field",
            "msg": "Product has no field named 'Colour'",
            "details": {"entity": "Product", "field": "Colour"}
        }
    }
"""

from typing import Any

from pydantic import BaseModel, Field


class ErrorEnvelope(BaseModel):
    """
    Unified error envelope structure.

    Attributes:
        code: Machine-readable error code for client-side error handling.
        msg: Human-readable error description for display.
        details: Optional additional context.
    """

    code: str = Field(
        ...,
        description="Machine-readable error code (e.g., 'unknown_field', 'not_found')",
    )
    msg: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | None = Field(
        default=None,
        description="Optional additional error context and metadata",
    )


class ErrorResponse(BaseModel):
    """
    Error response envelope.

    Attributes:
        error: Embedded error envelope with code, msg, and details.
    """

    error: ErrorEnvelope = Field(..., description="Error details envelope")
