"""
Pydantic schemas for error responses.
"""

from typing import Any

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Error payload rendered for `AssetLibException`.

    Examples:
        400: {"error": "invalid_search_string", "message": "Unknown column 'foo'", "details": {...}}
        401: {"error": "unauthorized", "message": "Authentication required"}
        403: {"error": "forbidden", "message": "Only the asset's author can edit it"}
        404: {"error": "not_found", "message": "Asset with ID '42' not found"}
    """

    error: str = Field(
        ...,
        description="Error code string",
        examples=["validation_failed", "invalid_search_string", "forbidden", "not_found"],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] | None = Field(
        default=None,
        description="Optional additional error details",
    )
