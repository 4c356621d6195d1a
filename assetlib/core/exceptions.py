"""
Custom exceptions for the asset library API.

`AssetLibException` subclasses are rendered as JSON error responses.
`InvalidCodeError` is different: it marks a broken precondition (an
enumeration code outside its table) and is never caught by library code.
"""

from typing import Any


class AssetLibException(Exception):
    """Base exception for all user-facing API errors."""

    def __init__(
        self,
        error: str,
        message: str,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        self.error = error
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to response dictionary."""
        response = {
            "error": self.error,
            "message": self.message,
        }
        if self.details:
            response["details"] = self.details
        return response


class ValidationException(AssetLibException):
    """400 - Request is well-formed but semantically invalid."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            error="validation_failed",
            message=message,
            status_code=400,
            details=details,
        )


class InvalidSearchStringException(ValidationException):
    """400 - The `filter` search string can't be translated into a query."""

    def __init__(self, message: str, search_string: str | None = None):
        super().__init__(
            message=message,
            details={"filter": search_string} if search_string is not None else None,
        )
        self.error = "invalid_search_string"


class UnauthorizedException(AssetLibException):
    """401 - No identity could be resolved for the request."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            error="unauthorized",
            message=message,
            status_code=401,
        )


class ForbiddenException(AssetLibException):
    """403 - Identity is known but the action isn't allowed."""

    def __init__(self, message: str = "Access denied", details: dict[str, Any] | None = None):
        super().__init__(
            error="forbidden",
            message=message,
            status_code=403,
            details=details,
        )


class AssetNotFoundException(AssetLibException):
    """404 - Asset not found (or not visible to the caller)."""

    def __init__(self, asset_id: int):
        super().__init__(
            error="not_found",
            message=f"Asset with ID '{asset_id}' not found",
            status_code=404,
        )


class InvalidCodeError(ValueError):
    """
    An enumeration code (category, support level, preview type) is outside
    its table. Validated input never produces one, so this signals a
    programming or data error.
    """

    def __init__(self, kind: str, code: int):
        self.kind = kind
        self.code = code
        super().__init__(f"Invalid {kind}: {code}")
