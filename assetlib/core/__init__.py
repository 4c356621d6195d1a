"""Core exceptions for the asset library API."""

from assetlib.core.exceptions import (
    AssetLibException,
    AssetNotFoundException,
    ForbiddenException,
    InvalidCodeError,
    InvalidSearchStringException,
    UnauthorizedException,
    ValidationException,
)

__all__ = [
    "AssetLibException",
    "AssetNotFoundException",
    "ForbiddenException",
    "InvalidCodeError",
    "InvalidSearchStringException",
    "UnauthorizedException",
    "ValidationException",
]
