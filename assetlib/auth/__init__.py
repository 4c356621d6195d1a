"""
Authentication and authorization module for the asset library API.
Identities are provided by the fronting authentication proxy.
"""

from assetlib.auth.dependencies import (
    CurrentUser,
    OptionalUser,
    get_current_user,
    get_optional_user,
)
from assetlib.auth.permissions import can_modify_asset, can_view_asset, check_asset_author

__all__ = [
    # Permission functions
    "can_modify_asset",
    "can_view_asset",
    "check_asset_author",
    # Dependencies
    "get_current_user",
    "get_optional_user",
    # Type aliases
    "CurrentUser",
    "OptionalUser",
]
