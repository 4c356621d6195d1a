"""Database module for the asset library API."""

from assetlib.db.base import Base
from assetlib.db.session import get_db, engine, AsyncSessionLocal

__all__ = ["Base", "get_db", "engine", "AsyncSessionLocal"]
