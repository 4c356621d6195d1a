"""
Health endpoint.
No authentication required.
"""

import logging

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from assetlib import __version__
from assetlib.db.session import is_using_sqlite_fallback
from assetlib.dependencies import DbSession

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check(db: DbSession):
    """
    Service health check endpoint.

    Returns:
        {"status": "ok"} when service is healthy
        {"status": "degraded", "issues": [...]} when there are issues
    """
    issues = []
    warnings = []

    if is_using_sqlite_fallback():
        warnings.append("Using SQLite dev fallback - PostgreSQL not configured")

    # Check database connectivity
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("Health check database failure: %s", e)
        issues.append(f"Database: {e}")

    if issues:
        return {
            "status": "degraded",
            "issues": issues,
        }

    response = {
        "status": "ok",
        "version": __version__,
        "database": "sqlite (dev fallback)" if is_using_sqlite_fallback() else "postgresql",
    }

    if warnings:
        response["warnings"] = warnings

    return response
