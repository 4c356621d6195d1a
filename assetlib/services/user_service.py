"""
User service - lookups of asset authors and reviewers by username.
"""

import logging

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from assetlib.models.user import User

logger = logging.getLogger(__name__)

# INSERT constructs supporting ON CONFLICT, per database dialect
_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class UserService:
    """Service class for user operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_name(self, name: str) -> User | None:
        result = await self.db.execute(select(User).where(User.name == name))
        return result.scalar_one_or_none()

    async def get_or_create(self, name: str, email: str | None = None) -> User:
        """
        Return the user with the given name, creating it on first sight.
        Identities are vouched for upstream, so any name is accepted.

        Concurrent first requests for the same name insert at most one row;
        the others pick it up.
        """
        user = await self.get_by_name(name)
        if user is not None:
            return user

        insert = _UPSERT_INSERTS[self.db.get_bind().dialect.name]
        stmt = insert(User.__table__).values(
            name=name,
            email=email,
        ).on_conflict_do_nothing(index_elements=["name"])
        result = await self.db.execute(stmt)
        if result.rowcount:
            logger.info("Registered user %s", name)

        return await self.get_by_name(name)
