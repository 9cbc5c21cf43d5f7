"""
infrastructure.persistence.connection - Async SQLite connection manager.

Wraps aiosqlite with a context manager: each unit of work gets its own
connection and transaction. Holds no open handles between calls, so one
instance can be shared by every request.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import aiosqlite

logger = logging.getLogger(__name__)


class AsyncSQLiteConnection:
    """Async SQLite connection provider with auto-commit/rollback."""

    def __init__(self, db_path: str):
        self._db_path = db_path

    @property
    def db_path(self) -> str:
        return self._db_path

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """Yield an async SQLite connection with FK support.

        Commits on success, rolls back on exception.
        """
        async with aiosqlite.connect(self._db_path) as conn:
            await conn.execute("PRAGMA foreign_keys = ON")
            conn.row_factory = aiosqlite.Row
            try:
                yield conn
                await conn.commit()
            except Exception:
                await conn.rollback()
                logger.debug("Database operation failed, transaction rolled back.")
                raise

    async def close(self) -> None:
        """Nothing is held open between operations; kept for lifecycle symmetry."""
        logger.debug("Connection provider for %s closed", self._db_path)


def is_unique_violation(exc: BaseException) -> bool:
    """True when a sqlite IntegrityError was caused by a UNIQUE constraint.

    Foreign-key and CHECK failures are also IntegrityErrors; only unique
    violations are reported to callers as duplicates.
    """
    return isinstance(exc, aiosqlite.IntegrityError) and "UNIQUE constraint failed" in str(exc)
