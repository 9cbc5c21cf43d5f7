"""
infrastructure.persistence.user_repo - SQLite user repository.

Implements UserRepository port.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from domain.entities import User
from domain.exceptions import DuplicateEntryError
from infrastructure.persistence.connection import AsyncSQLiteConnection, is_unique_violation

logger = logging.getLogger(__name__)


class SQLiteUserRepository:
    """Async SQLite implementation of UserRepository."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    async def get_by_id(self, user_id: int) -> Optional[User]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT id, email, name, created_at, updated_at FROM users WHERE id = ?",
                (user_id,),
            )
            return self._row_to_user(rows[0]) if rows else None

    async def get_by_email(self, email: str) -> Optional[User]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT id, email, name, created_at, updated_at FROM users WHERE email = ?",
                (email,),
            )
            return self._row_to_user(rows[0]) if rows else None

    async def save(self, user: User) -> User:
        now = datetime.now(timezone.utc).isoformat()
        try:
            async with self._conn.acquire() as conn:
                cursor = await conn.execute(
                    "INSERT INTO users (email, name, created_at, updated_at) VALUES (?, ?, ?, ?)",
                    (user.email, user.name, now, now),
                )
                user_id = cursor.lastrowid
        except Exception as e:
            if is_unique_violation(e):
                raise DuplicateEntryError(f"User with email '{user.email}' already exists") from e
            raise
        return User(id=user_id, email=user.email, name=user.name, created_at=now, updated_at=now)

    async def update(
        self, user_id: int, name: Optional[str], email: Optional[str],
    ) -> Optional[User]:
        """Update the given fields (None keeps the current value)."""
        now = datetime.now(timezone.utc).isoformat()
        try:
            async with self._conn.acquire() as conn:
                cursor = await conn.execute(
                    """UPDATE users
                       SET name = COALESCE(?, name),
                           email = COALESCE(?, email),
                           updated_at = ?
                       WHERE id = ?""",
                    (name, email, now, user_id),
                )
                if cursor.rowcount == 0:
                    return None
        except Exception as e:
            if is_unique_violation(e):
                raise DuplicateEntryError(f"User with email '{email}' already exists") from e
            raise
        return await self.get_by_id(user_id)

    @staticmethod
    def _row_to_user(row) -> User:
        return User(
            id=row[0], email=row[1], name=row[2],
            created_at=row[3] or "", updated_at=row[4] or "",
        )
