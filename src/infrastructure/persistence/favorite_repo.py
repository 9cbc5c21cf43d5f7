"""
infrastructure.persistence.favorite_repo - SQLite favorites repository.

Implements FavoriteRepository port. Adding the same (user, recipe) twice is
a no-op that returns the existing row.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from domain.entities import Favorite, Recipe
from infrastructure.persistence.connection import AsyncSQLiteConnection
from infrastructure.persistence.recipe_repo import RECIPE_COLUMNS, row_to_recipe

logger = logging.getLogger(__name__)


class SQLiteFavoriteRepository:
    """Async SQLite implementation of FavoriteRepository."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    async def add(self, user_id: int, recipe_id: int) -> Favorite:
        now = datetime.now(timezone.utc).isoformat()
        async with self._conn.acquire() as conn:
            await conn.execute(
                """INSERT INTO user_favorites (user_id, recipe_id, created_at)
                   VALUES (?, ?, ?)
                   ON CONFLICT (user_id, recipe_id) DO NOTHING""",
                (user_id, recipe_id, now),
            )
            rows = await conn.execute_fetchall(
                """SELECT id, user_id, recipe_id, created_at FROM user_favorites
                   WHERE user_id = ? AND recipe_id = ?""",
                (user_id, recipe_id),
            )
            return self._row_to_favorite(rows[0])

    async def remove(self, user_id: int, recipe_id: int) -> Optional[Favorite]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                """SELECT id, user_id, recipe_id, created_at FROM user_favorites
                   WHERE user_id = ? AND recipe_id = ?""",
                (user_id, recipe_id),
            )
            if not rows:
                return None
            await conn.execute("DELETE FROM user_favorites WHERE id = ?", (rows[0][0],))
            return self._row_to_favorite(rows[0])

    async def list_for_user(self, user_id: int) -> list[tuple[Recipe, str]]:
        """(recipe, favorited_at) pairs, most recently favorited first."""
        columns = ", ".join(f"r.{c.strip()}" for c in RECIPE_COLUMNS.split(","))
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                f"""SELECT {columns}, uf.created_at AS favorited_at
                    FROM recipes r
                    JOIN user_favorites uf ON r.id = uf.recipe_id
                    WHERE uf.user_id = ?
                    ORDER BY uf.created_at DESC, uf.id DESC""",
                (user_id,),
            )
            return [(row_to_recipe(r), r[12] or "") for r in rows]

    async def is_favorited(self, user_id: int, recipe_id: int) -> bool:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                """SELECT EXISTS(
                       SELECT 1 FROM user_favorites WHERE user_id = ? AND recipe_id = ?
                   )""",
                (user_id, recipe_id),
            )
            return bool(rows[0][0])

    @staticmethod
    def _row_to_favorite(row) -> Favorite:
        return Favorite(id=row[0], user_id=row[1], recipe_id=row[2], created_at=row[3] or "")
