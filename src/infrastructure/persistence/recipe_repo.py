"""
infrastructure.persistence.recipe_repo - SQLite recipe repository.

Implements RecipeRepository port: recipe storage, tag and nutrient-tag
lookups, and the append-only recommendation log.

List-valued columns are JSON text; tag matching uses SQLite's json_each().
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Mapping, Optional, Sequence

from domain.entities import Recipe, RecommendationLog
from domain.models import Difficulty, Ingredient, Priority, RecipeDraft
from domain.nutrition import target_tags
from infrastructure.persistence.connection import AsyncSQLiteConnection

logger = logging.getLogger(__name__)

# Upper bound for tag-driven lookups
MAX_TAG_RESULTS = 20

RECIPE_COLUMNS = (
    "id, title, description, ingredients, instructions, nutritional_info, "
    "prep_time, cook_time, servings, difficulty, tags, created_at"
)


class SQLiteRecipeRepository:
    """Async SQLite implementation of RecipeRepository."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(self, draft: RecipeDraft) -> Recipe:
        """Persist a generated or curated recipe; assigns id and created_at."""
        now = datetime.now(timezone.utc).isoformat()
        async with self._conn.acquire() as conn:
            cursor = await conn.execute(
                """INSERT INTO recipes
                   (title, description, ingredients, instructions, nutritional_info,
                    prep_time, cook_time, servings, difficulty, tags, created_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    draft.title,
                    draft.description,
                    json.dumps([asdict(i) for i in draft.ingredients]),
                    json.dumps(list(draft.instructions)),
                    json.dumps(draft.nutritional_info),
                    draft.prep_time,
                    draft.cook_time,
                    draft.servings,
                    Difficulty(draft.difficulty).value,
                    json.dumps(list(draft.tags)),
                    now,
                ),
            )
            recipe_id = cursor.lastrowid

        logger.debug("Stored recipe %d ('%s')", recipe_id, draft.title)
        return Recipe(
            id=recipe_id,
            title=draft.title,
            description=draft.description,
            ingredients=list(draft.ingredients),
            instructions=list(draft.instructions),
            nutritional_info=dict(draft.nutritional_info),
            prep_time=draft.prep_time,
            cook_time=draft.cook_time,
            servings=draft.servings,
            difficulty=Difficulty(draft.difficulty),
            tags=list(draft.tags),
            created_at=now,
        )

    async def log_recommendation(
        self,
        user_id: int,
        recipe_id: int,
        matched_conditions: Sequence[str],
    ) -> RecommendationLog:
        """Append one recommendation event. Repeats are kept, never merged."""
        now = datetime.now(timezone.utc).isoformat()
        async with self._conn.acquire() as conn:
            cursor = await conn.execute(
                """INSERT INTO recipe_recommendations
                   (user_id, recipe_id, matched_conditions, created_at)
                   VALUES (?, ?, ?, ?)""",
                (user_id, recipe_id, json.dumps(list(matched_conditions)), now),
            )
            log_id = cursor.lastrowid
        return RecommendationLog(
            id=log_id,
            user_id=user_id,
            recipe_id=recipe_id,
            matched_conditions=list(matched_conditions),
            created_at=now,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_by_id(self, recipe_id: int) -> Optional[Recipe]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                f"SELECT {RECIPE_COLUMNS} FROM recipes WHERE id = ?",
                (recipe_id,),
            )
            return row_to_recipe(rows[0]) if rows else None

    async def find_by_nutrient_tags(
        self, profile: Mapping[str, Priority],
    ) -> list[Recipe]:
        """Recipes tagged '{nutrient}-rich' for any HIGH-priority nutrient.

        Medium and low priorities never drive catalog lookup; a profile with
        no HIGH nutrient returns [] without querying.
        """
        tags = target_tags(profile)
        if not tags:
            return []

        placeholders = ", ".join("?" for _ in tags)
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                f"""SELECT {RECIPE_COLUMNS} FROM recipes
                    WHERE EXISTS (
                        SELECT 1 FROM json_each(recipes.tags)
                        WHERE json_each.value IN ({placeholders})
                    )
                    ORDER BY created_at DESC, id DESC
                    LIMIT ?""",
                (*tags, MAX_TAG_RESULTS),
            )
            return [row_to_recipe(r) for r in rows]

    async def by_tags(self, tags: Sequence[str]) -> list[Recipe]:
        """Recipes carrying every one of the given tags, newest first."""
        wanted = list(dict.fromkeys(t for t in tags if t))
        if not wanted:
            return []

        placeholders = ", ".join("?" for _ in wanted)
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                f"""SELECT {RECIPE_COLUMNS} FROM recipes
                    WHERE (
                        SELECT COUNT(DISTINCT json_each.value) FROM json_each(recipes.tags)
                        WHERE json_each.value IN ({placeholders})
                    ) = ?
                    ORDER BY created_at DESC, id DESC
                    LIMIT ?""",
                (*wanted, len(wanted), MAX_TAG_RESULTS),
            )
            return [row_to_recipe(r) for r in rows]

    async def search(self, term: str, limit: int = 20) -> list[Recipe]:
        """Case-insensitive substring match on title or description."""
        pattern = f"%{term}%"
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                f"""SELECT {RECIPE_COLUMNS} FROM recipes
                    WHERE title LIKE ? OR description LIKE ?
                    ORDER BY created_at DESC, id DESC
                    LIMIT ?""",
                (pattern, pattern, limit),
            )
            return [row_to_recipe(r) for r in rows]

    async def all(self, limit: int = 20, offset: int = 0) -> list[Recipe]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                f"""SELECT {RECIPE_COLUMNS} FROM recipes
                    ORDER BY created_at DESC, id DESC
                    LIMIT ? OFFSET ?""",
                (limit, offset),
            )
            return [row_to_recipe(r) for r in rows]

    async def get_recommendation_history(
        self, user_id: int, limit: int = 20,
    ) -> list[RecommendationLog]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                """SELECT rr.id, rr.user_id, rr.recipe_id, rr.matched_conditions,
                          rr.created_at, r.title, r.description
                   FROM recipe_recommendations rr
                   JOIN recipes r ON rr.recipe_id = r.id
                   WHERE rr.user_id = ?
                   ORDER BY rr.created_at DESC, rr.id DESC
                   LIMIT ?""",
                (user_id, limit),
            )
            return [
                RecommendationLog(
                    id=r[0],
                    user_id=r[1],
                    recipe_id=r[2],
                    matched_conditions=_loads(r[3], []),
                    created_at=r[4] or "",
                    recipe_title=r[5] or "",
                    recipe_description=r[6] or "",
                )
                for r in rows
            ]


# ---------------------------------------------------------------------------
# Row mapping (shared with the favorites repository)
# ---------------------------------------------------------------------------

def row_to_recipe(row) -> Recipe:
    """Map a row selected with RECIPE_COLUMNS (in order) to a Recipe."""
    ingredients = [
        Ingredient(
            item=i.get("item", ""),
            quantity=i.get("quantity"),
            unit=i.get("unit") or "",
        )
        for i in _loads(row[3], [])
        if isinstance(i, dict)
    ]
    difficulty = row[9] if row[9] in {d.value for d in Difficulty} else Difficulty.MEDIUM.value
    return Recipe(
        id=row[0],
        title=row[1] or "",
        description=row[2] or "",
        ingredients=ingredients,
        instructions=_loads(row[4], []),
        nutritional_info=_loads(row[5], {}),
        prep_time=row[6] or 0,
        cook_time=row[7] or 0,
        servings=row[8] or 0,
        difficulty=Difficulty(difficulty),
        tags=_loads(row[10], []),
        created_at=row[11] or "",
    )


def _loads(raw, default):
    if not raw:
        return default
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        logger.warning("Ignoring malformed JSON column value: %r", raw)
        return default
