"""
infrastructure.persistence.condition_repo - SQLite medical condition repositories.

SQLiteConditionRepository implements ConditionRepository (the read-only
catalog plus an admin insert used by seeding).
SQLiteUserConditionRepository implements UserConditionRepository.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from domain.entities import MedicalCondition, UserCondition
from domain.exceptions import DuplicateEntryError
from domain.models import Priority
from infrastructure.persistence.connection import AsyncSQLiteConnection, is_unique_violation

logger = logging.getLogger(__name__)

_CONDITION_COLUMNS = "id, name, description, recommended_nutrients, created_at"


class SQLiteConditionRepository:
    """Async SQLite implementation of ConditionRepository."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    async def get_all(self) -> list[MedicalCondition]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                f"SELECT {_CONDITION_COLUMNS} FROM medical_conditions ORDER BY name ASC",
            )
            return [self._row_to_condition(r) for r in rows]

    async def get_by_id(self, condition_id: int) -> Optional[MedicalCondition]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                f"SELECT {_CONDITION_COLUMNS} FROM medical_conditions WHERE id = ?",
                (condition_id,),
            )
            return self._row_to_condition(rows[0]) if rows else None

    async def get_by_name(self, name: str) -> Optional[MedicalCondition]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                f"SELECT {_CONDITION_COLUMNS} FROM medical_conditions WHERE name = ? COLLATE NOCASE",
                (name,),
            )
            return self._row_to_condition(rows[0]) if rows else None

    async def search(self, term: str) -> list[MedicalCondition]:
        pattern = f"%{term}%"
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                f"""SELECT {_CONDITION_COLUMNS} FROM medical_conditions
                    WHERE name LIKE ? OR description LIKE ?
                    ORDER BY name ASC""",
                (pattern, pattern),
            )
            return [self._row_to_condition(r) for r in rows]

    async def save(self, condition: MedicalCondition) -> MedicalCondition:
        now = datetime.now(timezone.utc).isoformat()
        nutrients = {n: Priority(p).value for n, p in condition.recommended_nutrients.items()}
        try:
            async with self._conn.acquire() as conn:
                cursor = await conn.execute(
                    """INSERT INTO medical_conditions
                       (name, description, recommended_nutrients, created_at)
                       VALUES (?, ?, ?, ?)""",
                    (condition.name, condition.description, json.dumps(nutrients), now),
                )
                condition_id = cursor.lastrowid
        except Exception as e:
            if is_unique_violation(e):
                raise DuplicateEntryError(f"Medical condition '{condition.name}' already exists") from e
            raise
        return MedicalCondition(
            id=condition_id,
            name=condition.name,
            description=condition.description,
            recommended_nutrients={n: Priority(p) for n, p in nutrients.items()},
            created_at=now,
        )

    @staticmethod
    def _row_to_condition(row) -> MedicalCondition:
        return MedicalCondition(
            id=row[0],
            name=row[1],
            description=row[2] or "",
            recommended_nutrients=_decode_nutrients(row[3]),
            created_at=row[4] or "",
        )


class SQLiteUserConditionRepository:
    """Async SQLite implementation of UserConditionRepository."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    async def add(self, user_condition: UserCondition) -> UserCondition:
        """Insert a (user, condition) row. A repeat pair raises DuplicateEntryError."""
        now = datetime.now(timezone.utc)
        try:
            async with self._conn.acquire() as conn:
                cursor = await conn.execute(
                    """INSERT INTO user_medical_conditions
                       (user_id, medical_condition_id, severity, diagnosed_at, notes, created_at)
                       VALUES (?, ?, ?, ?, ?, ?)""",
                    (user_condition.user_id, user_condition.condition_id,
                     user_condition.severity, now.date().isoformat(),
                     user_condition.notes, now.isoformat()),
                )
                row_id = cursor.lastrowid
        except Exception as e:
            if is_unique_violation(e):
                raise DuplicateEntryError(
                    f"User {user_condition.user_id} already has condition {user_condition.condition_id}"
                ) from e
            raise
        return UserCondition(
            id=row_id,
            user_id=user_condition.user_id,
            condition_id=user_condition.condition_id,
            severity=user_condition.severity,
            diagnosed_at=now.date().isoformat(),
            notes=user_condition.notes,
            created_at=now.isoformat(),
        )

    async def get_by_user(self, user_id: int) -> list[UserCondition]:
        """The user's conditions joined with the catalog, newest first."""
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                """SELECT umc.id, umc.user_id, umc.medical_condition_id, umc.severity,
                          umc.diagnosed_at, umc.notes, umc.created_at,
                          mc.name, mc.description, mc.recommended_nutrients
                   FROM user_medical_conditions umc
                   JOIN medical_conditions mc ON umc.medical_condition_id = mc.id
                   WHERE umc.user_id = ?
                   ORDER BY umc.created_at DESC, umc.id DESC""",
                (user_id,),
            )
            return [self._row_to_user_condition(r) for r in rows]

    async def remove(self, user_id: int, condition_id: int) -> Optional[UserCondition]:
        """Delete the pair; returns the removed row or None if there was none."""
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                """SELECT id, user_id, medical_condition_id, severity,
                          diagnosed_at, notes, created_at
                   FROM user_medical_conditions
                   WHERE user_id = ? AND medical_condition_id = ?""",
                (user_id, condition_id),
            )
            if not rows:
                return None
            await conn.execute(
                "DELETE FROM user_medical_conditions WHERE id = ?",
                (rows[0][0],),
            )
            return self._row_to_user_condition(rows[0])

    @staticmethod
    def _row_to_user_condition(row) -> UserCondition:
        uc = UserCondition(
            id=row[0],
            user_id=row[1],
            condition_id=row[2],
            severity=row[3] or "moderate",
            diagnosed_at=row[4] or "",
            notes=row[5],
            created_at=row[6] or "",
        )
        if len(row) > 7:
            uc.condition_name = row[7] or ""
            uc.description = row[8] or ""
            uc.recommended_nutrients = _decode_nutrients(row[9])
        return uc


def _decode_nutrients(raw: Optional[str]) -> dict[str, Priority]:
    """Decode the stored nutrient map, skipping levels that are not priorities."""
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        logger.warning("Ignoring malformed recommended_nutrients value: %r", raw)
        return {}
    nutrients: dict[str, Priority] = {}
    for nutrient, level in data.items():
        priority = Priority.parse(level)
        if priority is not None:
            nutrients[nutrient] = priority
    return nutrients
