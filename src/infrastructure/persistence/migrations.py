"""
infrastructure.persistence.migrations - Database schema creation.

Called once at startup by the factory. JSON-valued fields are stored as
TEXT and decoded by the repositories.
"""

from __future__ import annotations

import logging

from infrastructure.persistence.connection import AsyncSQLiteConnection

logger = logging.getLogger(__name__)

_TABLES = [
    """CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        email TEXT NOT NULL UNIQUE,
        name TEXT NOT NULL,
        created_at TEXT,
        updated_at TEXT
    )""",
    """CREATE TABLE IF NOT EXISTS medical_conditions (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL UNIQUE,
        description TEXT,
        recommended_nutrients TEXT NOT NULL DEFAULT '{}',
        created_at TEXT
    )""",
    """CREATE TABLE IF NOT EXISTS user_medical_conditions (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        medical_condition_id INTEGER NOT NULL,
        severity TEXT NOT NULL DEFAULT 'moderate'
            CHECK (severity IN ('mild', 'moderate', 'severe')),
        diagnosed_at TEXT,
        notes TEXT,
        created_at TEXT,
        UNIQUE (user_id, medical_condition_id),
        FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE,
        FOREIGN KEY (medical_condition_id) REFERENCES medical_conditions(id)
    )""",
    """CREATE TABLE IF NOT EXISTS recipes (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        description TEXT,
        ingredients TEXT NOT NULL DEFAULT '[]',
        instructions TEXT NOT NULL DEFAULT '[]',
        nutritional_info TEXT NOT NULL DEFAULT '{}',
        prep_time INTEGER,
        cook_time INTEGER,
        servings INTEGER,
        difficulty TEXT CHECK (difficulty IN ('easy', 'medium', 'hard')),
        tags TEXT NOT NULL DEFAULT '[]',
        created_at TEXT
    )""",
    """CREATE TABLE IF NOT EXISTS user_favorites (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        recipe_id INTEGER NOT NULL,
        created_at TEXT,
        UNIQUE (user_id, recipe_id),
        FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE,
        FOREIGN KEY (recipe_id) REFERENCES recipes(id) ON DELETE CASCADE
    )""",
    """CREATE TABLE IF NOT EXISTS recipe_recommendations (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        recipe_id INTEGER NOT NULL,
        matched_conditions TEXT NOT NULL DEFAULT '[]',
        created_at TEXT,
        FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE,
        FOREIGN KEY (recipe_id) REFERENCES recipes(id) ON DELETE CASCADE
    )""",
    "CREATE INDEX IF NOT EXISTS idx_recipes_created_at ON recipes(created_at)",
    "CREATE INDEX IF NOT EXISTS idx_umc_user ON user_medical_conditions(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_recs_user ON recipe_recommendations(user_id)",
]


async def run_migrations(connection: AsyncSQLiteConnection) -> None:
    """Create all tables if they don't exist.

    Safe to call multiple times (uses IF NOT EXISTS).
    """
    async with connection.acquire() as conn:
        for ddl in _TABLES:
            await conn.execute(ddl)
    logger.info("All tables created (or already exist).")
