"""
domain.entities - Persistence-aware types (have IDs, timestamps).

Decoupled from any persistence strategy: no SQL concerns, no DB imports.
Timestamps are set by the repository implementations, not by the entities
themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from domain.models import Difficulty, Ingredient, Priority


@dataclass
class User:
    """Core user entity."""
    id: Optional[int] = None
    email: str = ""
    name: str = ""
    created_at: str = ""
    updated_at: str = ""


@dataclass
class MedicalCondition:
    """Catalog entry: a condition and the nutrients it calls for."""
    id: Optional[int] = None
    name: str = ""
    description: str = ""
    recommended_nutrients: dict[str, Priority] = field(default_factory=dict)
    created_at: str = ""


@dataclass
class UserCondition:
    """A condition recorded for a user, joined with its catalog entry."""
    id: Optional[int] = None
    user_id: Optional[int] = None
    condition_id: Optional[int] = None
    severity: str = "moderate"
    diagnosed_at: str = ""
    notes: Optional[str] = None
    created_at: str = ""
    # Populated from the catalog on reads
    condition_name: str = ""
    description: str = ""
    recommended_nutrients: dict[str, Priority] = field(default_factory=dict)


@dataclass
class Recipe:
    """A persisted recipe. Immutable once created."""
    id: Optional[int] = None
    title: str = ""
    description: str = ""
    ingredients: list[Ingredient] = field(default_factory=list)
    instructions: list[str] = field(default_factory=list)
    nutritional_info: dict[str, Any] = field(default_factory=dict)
    prep_time: int = 0
    cook_time: int = 0
    servings: int = 4
    difficulty: Difficulty = Difficulty.MEDIUM
    tags: list[str] = field(default_factory=list)
    created_at: str = ""


@dataclass
class RecommendationLog:
    """Audit record: which recipe was shown to which user, and why."""
    id: Optional[int] = None
    user_id: Optional[int] = None
    recipe_id: Optional[int] = None
    matched_conditions: list[str] = field(default_factory=list)
    created_at: str = ""
    # Populated by history reads
    recipe_title: str = ""
    recipe_description: str = ""


@dataclass
class Favorite:
    """A (user, recipe) bookmark."""
    id: Optional[int] = None
    user_id: Optional[int] = None
    recipe_id: Optional[int] = None
    created_at: str = ""
