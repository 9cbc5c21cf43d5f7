"""
domain.models - Value objects shared by every layer.

Immutable data containers with no dependencies on infrastructure
(no LangChain, no SQLite).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class Priority(str, Enum):
    """How strongly a nutrient should be emphasized for a condition."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]

    @classmethod
    def parse(cls, value: object) -> Optional[Priority]:
        """Return the matching Priority, or None for unknown values."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return None
        return None


_PRIORITY_RANK = {Priority.LOW: 1, Priority.MEDIUM: 2, Priority.HIGH: 3}


class Severity(str, Enum):
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


# ---------------------------------------------------------------------------
# Recipes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Ingredient:
    """One line of a recipe's ingredient list."""
    item: str
    quantity: Optional[Union[int, float, str]] = None
    unit: str = ""


@dataclass(frozen=True)
class RecipeDraft:
    """A recipe that has not been persisted yet (no id, no timestamps).

    Produced by the recipe generator or by catalog seeding.
    """
    title: str
    description: str = ""
    ingredients: list[Ingredient] = field(default_factory=list)
    instructions: list[str] = field(default_factory=list)
    nutritional_info: dict[str, Any] = field(default_factory=dict)
    prep_time: int = 0
    cook_time: int = 0
    servings: int = 4
    difficulty: Difficulty = Difficulty.MEDIUM
    tags: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Condition summaries
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ConditionSummary:
    """Name and severity of one of the user's conditions, as shown to callers."""
    name: str
    severity: str


@dataclass(frozen=True)
class ChatMessage:
    """A single turn of a cooking-assistant conversation."""
    role: str  # "user" or "assistant"
    content: str


@dataclass(frozen=True)
class RecipeContext:
    """The recipe a cooking-assistant conversation is about."""
    title: str
    description: str = ""
    ingredients: list[Any] = field(default_factory=list)
    instructions: list[str] = field(default_factory=list)
