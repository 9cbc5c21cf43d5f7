"""
application.dto - Data Transfer Objects for service input/output.

These are the structured results that services return to callers
(REST endpoints, CLI adapters, tests).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

from domain.models import ConditionSummary, Priority
from domain.entities import Recipe, UserCondition

T = TypeVar("T")


@dataclass(frozen=True)
class FailedItem(Generic[T]):
    """One input of a batch that could not be processed.

    stage is "persist" when the item never reached storage and "log" when it
    was stored but its recommendation log entry could not be written.
    """
    input: T
    error: Exception
    stage: str = "persist"


@dataclass
class BatchResult(Generic[T]):
    """Outcome of a per-item batch where failures are isolated."""
    succeeded: list[Recipe] = field(default_factory=list)
    failed: list[FailedItem[T]] = field(default_factory=list)


@dataclass(frozen=True)
class UserNeeds:
    """A user's conditions and the nutrient profile derived from them."""
    conditions: list[ConditionSummary]
    nutritional_needs: dict[str, Priority]
    user_conditions: list[UserCondition] = field(default_factory=list)

    @property
    def condition_names(self) -> list[str]:
        return [c.name for c in self.conditions]


@dataclass(frozen=True)
class RecommendationResult:
    """Complete result from the recommendation pipeline.

    generated is None when the existing pool was large enough and generation
    was skipped.
    """
    recommendations: list[Recipe]
    matched_conditions: list[ConditionSummary]
    nutritional_needs: dict[str, Priority]
    generated: Optional[BatchResult] = None

    @property
    def used_generation(self) -> bool:
        return self.generated is not None
