"""
domain.ports - Abstract interfaces (Protocols) for all system boundaries.

These define WHAT the system needs without specifying HOW. Infrastructure
modules provide concrete implementations. Application services depend only
on these protocols, never on concrete classes.

Using typing.Protocol (structural typing) instead of ABC: any class that
implements the methods satisfies the port without explicit inheritance.
"""

from __future__ import annotations

from typing import Mapping, Optional, Protocol, Sequence, runtime_checkable

from domain.models import (
    ChatMessage,
    ConditionSummary,
    Priority,
    RecipeContext,
    RecipeDraft,
)
from domain.entities import (
    User,
    MedicalCondition,
    UserCondition,
    Recipe,
    RecommendationLog,
    Favorite,
)


# ---------------------------------------------------------------------------
# AI Component Ports
# ---------------------------------------------------------------------------

@runtime_checkable
class RecipeGeneratorPort(Protocol):
    """Synthesize new recipes for a nutrient profile.

    Returns at most ``count`` drafts, or raises GenerationError once every
    backing model has been exhausted.
    """

    async def generate(
        self,
        profile: Mapping[str, Priority],
        conditions: Sequence[ConditionSummary],
        count: int,
        target_tags: Sequence[str] = (),
    ) -> list[RecipeDraft]: ...


@runtime_checkable
class CookingAssistantPort(Protocol):
    """Answer cooking questions about a specific recipe."""

    async def reply(
        self,
        messages: Sequence[ChatMessage],
        recipe: RecipeContext,
    ) -> ChatMessage: ...


# ---------------------------------------------------------------------------
# Repository Ports
# ---------------------------------------------------------------------------

@runtime_checkable
class UserRepository(Protocol):
    """CRUD operations for User entities."""

    async def get_by_id(self, user_id: int) -> Optional[User]: ...
    async def get_by_email(self, email: str) -> Optional[User]: ...
    async def save(self, user: User) -> User: ...
    async def update(self, user_id: int, name: Optional[str], email: Optional[str]) -> Optional[User]: ...


@runtime_checkable
class ConditionRepository(Protocol):
    """Read access to the medical condition catalog (plus admin insert)."""

    async def get_all(self) -> list[MedicalCondition]: ...
    async def get_by_id(self, condition_id: int) -> Optional[MedicalCondition]: ...
    async def get_by_name(self, name: str) -> Optional[MedicalCondition]: ...
    async def search(self, term: str) -> list[MedicalCondition]: ...
    async def save(self, condition: MedicalCondition) -> MedicalCondition: ...


@runtime_checkable
class UserConditionRepository(Protocol):
    """A user's recorded conditions."""

    async def add(self, user_condition: UserCondition) -> UserCondition: ...
    async def get_by_user(self, user_id: int) -> list[UserCondition]: ...
    async def remove(self, user_id: int, condition_id: int) -> Optional[UserCondition]: ...


@runtime_checkable
class RecipeRepository(Protocol):
    """Recipe storage, lookup and recommendation logging."""

    async def create(self, draft: RecipeDraft) -> Recipe: ...
    async def get_by_id(self, recipe_id: int) -> Optional[Recipe]: ...
    async def find_by_nutrient_tags(self, profile: Mapping[str, Priority]) -> list[Recipe]: ...
    async def by_tags(self, tags: Sequence[str]) -> list[Recipe]: ...
    async def search(self, term: str, limit: int = 20) -> list[Recipe]: ...
    async def all(self, limit: int = 20, offset: int = 0) -> list[Recipe]: ...
    async def log_recommendation(
        self, user_id: int, recipe_id: int, matched_conditions: Sequence[str],
    ) -> RecommendationLog: ...
    async def get_recommendation_history(self, user_id: int, limit: int = 20) -> list[RecommendationLog]: ...


@runtime_checkable
class FavoriteRepository(Protocol):
    """User favorites."""

    async def add(self, user_id: int, recipe_id: int) -> Favorite: ...
    async def remove(self, user_id: int, recipe_id: int) -> Optional[Favorite]: ...
    async def list_for_user(self, user_id: int) -> list[tuple[Recipe, str]]: ...
    async def is_favorited(self, user_id: int, recipe_id: int) -> bool: ...
