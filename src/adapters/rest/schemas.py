"""Pydantic models for REST API request/response validation.

Wire fields are camelCase; Python attributes stay snake_case.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from domain.entities import Favorite, MedicalCondition, Recipe, RecommendationLog, User, UserCondition
from domain.models import ChatMessage, ConditionSummary, RecipeContext
from domain.nutrition import profile_to_dict


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


# --- Requests ---

class UserCreateBody(CamelModel):
    email: Optional[str] = None
    name: Optional[str] = None


class UserUpdateBody(CamelModel):
    email: Optional[str] = None
    name: Optional[str] = None


class UserConditionBody(CamelModel):
    condition_id: Optional[int] = None
    severity: Optional[str] = None
    notes: Optional[str] = None


class FavoriteBody(CamelModel):
    user_id: Optional[int] = None
    recipe_id: Optional[int] = None


class ChatMessageIn(CamelModel):
    role: str
    content: str


class RecipeContextIn(CamelModel):
    title: str = ""
    description: str = ""
    ingredients: list[Any] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)


class ChatBody(CamelModel):
    messages: list[ChatMessageIn] = Field(default_factory=list)
    recipe_context: Optional[RecipeContextIn] = None

    def to_domain(self) -> tuple[list[ChatMessage], Optional[RecipeContext]]:
        messages = [ChatMessage(role=m.role, content=m.content) for m in self.messages]
        recipe = None
        if self.recipe_context is not None:
            rc = self.recipe_context
            recipe = RecipeContext(
                title=rc.title,
                description=rc.description,
                ingredients=list(rc.ingredients),
                instructions=list(rc.instructions),
            )
        return messages, recipe


# --- Responses ---

class IngredientOut(CamelModel):
    item: str
    quantity: Optional[Any] = None
    unit: str = ""


class RecipeOut(CamelModel):
    id: int
    title: str
    description: str
    ingredients: list[IngredientOut]
    instructions: list[str]
    nutritional_info: dict[str, Any]
    prep_time: int
    cook_time: int
    servings: int
    difficulty: str
    tags: list[str]
    created_at: str

    @classmethod
    def from_entity(cls, recipe: Recipe, **extra: Any) -> RecipeOut:
        return cls(
            id=recipe.id,
            title=recipe.title,
            description=recipe.description,
            ingredients=[
                IngredientOut(item=i.item, quantity=i.quantity, unit=i.unit)
                for i in recipe.ingredients
            ],
            instructions=list(recipe.instructions),
            nutritional_info=dict(recipe.nutritional_info),
            prep_time=recipe.prep_time,
            cook_time=recipe.cook_time,
            servings=recipe.servings,
            difficulty=recipe.difficulty.value,
            tags=list(recipe.tags),
            created_at=recipe.created_at,
            **extra,
        )


class RecipeDetailOut(RecipeOut):
    is_favorited: bool = False


class FavoriteRecipeOut(RecipeOut):
    favorited_at: str = ""


class FavoriteOut(CamelModel):
    id: int
    user_id: int
    recipe_id: int
    created_at: str

    @classmethod
    def from_entity(cls, favorite: Favorite) -> FavoriteOut:
        return cls(
            id=favorite.id,
            user_id=favorite.user_id,
            recipe_id=favorite.recipe_id,
            created_at=favorite.created_at,
        )


class ConditionOut(CamelModel):
    id: int
    name: str
    description: str
    recommended_nutrients: dict[str, str]
    created_at: str

    @classmethod
    def from_entity(cls, condition: MedicalCondition) -> ConditionOut:
        return cls(
            id=condition.id,
            name=condition.name,
            description=condition.description,
            recommended_nutrients=profile_to_dict(condition.recommended_nutrients),
            created_at=condition.created_at,
        )


class UserConditionOut(CamelModel):
    id: int
    user_id: int
    condition_id: int
    name: str
    description: str
    recommended_nutrients: dict[str, str]
    severity: str
    diagnosed_at: str
    notes: Optional[str] = None
    created_at: str

    @classmethod
    def from_entity(cls, uc: UserCondition) -> UserConditionOut:
        return cls(
            id=uc.id,
            user_id=uc.user_id,
            condition_id=uc.condition_id,
            name=uc.condition_name,
            description=uc.description,
            recommended_nutrients=profile_to_dict(uc.recommended_nutrients),
            severity=uc.severity,
            diagnosed_at=uc.diagnosed_at,
            notes=uc.notes,
            created_at=uc.created_at,
        )


class UserOut(CamelModel):
    id: int
    email: str
    name: str
    created_at: str
    updated_at: str

    @classmethod
    def from_entity(cls, user: User, **extra: Any) -> UserOut:
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            created_at=user.created_at,
            updated_at=user.updated_at,
            **extra,
        )


class UserDetailOut(UserOut):
    medical_conditions: list[UserConditionOut] = Field(default_factory=list)


class ConditionSummaryOut(CamelModel):
    name: str
    severity: str

    @classmethod
    def from_summary(cls, summary: ConditionSummary) -> ConditionSummaryOut:
        return cls(name=summary.name, severity=summary.severity)


class HistoryEntryOut(CamelModel):
    id: int
    recipe_id: int
    title: str
    description: str
    matched_conditions: list[str]
    created_at: str

    @classmethod
    def from_entity(cls, log: RecommendationLog) -> HistoryEntryOut:
        return cls(
            id=log.id,
            recipe_id=log.recipe_id,
            title=log.recipe_title,
            description=log.recipe_description,
            matched_conditions=list(log.matched_conditions),
            created_at=log.created_at,
        )


class ChatMessageOut(CamelModel):
    role: str
    content: str
