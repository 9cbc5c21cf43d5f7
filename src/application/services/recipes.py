"""
application.services.recipes - Recipe browsing, favorites and history.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from domain.entities import Favorite, Recipe, RecommendationLog
from domain.exceptions import NotFoundError, ValidationError
from domain.ports import FavoriteRepository, RecipeRepository, UserRepository
from application.context import RequestContext

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20


class RecipeService:
    """Read access to stored recipes plus favorites management."""

    def __init__(
        self,
        recipe_repo: RecipeRepository,
        favorite_repo: FavoriteRepository,
        user_repo: UserRepository,
    ):
        self._recipe_repo = recipe_repo
        self._favorite_repo = favorite_repo
        self._user_repo = user_repo

    async def search(
        self,
        query: Optional[str] = None,
        tags: Sequence[str] = (),
        limit: int = DEFAULT_LIMIT,
    ) -> list[Recipe]:
        """Tags take precedence over the text query; neither lists everything."""
        tags = [t.strip() for t in tags if t and t.strip()]
        if tags:
            return await self._recipe_repo.by_tags(tags)
        if query and query.strip():
            return await self._recipe_repo.search(query.strip(), limit)
        return await self._recipe_repo.all(limit)

    async def get(self, recipe_id: int, user_id: Optional[int] = None) -> tuple[Recipe, bool]:
        """Return the recipe and whether ``user_id`` has favorited it."""
        recipe = await self._recipe_repo.get_by_id(recipe_id)
        if recipe is None:
            raise NotFoundError("Recipe not found")
        favorited = False
        if user_id is not None:
            favorited = await self._favorite_repo.is_favorited(user_id, recipe_id)
        return recipe, favorited

    async def add_favorite(
        self,
        ctx: RequestContext,
        user_id: Optional[int],
        recipe_id: Optional[int],
    ) -> Favorite:
        """Favorite a recipe. Repeating the call returns the existing favorite."""
        if user_id is None or recipe_id is None:
            raise ValidationError("userId and recipeId are required")
        if await self._recipe_repo.get_by_id(recipe_id) is None:
            raise NotFoundError("Recipe not found")
        if await self._user_repo.get_by_id(user_id) is None:
            raise NotFoundError("User not found")

        favorite = await self._favorite_repo.add(user_id, recipe_id)
        logger.debug(
            "User %d favorited recipe %d (trace=%s)", user_id, recipe_id, ctx.trace_id,
        )
        return favorite

    async def remove_favorite(
        self,
        ctx: RequestContext,
        user_id: int,
        recipe_id: int,
    ) -> Favorite:
        removed = await self._favorite_repo.remove(user_id, recipe_id)
        if removed is None:
            raise NotFoundError("Favorite not found")
        logger.debug(
            "User %d unfavorited recipe %d (trace=%s)", user_id, recipe_id, ctx.trace_id,
        )
        return removed

    async def list_favorites(self, user_id: int) -> list[tuple[Recipe, str]]:
        return await self._favorite_repo.list_for_user(user_id)

    async def history(self, user_id: int, limit: int = DEFAULT_LIMIT) -> list[RecommendationLog]:
        return await self._recipe_repo.get_recommendation_history(user_id, limit)
