"""
application.services.recommendation - Core recommendation pipeline.

Orchestrates the gating flow:
    1. Resolve the user's conditions and nutrient profile
    2. Look up catalog recipes tagged for the profile's HIGH nutrients
    3. If the pool is too small, generate new recipes, persist and log them
       one by one (per-item failures are isolated)
    4. Otherwise log the first few existing matches
    5. Return the capped list with the conditions and full profile

Top-level failures are all-or-nothing: they surface as a single
RecommendationFailure and no partial list is returned. Failures while
storing individual generated recipes are logged and skipped.

No per-user lock exists: two concurrent requests for a user with a thin
pool may both generate.

All methods are async. Dependencies are injected via constructor.
"""

from __future__ import annotations

import logging
from typing import Sequence

from domain.exceptions import GenerationError, NoConditionsError, RecommendationFailure
from domain.entities import Recipe
from domain.models import RecipeDraft
from domain.nutrition import target_tags
from domain.ports import RecipeGeneratorPort, RecipeRepository
from application.context import RequestContext
from application.dto import BatchResult, FailedItem, RecommendationResult, UserNeeds
from application.services.nutrition import NutritionService

logger = logging.getLogger(__name__)

MIN_POOL_SIZE = 3
GENERATE_COUNT = 5
LOG_EXISTING_LIMIT = 5
RESPONSE_LIMIT = 10


class RecommendationService:
    """Decides between cached and generated recipes for a user.

    Stateless per call.
    """

    def __init__(
        self,
        nutrition_service: NutritionService,
        recipe_repo: RecipeRepository,
        generator: RecipeGeneratorPort,
        *,
        min_pool_size: int = MIN_POOL_SIZE,
        generate_count: int = GENERATE_COUNT,
        log_existing_limit: int = LOG_EXISTING_LIMIT,
        response_limit: int = RESPONSE_LIMIT,
    ):
        self._nutrition = nutrition_service
        self._recipe_repo = recipe_repo
        self._generator = generator
        self._min_pool_size = min_pool_size
        self._generate_count = generate_count
        self._log_existing_limit = log_existing_limit
        self._response_limit = response_limit

    async def get_recommendations(
        self,
        ctx: RequestContext,
        user_id: int,
    ) -> RecommendationResult:
        """Run the full pipeline for a user.

        Raises:
            NoConditionsError: The user has no medical conditions.
            RecommendationFailure: Profile lookup, catalog lookup or
                generation failed.
        """
        logger.info("Getting recommendations for user %d (trace=%s)", user_id, ctx.trace_id)

        needs = await self._load_needs(ctx, user_id)
        if not needs.conditions:
            raise NoConditionsError(
                "User has no medical conditions set. Please add medical conditions first."
            )

        try:
            recipes = await self._recipe_repo.find_by_nutrient_tags(needs.nutritional_needs)
        except Exception as e:
            logger.exception("Recipe lookup failed for user %d (trace=%s)", user_id, ctx.trace_id)
            raise RecommendationFailure("Failed to get recipe recommendations") from e

        generated = None
        if len(recipes) < self._min_pool_size:
            logger.info(
                "Only %d matching recipe(s) for user %d, generating %d (trace=%s)",
                len(recipes), user_id, self._generate_count, ctx.trace_id,
            )
            drafts = await self._generate(ctx, needs)
            generated = await self._persist_generated(ctx, user_id, drafts, needs.condition_names)
            recipes = recipes + generated.succeeded
        else:
            await self._log_existing(ctx, user_id, recipes, needs.condition_names)

        return RecommendationResult(
            recommendations=recipes[:self._response_limit],
            matched_conditions=needs.conditions,
            nutritional_needs=needs.nutritional_needs,
            generated=generated,
        )

    # ------------------------------------------------------------------
    # Pipeline steps
    # ------------------------------------------------------------------

    async def _load_needs(self, ctx: RequestContext, user_id: int) -> UserNeeds:
        try:
            return await self._nutrition.get_user_needs(ctx, user_id)
        except Exception as e:
            logger.exception("Profile lookup failed for user %d (trace=%s)", user_id, ctx.trace_id)
            raise RecommendationFailure("Failed to get recipe recommendations") from e

    async def _generate(self, ctx: RequestContext, needs: UserNeeds) -> list[RecipeDraft]:
        try:
            return await self._generator.generate(
                needs.nutritional_needs,
                needs.conditions,
                self._generate_count,
                target_tags=target_tags(needs.nutritional_needs),
            )
        except GenerationError as e:
            logger.error("Recipe generation exhausted (trace=%s): %s", ctx.trace_id, e)
            raise RecommendationFailure("Failed to get recipe recommendations") from e

    async def _persist_generated(
        self,
        ctx: RequestContext,
        user_id: int,
        drafts: Sequence[RecipeDraft],
        condition_names: list[str],
    ) -> BatchResult[RecipeDraft]:
        """Store and log each draft independently.

        A draft that cannot be stored is skipped. A stored recipe whose log
        entry fails is still returned, and the failure is recorded too.
        """
        batch: BatchResult[RecipeDraft] = BatchResult()
        for draft in drafts:
            try:
                recipe = await self._recipe_repo.create(draft)
            except Exception as e:
                logger.exception("Error saving recipe '%s' (trace=%s)", draft.title, ctx.trace_id)
                batch.failed.append(FailedItem(input=draft, error=e, stage="persist"))
                continue

            batch.succeeded.append(recipe)
            try:
                await self._recipe_repo.log_recommendation(user_id, recipe.id, condition_names)
            except Exception as e:
                logger.exception(
                    "Error logging recommendation of recipe %s (trace=%s)", recipe.id, ctx.trace_id,
                )
                batch.failed.append(FailedItem(input=draft, error=e, stage="log"))

        if batch.failed:
            logger.warning(
                "%d of %d generated recipe(s) had failures (trace=%s)",
                len(batch.failed), len(drafts), ctx.trace_id,
            )
        return batch

    async def _log_existing(
        self,
        ctx: RequestContext,
        user_id: int,
        recipes: Sequence[Recipe],
        condition_names: list[str],
    ) -> None:
        for recipe in recipes[:self._log_existing_limit]:
            try:
                await self._recipe_repo.log_recommendation(user_id, recipe.id, condition_names)
            except Exception:
                logger.exception(
                    "Error logging recommendation of recipe %s (trace=%s)", recipe.id, ctx.trace_id,
                )
