"""
factory - Composition root for the diet recipe recommender.

ALL dependency wiring happens here. No other module constructs its own
dependencies. Adapters (CLI, REST) call this factory to get fully
configured services.

Usage:
    from factory import ServiceFactory
    from infrastructure.config import Settings

    config = Settings.from_env()
    factory = ServiceFactory(config)
    await factory.initialize()  # one-time startup

    service = factory.create_recommendation_service()
    result = await service.get_recommendations(ctx, user_id)

    await factory.close()       # at shutdown
"""

from __future__ import annotations

import logging
from typing import Callable, Mapping, Optional, Sequence

from domain.exceptions import GenerationError
from domain.models import ConditionSummary, Priority, RecipeDraft
from domain.ports import CookingAssistantPort, RecipeGeneratorPort
from infrastructure.config import Settings
from infrastructure.persistence.connection import AsyncSQLiteConnection
from infrastructure.persistence.migrations import run_migrations
from infrastructure.persistence.seed import seed_conditions
from infrastructure.persistence.user_repo import SQLiteUserRepository
from infrastructure.persistence.condition_repo import (
    SQLiteConditionRepository,
    SQLiteUserConditionRepository,
)
from infrastructure.persistence.recipe_repo import SQLiteRecipeRepository
from infrastructure.persistence.favorite_repo import SQLiteFavoriteRepository
from infrastructure.llm.llm_builder import build_llm
from infrastructure.llm.recipe_generator import LLMRecipeGenerator
from infrastructure.llm.cooking_assistant import LLMCookingAssistant
from application.services.nutrition import NutritionService
from application.services.recommendation import RecommendationService
from application.services.conditions import ConditionService
from application.services.recipes import RecipeService
from application.services.users import UserService
from application.services.cooking_chat import CookingChatService

logger = logging.getLogger(__name__)

CHAT_MAX_TOKENS = 1024


class _DeferredGenerator:
    """RecipeGeneratorPort that builds the real generator on first use.

    Recommendation requests served from the existing pool never touch the
    LLM configuration. A configuration error surfaces as GenerationError
    on the generation path only.
    """

    def __init__(self, build: Callable[[], RecipeGeneratorPort]):
        self._build = build

    async def generate(
        self,
        profile: Mapping[str, Priority],
        conditions: Sequence[ConditionSummary],
        count: int,
        target_tags: Sequence[str] = (),
    ) -> list[RecipeDraft]:
        try:
            generator = self._build()
        except ValueError as e:
            logger.error("Recipe generator is misconfigured: %s", e)
            raise GenerationError(f"Recipe generator unavailable: {e}") from e
        return await generator.generate(profile, conditions, count, target_tags=target_tags)


class ServiceFactory:
    """Composition root: wires all dependencies together.

    Call initialize() once at startup, then create services as needed.
    A generator or assistant passed in replaces the LLM-backed default
    (tests pass fakes here).
    """

    def __init__(
        self,
        config: Settings,
        *,
        generator: Optional[RecipeGeneratorPort] = None,
        assistant: Optional[CookingAssistantPort] = None,
    ):
        self._config = config
        self._connection = AsyncSQLiteConnection(config.db_path)

        # Lazy singletons for LLM clients (built on first use)
        self._generator = generator
        self._assistant = assistant
        self._initialized = False

    @property
    def config(self) -> Settings:
        return self._config

    async def initialize(self) -> None:
        """One-time startup: run migrations and seed the condition catalog.

        Must be called before creating services.
        """
        logger.info("Initializing ServiceFactory (db=%s)...", self._config.db_path)

        await run_migrations(self._connection)
        logger.info("Database migrations complete")

        if self._config.seed_catalog:
            added = await seed_conditions(self.create_condition_repository())
            logger.info("Condition catalog seeded (%d new)", added)

        self._initialized = True
        logger.info("ServiceFactory ready")

    async def close(self) -> None:
        await self._connection.close()
        self._initialized = False
        logger.info("ServiceFactory closed")

    # ------------------------------------------------------------------
    # Repositories
    # ------------------------------------------------------------------

    def create_user_repository(self) -> SQLiteUserRepository:
        return SQLiteUserRepository(self._connection)

    def create_condition_repository(self) -> SQLiteConditionRepository:
        return SQLiteConditionRepository(self._connection)

    def create_user_condition_repository(self) -> SQLiteUserConditionRepository:
        return SQLiteUserConditionRepository(self._connection)

    def create_recipe_repository(self) -> SQLiteRecipeRepository:
        return SQLiteRecipeRepository(self._connection)

    def create_favorite_repository(self) -> SQLiteFavoriteRepository:
        return SQLiteFavoriteRepository(self._connection)

    # ------------------------------------------------------------------
    # Service creation
    # ------------------------------------------------------------------

    def create_nutrition_service(self) -> NutritionService:
        self._ensure_initialized()
        return NutritionService(self.create_user_condition_repository())

    def create_recommendation_service(self) -> RecommendationService:
        """Create a RecommendationService with all dependencies wired."""
        self._ensure_initialized()
        return RecommendationService(
            nutrition_service=self.create_nutrition_service(),
            recipe_repo=self.create_recipe_repository(),
            generator=_DeferredGenerator(self.get_generator),
            min_pool_size=self._config.recommendation_min_pool,
            generate_count=self._config.recommendation_generate_count,
            log_existing_limit=self._config.recommendation_log_limit,
            response_limit=self._config.recommendation_response_limit,
        )

    def create_condition_service(self) -> ConditionService:
        self._ensure_initialized()
        return ConditionService(
            condition_repo=self.create_condition_repository(),
            user_condition_repo=self.create_user_condition_repository(),
            user_repo=self.create_user_repository(),
        )

    def create_recipe_service(self) -> RecipeService:
        self._ensure_initialized()
        return RecipeService(
            recipe_repo=self.create_recipe_repository(),
            favorite_repo=self.create_favorite_repository(),
            user_repo=self.create_user_repository(),
        )

    def create_user_service(self) -> UserService:
        self._ensure_initialized()
        return UserService(self.create_user_repository())

    def create_cooking_chat_service(self) -> CookingChatService:
        self._ensure_initialized()
        return CookingChatService(self.get_assistant())

    # ------------------------------------------------------------------
    # LLM-backed ports
    # ------------------------------------------------------------------

    def get_generator(self) -> RecipeGeneratorPort:
        """The recipe generator, built over the configured model chain."""
        if self._generator is None:
            models = [
                (name, build_llm(
                    self._config, name,
                    temperature=0.7,
                    max_tokens=self._config.llm_max_tokens,
                ))
                for name in self._config.generator_models
            ]
            logger.info("Recipe generator chain: %s", [name for name, _ in models])
            self._generator = LLMRecipeGenerator(
                models,
                max_retries=self._config.llm_max_retries,
                backoff_seconds=self._config.llm_retry_backoff_seconds,
            )
        return self._generator

    def get_assistant(self) -> CookingAssistantPort:
        if self._assistant is None:
            self._assistant = LLMCookingAssistant(
                build_llm(self._config, temperature=0.7, max_tokens=CHAT_MAX_TOKENS),
                max_attempts=self._config.chat_max_attempts,
                retry_delay_seconds=self._config.chat_retry_delay_seconds,
            )
        return self._assistant

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError(
                "ServiceFactory not initialized. Call await factory.initialize() first."
            )
