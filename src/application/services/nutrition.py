"""
application.services.nutrition - A user's conditions and nutrient profile.

The profile is recomputed from the user's current conditions on every call;
nothing is cached or persisted.
"""

from __future__ import annotations

import logging

from domain.models import ConditionSummary
from domain.nutrition import compute_needs
from domain.ports import UserConditionRepository
from application.context import RequestContext
from application.dto import UserNeeds

logger = logging.getLogger(__name__)


class NutritionService:
    """Resolves a user's conditions into an aggregated nutrient profile."""

    def __init__(self, user_condition_repo: UserConditionRepository):
        self._user_condition_repo = user_condition_repo

    async def get_user_needs(self, ctx: RequestContext, user_id: int) -> UserNeeds:
        """Load the user's conditions (newest first) and merge their nutrients.

        Returns an empty profile when the user has no conditions; callers
        decide whether that is an error.
        """
        user_conditions = await self._user_condition_repo.get_by_user(user_id)
        needs = compute_needs(uc.recommended_nutrients for uc in user_conditions)

        logger.debug(
            "User %d has %d condition(s), %d nutrient(s) in profile (trace=%s)",
            user_id, len(user_conditions), len(needs), ctx.trace_id,
        )
        return UserNeeds(
            conditions=[
                ConditionSummary(name=uc.condition_name, severity=uc.severity)
                for uc in user_conditions
            ],
            nutritional_needs=needs,
            user_conditions=user_conditions,
        )
