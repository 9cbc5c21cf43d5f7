"""
application.services.conditions - Condition catalog and user conditions.

The catalog is read-only reference data. A user's conditions can be added
and removed; adding the same condition twice is a conflict, never an update.
"""

from __future__ import annotations

import logging
from typing import Optional

from domain.entities import MedicalCondition, UserCondition
from domain.exceptions import ConflictError, DuplicateEntryError, NotFoundError, ValidationError
from domain.models import Severity
from domain.ports import ConditionRepository, UserConditionRepository, UserRepository
from application.context import RequestContext

logger = logging.getLogger(__name__)


class ConditionService:
    """Catalog lookups plus per-user condition management."""

    def __init__(
        self,
        condition_repo: ConditionRepository,
        user_condition_repo: UserConditionRepository,
        user_repo: UserRepository,
    ):
        self._condition_repo = condition_repo
        self._user_condition_repo = user_condition_repo
        self._user_repo = user_repo

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    async def list_catalog(self) -> list[MedicalCondition]:
        return await self._condition_repo.get_all()

    async def search_catalog(self, term: Optional[str]) -> list[MedicalCondition]:
        if not term or not term.strip():
            raise ValidationError("Search query is required")
        return await self._condition_repo.search(term.strip())

    async def get_condition(self, condition_id: int) -> MedicalCondition:
        condition = await self._condition_repo.get_by_id(condition_id)
        if condition is None:
            raise NotFoundError("Medical condition not found")
        return condition

    # ------------------------------------------------------------------
    # User conditions
    # ------------------------------------------------------------------

    async def list_for_user(self, user_id: int) -> list[UserCondition]:
        return await self._user_condition_repo.get_by_user(user_id)

    async def add_to_user(
        self,
        ctx: RequestContext,
        user_id: int,
        condition_id: Optional[int],
        severity: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> UserCondition:
        """Record a condition for a user.

        Raises:
            ValidationError: conditionId missing or severity not mild/moderate/severe.
            NotFoundError: Unknown user or condition.
            ConflictError: The user already has this condition.
        """
        if condition_id is None:
            raise ValidationError("conditionId is required")

        level = (severity or Severity.MODERATE.value).strip().lower()
        if level not in {s.value for s in Severity}:
            raise ValidationError("Severity must be one of: mild, moderate, severe")

        if await self._user_repo.get_by_id(user_id) is None:
            raise NotFoundError("User not found")
        condition = await self._condition_repo.get_by_id(condition_id)
        if condition is None:
            raise NotFoundError("Medical condition not found")

        try:
            added = await self._user_condition_repo.add(UserCondition(
                user_id=user_id,
                condition_id=condition_id,
                severity=level,
                notes=notes,
            ))
        except DuplicateEntryError as e:
            raise ConflictError("User already has this medical condition") from e

        added.condition_name = condition.name
        added.description = condition.description
        added.recommended_nutrients = dict(condition.recommended_nutrients)
        logger.info(
            "Added condition '%s' (%s) for user %d (trace=%s)",
            condition.name, level, user_id, ctx.trace_id,
        )
        return added

    async def remove_from_user(
        self,
        ctx: RequestContext,
        user_id: int,
        condition_id: int,
    ) -> UserCondition:
        removed = await self._user_condition_repo.remove(user_id, condition_id)
        if removed is None:
            raise NotFoundError("Medical condition not found for user")
        logger.info(
            "Removed condition %d from user %d (trace=%s)",
            condition_id, user_id, ctx.trace_id,
        )
        return removed
