"""
application.services.users - User directory.

Users are identified by opaque integer ids; there is no authentication here.
"""

from __future__ import annotations

import logging
from typing import Optional

from domain.entities import User
from domain.exceptions import ConflictError, DuplicateEntryError, NotFoundError, ValidationError
from domain.ports import UserRepository
from application.context import RequestContext

logger = logging.getLogger(__name__)


class UserService:
    """Create, look up and update users."""

    def __init__(self, user_repo: UserRepository):
        self._user_repo = user_repo

    async def create(self, ctx: RequestContext, email: Optional[str], name: Optional[str]) -> User:
        email = (email or "").strip()
        name = (name or "").strip()
        if not email or not name:
            raise ValidationError("Email and name are required")

        try:
            user = await self._user_repo.save(User(email=email, name=name))
        except DuplicateEntryError as e:
            raise ConflictError("User with this email already exists") from e
        logger.info("Created user %d (trace=%s)", user.id, ctx.trace_id)
        return user

    async def get(self, user_id: int) -> User:
        user = await self._user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def get_by_email(self, email: str) -> User:
        user = await self._user_repo.get_by_email(email)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def update(
        self,
        ctx: RequestContext,
        user_id: int,
        name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> User:
        """Update name and/or email; omitted fields keep their value."""
        try:
            user = await self._user_repo.update(user_id, name, email)
        except DuplicateEntryError as e:
            raise ConflictError("User with this email already exists") from e
        if user is None:
            raise NotFoundError("User not found")
        logger.info("Updated user %d (trace=%s)", user_id, ctx.trace_id)
        return user
