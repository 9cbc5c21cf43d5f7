"""
application.services.cooking_chat - Cooking assistant conversations.

Stateless: the caller sends the whole conversation on every turn.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from domain.exceptions import ValidationError
from domain.models import ChatMessage, RecipeContext
from domain.ports import CookingAssistantPort
from application.context import RequestContext

logger = logging.getLogger(__name__)


class CookingChatService:
    """Validates a conversation and forwards it to the cooking assistant."""

    def __init__(self, assistant: CookingAssistantPort):
        self._assistant = assistant

    async def reply(
        self,
        ctx: RequestContext,
        messages: Sequence[ChatMessage],
        recipe: Optional[RecipeContext],
    ) -> ChatMessage:
        """Answer the last user message.

        Raises:
            ValidationError: Empty conversation, missing recipe, or the last
                turn is not from the user.
            GenerationError: The assistant could not answer.
        """
        if not messages:
            raise ValidationError("Messages are required")
        if recipe is None or not recipe.title.strip():
            raise ValidationError("Recipe context with a title is required")
        if messages[-1].role != "user":
            raise ValidationError("The last message must come from the user")

        logger.info(
            "Cooking chat for '%s' with %d message(s) (trace=%s)",
            recipe.title, len(messages), ctx.trace_id,
        )
        return await self._assistant.reply(messages, recipe)
