"""
infrastructure.llm.cooking_assistant - Recipe-aware cooking chat.

Implements CookingAssistantPort. The recipe being cooked goes into the
system prompt; prior turns are replayed as chat history. Rate-limited calls
are retried after a fixed delay; anything else fails immediately.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Sequence

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_core.runnables import Runnable

from domain.exceptions import GenerationError
from domain.models import ChatMessage, RecipeContext
from infrastructure.llm.llm_builder import is_rate_limited

logger = logging.getLogger(__name__)

_SYSTEM_TEMPLATE = """You are a helpful, encouraging cooking assistant. The user is making this recipe:

Title: {title}
Description: {description}

Ingredients:
{ingredients}

Instructions:
{instructions}

Answer their cooking questions clearly and concisely. Be supportive and give practical tips.
If they ask about substitutions, timing, or techniques, provide helpful guidance."""


class LLMCookingAssistant:
    """Implements CookingAssistantPort with a LangChain chat model."""

    def __init__(
        self,
        llm: Runnable,
        *,
        max_attempts: int = 3,
        retry_delay_seconds: float = 5.0,
    ):
        self._llm = llm
        self._max_attempts = max(1, max_attempts)
        self._retry_delay = retry_delay_seconds

    async def reply(
        self,
        messages: Sequence[ChatMessage],
        recipe: RecipeContext,
    ) -> ChatMessage:
        prompt = self._build_messages(messages, recipe)

        attempt = 0
        while True:
            attempt += 1
            try:
                response = await self._llm.ainvoke(prompt)
            except Exception as e:
                logger.error("Cooking assistant error (attempt %d): %s", attempt, e)
                if is_rate_limited(e) and attempt < self._max_attempts:
                    logger.info("Rate limited, waiting %.1f seconds...", self._retry_delay)
                    await asyncio.sleep(self._retry_delay)
                    continue
                raise GenerationError(
                    "Failed to get cooking assistance. Please try again in a moment."
                ) from e
            content = getattr(response, "content", response)
            return ChatMessage(role="assistant", content=str(content))

    @staticmethod
    def _build_messages(
        messages: Sequence[ChatMessage],
        recipe: RecipeContext,
    ) -> list[BaseMessage]:
        if recipe.instructions:
            instructions = "\n".join(f"{i}. {step}" for i, step in enumerate(recipe.instructions, 1))
        else:
            instructions = "Follow the recipe steps"

        system = SystemMessage(content=_SYSTEM_TEMPLATE.format(
            title=recipe.title,
            description=recipe.description or "A delicious recipe",
            ingredients=json.dumps(recipe.ingredients, indent=2, default=str),
            instructions=instructions,
        ))
        history: list[BaseMessage] = [
            AIMessage(content=m.content) if m.role == "assistant" else HumanMessage(content=m.content)
            for m in messages
        ]
        return [system, *history]
