"""
infrastructure.llm.recipe_generator - LLM-backed recipe synthesis.

Implements RecipeGeneratorPort using LangChain. Models are tried in order
(a fallback chain):

    - rate-limit failures are retried on the same model with backoff, up to
      ``max_retries`` times, then the next model is tried
    - unparseable output moves straight to the next model
    - any other failure aborts the whole chain

The raw model output is converted into canonical RecipeDraft objects,
filling in defaults for missing times, servings and difficulty.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Any, Mapping, Optional, Sequence

from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate
from langchain_core.runnables import Runnable

from domain.exceptions import GenerationError
from domain.models import ConditionSummary, Difficulty, Ingredient, Priority, RecipeDraft
from infrastructure.llm.llm_builder import is_rate_limited

logger = logging.getLogger(__name__)

_SYSTEM_INSTRUCTIONS = """You are a professional nutritionist and chef.
You write healthy, practical recipes with common ingredients for people
managing medical conditions through diet.

Return ONLY a JSON array, no prose, with this exact structure per recipe:
[
  {{
    "title": "Recipe Name",
    "description": "Brief description in 2-3 sentences",
    "ingredients": [
      {{"item": "ingredient name", "quantity": 1, "unit": "cup"}}
    ],
    "instructions": ["Step 1 description", "Step 2 description"],
    "nutritional_info": {{
      "calories": 450,
      "protein": "35g",
      "carbs": "40g",
      "fat": "15g",
      "fiber": "8g"
    }},
    "prep_time": 15,
    "cook_time": 30,
    "servings": 4,
    "difficulty": "easy",
    "tags": ["fiber-rich"]
  }}
]

RULES:
- difficulty is lowercase: "easy", "medium" or "hard"
- quantities are numbers, times are minutes
- tag each recipe with the "<nutrient>-rich" tags it genuinely satisfies"""

_USER_TEMPLATE = """Generate {count} recipes for someone with: {conditions}.

Nutritional priorities: {nutrients}

{tag_line}"""


class NoRecipesParsed(ValueError):
    """The model answered, but no recipe could be read from the output."""


class LLMRecipeGenerator:
    """Implements RecipeGeneratorPort over an ordered chain of LLMs.

    Args:
        models: (model_name, llm) pairs, tried in order. Any LangChain
            runnable that accepts a prompt value works as the llm.
        max_retries: Extra attempts per model on rate-limit failures.
        backoff_seconds: Base delay between rate-limited attempts
            (doubled on each retry).
    """

    def __init__(
        self,
        models: Sequence[tuple[str, Runnable]],
        *,
        max_retries: int = 2,
        backoff_seconds: float = 2.0,
    ):
        if not models:
            raise ValueError("LLMRecipeGenerator needs at least one model")
        self._max_retries = max_retries
        self._backoff = backoff_seconds
        prompt = ChatPromptTemplate.from_messages([
            ("system", _SYSTEM_INSTRUCTIONS),
            ("user", _USER_TEMPLATE),
        ])
        self._chains = [(name, prompt | llm | StrOutputParser()) for name, llm in models]

    async def generate(
        self,
        profile: Mapping[str, Priority],
        conditions: Sequence[ConditionSummary],
        count: int,
        target_tags: Sequence[str] = (),
    ) -> list[RecipeDraft]:
        """Generate up to ``count`` recipe drafts.

        Raises:
            GenerationError: When every model in the chain failed, or a
                non-retryable failure occurred.
        """
        inputs = self._build_inputs(profile, conditions, count, target_tags)
        last_error: Optional[BaseException] = None

        for model_name, chain in self._chains:
            for attempt in range(self._max_retries + 1):
                try:
                    raw = await self._invoke(chain, inputs)
                    drafts = parse_recipes(raw)[:count]
                    logger.info(
                        "Model %s generated %d recipe(s) (attempt %d)",
                        model_name, len(drafts), attempt + 1,
                    )
                    return drafts
                except NoRecipesParsed as e:
                    logger.warning("Model %s returned unusable output: %s", model_name, e)
                    last_error = e
                    break
                except Exception as e:
                    if not is_rate_limited(e):
                        logger.error("Model %s failed with a non-retryable error: %s", model_name, e)
                        raise GenerationError(f"Failed to generate recipes: {e}") from e
                    last_error = e
                    if attempt < self._max_retries:
                        delay = self._backoff * (2 ** attempt)
                        logger.warning(
                            "Model %s rate limited (attempt %d/%d), retrying in %.1fs",
                            model_name, attempt + 1, self._max_retries + 1, delay,
                        )
                        await asyncio.sleep(delay)
                    else:
                        logger.warning("Model %s still rate limited, trying next model", model_name)

        raise GenerationError(
            f"All {len(self._chains)} model(s) exhausted while generating recipes: {last_error}"
        )

    @staticmethod
    async def _invoke(chain: Runnable, inputs: dict[str, Any]) -> str:
        """Run the sync LangChain chain in a thread pool to avoid blocking."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, chain.invoke, inputs)

    @staticmethod
    def _build_inputs(
        profile: Mapping[str, Priority],
        conditions: Sequence[ConditionSummary],
        count: int,
        target_tags: Sequence[str],
    ) -> dict[str, Any]:
        nutrients = ", ".join(
            f"{nutrient} ({Priority(level).value} priority)" for nutrient, level in profile.items()
        )
        tag_line = (
            "Each recipe should target at least one of these tags: " + ", ".join(target_tags)
            if target_tags else ""
        )
        return {
            "count": count,
            "conditions": ", ".join(c.name for c in conditions) or "no specific conditions",
            "nutrients": nutrients or "balanced diet",
            "tag_line": tag_line,
        }


# ---------------------------------------------------------------------------
# Output parsing / normalization
# ---------------------------------------------------------------------------

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)


def parse_recipes(raw: str) -> list[RecipeDraft]:
    """Extract the JSON array from model output and normalize each recipe.

    Raises:
        NoRecipesParsed: If no JSON array is present or it holds no usable recipe.
    """
    text = _FENCE_RE.sub("", raw or "").strip()
    start, end = text.find("["), text.rfind("]")
    if start == -1 or end <= start:
        raise NoRecipesParsed("No valid JSON array found in response")

    try:
        data = json.loads(text[start:end + 1])
    except json.JSONDecodeError as e:
        raise NoRecipesParsed(f"Malformed JSON array: {e}") from e

    if not isinstance(data, list):
        raise NoRecipesParsed("Top-level JSON value is not an array")

    drafts = []
    for index, item in enumerate(data):
        if not isinstance(item, Mapping):
            continue
        try:
            draft = normalize_recipe(item)
        except (TypeError, ValueError, OverflowError) as e:
            logger.warning("Dropping recipe %d that could not be normalized: %s", index, e)
            continue
        if draft is not None:
            drafts.append(draft)
    if not drafts:
        raise NoRecipesParsed("JSON array contained no recipe with a title")
    return drafts


def normalize_recipe(data: Mapping[str, Any]) -> Optional[RecipeDraft]:
    """Convert one backend recipe object to a RecipeDraft (None if untitled).

    Accepts snake_case and camelCase keys; missing prep/cook time default to
    0, servings to 4, difficulty to "medium". Fields of the wrong shape are
    coerced: string tags are split on commas, string ingredients and
    instructions on newlines, and a non-object nutritional_info becomes
    empty.
    """
    title = str(data.get("title") or "").strip()
    if not title:
        return None

    difficulty = str(data.get("difficulty") or "medium").strip().lower()
    if difficulty not in {d.value for d in Difficulty}:
        difficulty = Difficulty.MEDIUM.value

    instructions = _as_list(data.get("instructions"), lines=True)
    nutritional_info = data.get("nutritional_info") or data.get("nutritionalInfo")

    return RecipeDraft(
        title=title,
        description=str(data.get("description") or ""),
        ingredients=[_normalize_ingredient(i) for i in _as_list(data.get("ingredients"), lines=True)],
        instructions=[str(step) for step in instructions],
        nutritional_info=dict(nutritional_info) if isinstance(nutritional_info, Mapping) else {},
        prep_time=_as_int(data.get("prep_time") or data.get("prepTime"), 0),
        cook_time=_as_int(data.get("cook_time") or data.get("cookTime"), 0),
        servings=_as_int(data.get("servings"), 4) or 4,
        difficulty=Difficulty(difficulty),
        tags=[str(t).strip() for t in _as_list(data.get("tags")) if str(t).strip()],
    )


def _as_list(value: Any, *, lines: bool = False) -> list:
    """Coerce a scalar-or-list field to a list.

    Strings are split on newlines when ``lines`` is set, otherwise on commas.
    """
    if not value:
        return []
    if isinstance(value, str):
        parts = value.splitlines() if lines else value.split(",")
        return [p.strip() for p in parts if p.strip()]
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _normalize_ingredient(value: Any) -> Ingredient:
    if isinstance(value, Mapping):
        return Ingredient(
            item=str(value.get("item") or value.get("name") or ""),
            quantity=value.get("quantity"),
            unit=str(value.get("unit") or ""),
        )
    return Ingredient(item=str(value))


def _as_int(value: Any, default: int) -> int:
    if value is None or value == "":
        return default
    if isinstance(value, (int, float)):
        return int(value)
    match = re.search(r"\d+", str(value))
    return int(match.group()) if match else default
