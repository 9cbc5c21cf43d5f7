"""Test doubles for the LLM-backed ports, plus a recipe draft builder."""

from domain.models import ChatMessage, Difficulty, Ingredient, RecipeDraft


def make_draft(title, tags=("fiber-rich",), **overrides):
    fields = dict(
        title=title,
        description=f"{title} description",
        ingredients=[Ingredient(item="oats", quantity=1, unit="cup")],
        instructions=["Mix", "Cook"],
        nutritional_info={"calories": 300, "fiber": "8g"},
        prep_time=10,
        cook_time=20,
        servings=2,
        difficulty=Difficulty.EASY,
        tags=list(tags),
    )
    fields.update(overrides)
    return RecipeDraft(**fields)


class FakeGenerator:
    """RecipeGeneratorPort stand-in that records its calls."""

    def __init__(self, drafts=None, error=None):
        self.drafts = drafts if drafts is not None else [
            make_draft(f"Generated {i}") for i in range(1, 6)
        ]
        self.error = error
        self.calls = []

    async def generate(self, profile, conditions, count, target_tags=()):
        self.calls.append({
            "profile": dict(profile),
            "conditions": list(conditions),
            "count": count,
            "target_tags": list(target_tags),
        })
        if self.error is not None:
            raise self.error
        return list(self.drafts)[:count]


class FakeAssistant:
    """CookingAssistantPort stand-in that echoes the last question."""

    def __init__(self, error=None):
        self.error = error
        self.calls = []

    async def reply(self, messages, recipe):
        self.calls.append((list(messages), recipe))
        if self.error is not None:
            raise self.error
        return ChatMessage(role="assistant", content=f"About {recipe.title}: {messages[-1].content}")
