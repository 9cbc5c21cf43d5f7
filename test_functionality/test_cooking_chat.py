"""Cooking assistant: conversation validation and the LLM adapter's retry policy."""

import asyncio

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage
from langchain_core.runnables import RunnableLambda

from application.services.cooking_chat import CookingChatService
from domain.exceptions import GenerationError, ValidationError
from domain.models import ChatMessage, RecipeContext
from infrastructure.llm.cooking_assistant import LLMCookingAssistant

from fakes import FakeAssistant

RECIPE = RecipeContext(
    title="Chickpea Stew",
    description="Hearty stew",
    ingredients=[{"item": "chickpeas", "quantity": 2, "unit": "cups"}],
    instructions=["Soak chickpeas", "Simmer for 30 minutes"],
)


def _conversation(*pairs):
    return [ChatMessage(role=role, content=content) for role, content in pairs]


@pytest.mark.parametrize("messages, recipe", [
    ([], RECIPE),
    (_conversation(("user", "Can I use canned?")), None),
    (_conversation(("user", "Can I use canned?")), RecipeContext(title=" ")),
    (_conversation(("user", "Hi"), ("assistant", "Hello!")), RECIPE),
])
def test_invalid_conversations_are_rejected(ctx, messages, recipe):
    assistant = FakeAssistant()
    with pytest.raises(ValidationError):
        asyncio.run(CookingChatService(assistant).reply(ctx, messages, recipe))
    assert assistant.calls == []


def test_valid_conversation_reaches_assistant(ctx):
    assistant = FakeAssistant()
    reply = asyncio.run(CookingChatService(assistant).reply(
        ctx, _conversation(("user", "Can I use canned?")), RECIPE,
    ))
    assert reply.role == "assistant"
    assert reply.content == "About Chickpea Stew: Can I use canned?"


class ScriptedChatModel:
    def __init__(self, *outputs):
        self.outputs = list(outputs)
        self.received = []

    def respond(self, messages):
        self.received.append(messages)
        output = self.outputs.pop(0) if len(self.outputs) > 1 else self.outputs[0]
        if isinstance(output, Exception):
            raise output
        return AIMessage(content=output)


def test_assistant_builds_recipe_prompt_and_history():
    model = ScriptedChatModel("Yes, drain and rinse them first.")
    assistant = LLMCookingAssistant(RunnableLambda(model.respond), retry_delay_seconds=0)

    reply = asyncio.run(assistant.reply(
        _conversation(("user", "Hi"), ("assistant", "Hello!"), ("user", "Can I use canned?")),
        RECIPE,
    ))

    assert reply == ChatMessage(role="assistant", content="Yes, drain and rinse them first.")
    (messages,) = model.received
    assert isinstance(messages[0], SystemMessage)
    assert "Chickpea Stew" in messages[0].content
    assert "2. Simmer for 30 minutes" in messages[0].content
    assert [type(m) for m in messages[1:]] == [HumanMessage, AIMessage, HumanMessage]


def test_rate_limited_reply_is_retried():
    model = ScriptedChatModel(Exception("429 Too Many Requests"), "Use olive oil.")
    assistant = LLMCookingAssistant(RunnableLambda(model.respond), retry_delay_seconds=0)

    reply = asyncio.run(assistant.reply(_conversation(("user", "Which oil?")), RECIPE))
    assert reply.content == "Use olive oil."
    assert len(model.received) == 2


def test_rate_limit_exhaustion_fails_after_three_attempts():
    model = ScriptedChatModel(Exception("rate limit reached"))
    assistant = LLMCookingAssistant(RunnableLambda(model.respond), max_attempts=3, retry_delay_seconds=0)

    with pytest.raises(GenerationError):
        asyncio.run(assistant.reply(_conversation(("user", "Which oil?")), RECIPE))
    assert len(model.received) == 3


def test_other_errors_fail_immediately():
    model = ScriptedChatModel(ConnectionError("model server unreachable"))
    assistant = LLMCookingAssistant(RunnableLambda(model.respond), retry_delay_seconds=0)

    with pytest.raises(GenerationError):
        asyncio.run(assistant.reply(_conversation(("user", "Which oil?")), RECIPE))
    assert len(model.received) == 1
