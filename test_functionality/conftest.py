"""Shared fixtures: a real SQLite database per test and fake LLM-backed ports."""

import asyncio

import pytest

from application.context import RequestContext
from domain.entities import User
from factory import ServiceFactory
from infrastructure.config import Settings

from fakes import FakeAssistant, FakeGenerator


@pytest.fixture
def settings(tmp_path):
    return Settings(
        db_path=str(tmp_path / "recipes_test.db"),
        llm_retry_backoff_seconds=0.0,
        chat_retry_delay_seconds=0.0,
    )


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def assistant():
    return FakeAssistant()


@pytest.fixture
def factory(settings, generator, assistant):
    f = ServiceFactory(settings, generator=generator, assistant=assistant)
    asyncio.run(f.initialize())
    yield f
    asyncio.run(f.close())


@pytest.fixture
def ctx():
    return RequestContext(session_id="pytest")


@pytest.fixture
def user_id(factory):
    """A user with no conditions."""
    user = asyncio.run(factory.create_user_repository().save(User(email="ada@example.com", name="Ada")))
    return user.id


@pytest.fixture
def condition_ids(factory):
    """Catalog name -> id for the seeded conditions."""
    catalog = asyncio.run(factory.create_condition_repository().get_all())
    return {c.name: c.id for c in catalog}


@pytest.fixture
def diabetic_user(factory, ctx, user_id, condition_ids):
    """A user with Type 2 Diabetes and Hypertension."""
    service = factory.create_condition_service()

    async def _add():
        await service.add_to_user(ctx, user_id, condition_ids["Type 2 Diabetes"], "moderate")
        await service.add_to_user(ctx, user_id, condition_ids["Hypertension"], "mild")

    asyncio.run(_add())
    return user_id
