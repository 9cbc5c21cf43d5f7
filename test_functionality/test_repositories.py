"""SQLite repositories against a real temporary database."""

import asyncio

import pytest

from domain.entities import User, UserCondition
from domain.exceptions import DuplicateEntryError
from domain.models import Difficulty, Priority

from fakes import make_draft

H, M = Priority.HIGH, Priority.MEDIUM


def _create_all(repo, drafts):
    async def _run():
        return [await repo.create(d) for d in drafts]
    return asyncio.run(_run())


def test_recipe_is_stored_and_read_back(factory):
    repo = factory.create_recipe_repository()
    (created,) = _create_all(repo, [make_draft("Lentil Soup", tags=["fiber-rich", "iron-rich"])])

    loaded = asyncio.run(repo.get_by_id(created.id))
    assert loaded == created
    assert loaded.ingredients[0].item == "oats"
    assert loaded.difficulty is Difficulty.EASY
    assert loaded.tags == ["fiber-rich", "iron-rich"]
    assert asyncio.run(repo.get_by_id(9999)) is None


def test_nutrient_tag_lookup_uses_high_priorities_only(factory):
    repo = factory.create_recipe_repository()
    _create_all(repo, [
        make_draft("Fiber Bowl", tags=["fiber-rich"]),
        make_draft("Protein Plate", tags=["protein-rich"]),
        make_draft("Banana Smoothie", tags=["potassium-rich", "quick"]),
    ])

    found = asyncio.run(repo.find_by_nutrient_tags({"fiber": H, "potassium": H, "protein": M}))
    assert [r.title for r in found] == ["Banana Smoothie", "Fiber Bowl"]

    assert asyncio.run(repo.find_by_nutrient_tags({"protein": M})) == []
    assert asyncio.run(repo.find_by_nutrient_tags({})) == []


def test_nutrient_tag_lookup_is_capped(factory):
    repo = factory.create_recipe_repository()
    _create_all(repo, [make_draft(f"Fiber {i}") for i in range(25)])

    found = asyncio.run(repo.find_by_nutrient_tags({"fiber": H}))
    assert len(found) == 20
    assert found[0].title == "Fiber 24"


def test_by_tags_requires_every_tag(factory):
    repo = factory.create_recipe_repository()
    _create_all(repo, [
        make_draft("Both", tags=["fiber-rich", "vegan"]),
        make_draft("Fiber only", tags=["fiber-rich"]),
    ])

    assert [r.title for r in asyncio.run(repo.by_tags(["fiber-rich", "vegan"]))] == ["Both"]
    assert len(asyncio.run(repo.by_tags(["fiber-rich"]))) == 2
    assert asyncio.run(repo.by_tags([])) == []


def test_search_is_case_insensitive_and_all_pages(factory):
    repo = factory.create_recipe_repository()
    _create_all(repo, [
        make_draft("Salmon Salad"),
        make_draft("Oat Porridge", description="Warm breakfast with SALMON roe"),
        make_draft("Bean Chili"),
    ])

    assert {r.title for r in asyncio.run(repo.search("salmon"))} == {"Salmon Salad", "Oat Porridge"}
    assert [r.title for r in asyncio.run(repo.all(limit=2))] == ["Bean Chili", "Oat Porridge"]
    assert [r.title for r in asyncio.run(repo.all(limit=2, offset=2))] == ["Salmon Salad"]


def test_recommendation_log_keeps_duplicates(factory, user_id):
    repo = factory.create_recipe_repository()
    (recipe,) = _create_all(repo, [make_draft("Fiber Bowl")])

    async def _run():
        await repo.log_recommendation(user_id, recipe.id, ["Hypertension"])
        await repo.log_recommendation(user_id, recipe.id, ["Hypertension", "Type 2 Diabetes"])
        return await repo.get_recommendation_history(user_id)

    history = asyncio.run(_run())
    assert len(history) == 2
    assert history[0].matched_conditions == ["Hypertension", "Type 2 Diabetes"]
    assert history[0].recipe_title == "Fiber Bowl"


def test_duplicate_user_condition_is_rejected(factory, user_id, condition_ids):
    repo = factory.create_user_condition_repository()
    entry = UserCondition(user_id=user_id, condition_id=condition_ids["Hypertension"])

    added = asyncio.run(repo.add(entry))
    assert added.severity == "moderate"
    assert added.diagnosed_at

    with pytest.raises(DuplicateEntryError):
        asyncio.run(repo.add(entry))
    assert len(asyncio.run(repo.get_by_user(user_id))) == 1


def test_user_condition_listing_joins_catalog(factory, user_id, condition_ids):
    repo = factory.create_user_condition_repository()
    asyncio.run(repo.add(UserCondition(
        user_id=user_id, condition_id=condition_ids["Osteoporosis"], severity="severe", notes="DEXA 2024",
    )))

    (uc,) = asyncio.run(repo.get_by_user(user_id))
    assert uc.condition_name == "Osteoporosis"
    assert uc.recommended_nutrients["calcium"] is H
    assert uc.notes == "DEXA 2024"

    removed = asyncio.run(repo.remove(user_id, condition_ids["Osteoporosis"]))
    assert removed.id == uc.id
    assert asyncio.run(repo.remove(user_id, condition_ids["Osteoporosis"])) is None


def test_favorites_are_idempotent(factory, user_id):
    recipes = factory.create_recipe_repository()
    favorites = factory.create_favorite_repository()
    (recipe,) = _create_all(recipes, [make_draft("Fiber Bowl")])

    first = asyncio.run(favorites.add(user_id, recipe.id))
    second = asyncio.run(favorites.add(user_id, recipe.id))
    assert first.id == second.id
    assert asyncio.run(favorites.is_favorited(user_id, recipe.id))

    listed = asyncio.run(favorites.list_for_user(user_id))
    assert [(r.title, at) for r, at in listed] == [("Fiber Bowl", first.created_at)]

    assert asyncio.run(favorites.remove(user_id, recipe.id)).id == first.id
    assert asyncio.run(favorites.remove(user_id, recipe.id)) is None
    assert not asyncio.run(favorites.is_favorited(user_id, recipe.id))


def test_user_email_is_unique_and_update_keeps_unset_fields(factory, user_id):
    repo = factory.create_user_repository()
    with pytest.raises(DuplicateEntryError):
        asyncio.run(repo.save(User(email="ada@example.com", name="Other Ada")))

    updated = asyncio.run(repo.update(user_id, "Ada Lovelace", None))
    assert updated.name == "Ada Lovelace"
    assert updated.email == "ada@example.com"
    assert asyncio.run(repo.update(9999, "Nobody", None)) is None


def test_catalog_is_seeded_once(factory):
    from infrastructure.persistence.seed import CONDITION_CATALOG, seed_conditions

    repo = factory.create_condition_repository()
    assert len(asyncio.run(repo.get_all())) == len(CONDITION_CATALOG)
    assert asyncio.run(seed_conditions(repo)) == 0
    assert [c.name for c in asyncio.run(repo.search("blood"))]
