"""REST surface: envelopes, status codes and routing."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from adapters.rest.app import create_app
from domain.exceptions import GenerationError

from fakes import make_draft


@pytest.fixture
def client(factory):
    return TestClient(create_app(factory))


@pytest.fixture
def user(client):
    response = client.post("/api/users", json={"email": "grace@example.com", "name": "Grace"})
    assert response.status_code == 201
    return response.json()["user"]


@pytest.fixture
def recipe_ids(factory):
    repo = factory.create_recipe_repository()

    async def _run():
        return [
            (await repo.create(make_draft("Fiber Bowl", tags=["fiber-rich", "vegan"]))).id,
            (await repo.create(make_draft("Salmon Plate", tags=["omega_3-rich"]))).id,
        ]
    return asyncio.run(_run())


def _add_condition(client, user_id, condition_id, **extra):
    return client.post(f"/api/users/{user_id}/conditions", json={"conditionId": condition_id, **extra})


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


# --- users ---

def test_create_and_fetch_user(client, user):
    assert user["email"] == "grace@example.com"
    assert "createdAt" in user

    by_id = client.get(f"/api/users/{user['id']}").json()
    assert by_id["success"] is True
    assert by_id["user"]["medicalConditions"] == []

    by_email = client.get("/api/users/email/grace@example.com").json()
    assert by_email["user"]["id"] == user["id"]


def test_duplicate_email_is_a_conflict(client, user):
    response = client.post("/api/users", json={"email": "grace@example.com", "name": "Other"})
    assert response.status_code == 409
    assert response.json()["success"] is False
    assert "already exists" in response.json()["error"]


def test_update_user(client, user):
    response = client.put(f"/api/users/{user['id']}", json={"name": "Grace Hopper"})
    assert response.status_code == 200
    assert response.json()["user"]["name"] == "Grace Hopper"
    assert response.json()["user"]["email"] == "grace@example.com"
    assert client.put("/api/users/9999", json={"name": "x"}).status_code == 404


def test_unknown_user_is_404(client):
    response = client.get("/api/users/9999")
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "User not found"}


def test_malformed_path_is_a_400_envelope(client):
    response = client.get("/api/users/not-a-number")
    assert response.status_code == 400
    assert response.json()["success"] is False


# --- user conditions ---

def test_add_and_list_conditions(client, user, condition_ids):
    response = _add_condition(client, user["id"], condition_ids["Hypertension"], notes="since 2020")
    assert response.status_code == 201
    added = response.json()["userCondition"]
    assert added["severity"] == "moderate"
    assert added["name"] == "Hypertension"
    assert added["recommendedNutrients"]["potassium"] == "high"

    listed = client.get(f"/api/users/{user['id']}/conditions").json()["conditions"]
    assert [c["conditionId"] for c in listed] == [condition_ids["Hypertension"]]

    detail = client.get(f"/api/users/{user['id']}").json()["user"]
    assert detail["medicalConditions"][0]["notes"] == "since 2020"


def test_condition_errors(client, user, condition_ids):
    uid = user["id"]
    hypertension = condition_ids["Hypertension"]
    assert _add_condition(client, uid, hypertension).status_code == 201

    duplicate = _add_condition(client, uid, hypertension)
    assert duplicate.status_code == 409
    assert duplicate.json()["success"] is False

    assert client.post(f"/api/users/{uid}/conditions", json={}).status_code == 400
    assert _add_condition(client, uid, condition_ids["Osteoporosis"], severity="extreme").status_code == 400
    assert _add_condition(client, uid, 9999).status_code == 404
    assert _add_condition(client, 9999, hypertension).status_code == 404


def test_remove_condition(client, user, condition_ids):
    uid, cid = user["id"], condition_ids["Hypertension"]
    _add_condition(client, uid, cid)

    assert client.delete(f"/api/users/{uid}/conditions/{cid}").status_code == 200
    assert client.delete(f"/api/users/{uid}/conditions/{cid}").status_code == 404


def test_nutritional_needs(client, user, condition_ids):
    _add_condition(client, user["id"], condition_ids["Type 2 Diabetes"])
    _add_condition(client, user["id"], condition_ids["Heart Disease"], severity="severe")

    body = client.get(f"/api/users/{user['id']}/nutritional-needs").json()
    assert body["conditions"] == [
        {"name": "Heart Disease", "severity": "severe"},
        {"name": "Type 2 Diabetes", "severity": "moderate"},
    ]
    assert body["nutritionalNeeds"]["fiber"] == "high"
    assert body["nutritionalNeeds"]["omega_3"] == "high"
    assert body["nutritionalNeeds"]["sugar"] == "low"


# --- recommendations ---

def test_recommendations_need_user_id(client):
    response = client.get("/api/recipes/recommendations")
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_recommendations_need_conditions(client, user):
    response = client.get("/api/recipes/recommendations", params={"userId": user["id"]})
    assert response.status_code == 400
    assert "medical conditions" in response.json()["error"]


def test_recommendations_generate_and_log(client, user, condition_ids, generator):
    _add_condition(client, user["id"], condition_ids["Type 2 Diabetes"])

    response = client.get("/api/recipes/recommendations", params={"userId": user["id"]})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert len(body["recommendations"]) == 5
    assert body["recommendations"][0]["prepTime"] == 10
    assert body["matchedConditions"] == [{"name": "Type 2 Diabetes", "severity": "moderate"}]
    assert body["nutritionalNeeds"] == {
        "fiber": "high", "protein": "medium", "magnesium": "medium", "sugar": "low",
    }
    assert len(generator.calls) == 1

    history = client.get(f"/api/users/{user['id']}/recommendations").json()
    assert history["count"] == 5
    assert history["history"][0]["matchedConditions"] == ["Type 2 Diabetes"]


def test_generation_failure_is_500(client, user, condition_ids, generator):
    _add_condition(client, user["id"], condition_ids["Type 2 Diabetes"])
    generator.error = GenerationError("every model failed")

    response = client.get("/api/recipes/recommendations", params={"userId": user["id"]})
    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Failed to get recipe recommendations"}


# --- recipes & favorites ---

def test_search_dispatch(client, recipe_ids):
    by_tags = client.get("/api/recipes/search", params={"tags": "fiber-rich, vegan"}).json()
    assert [r["title"] for r in by_tags["recipes"]] == ["Fiber Bowl"]

    by_text = client.get("/api/recipes/search", params={"q": "salmon"}).json()
    assert by_text["count"] == 1

    everything = client.get("/api/recipes/search", params={"limit": 1}).json()
    assert [r["title"] for r in everything["recipes"]] == ["Salmon Plate"]


def test_recipe_detail_and_favorites(client, user, recipe_ids):
    uid, rid = user["id"], recipe_ids[0]

    detail = client.get(f"/api/recipes/{rid}").json()["recipe"]
    assert detail["isFavorited"] is False
    assert detail["nutritionalInfo"]["calories"] == 300

    first = client.post("/api/recipes/favorites", json={"userId": uid, "recipeId": rid})
    second = client.post("/api/recipes/favorites", json={"userId": uid, "recipeId": rid})
    assert first.status_code == second.status_code == 201
    assert first.json()["favorite"]["id"] == second.json()["favorite"]["id"]

    assert client.get(f"/api/recipes/{rid}", params={"userId": uid}).json()["recipe"]["isFavorited"] is True

    favorites = client.get(f"/api/recipes/favorites/{uid}").json()
    assert favorites["count"] == 1
    assert favorites["favorites"][0]["favoritedAt"]

    assert client.delete(f"/api/recipes/favorites/{uid}/{rid}").status_code == 200
    assert client.delete(f"/api/recipes/favorites/{uid}/{rid}").status_code == 404


def test_favorite_errors(client, user, recipe_ids):
    assert client.post("/api/recipes/favorites", json={"userId": user["id"]}).status_code == 400
    assert client.post(
        "/api/recipes/favorites", json={"userId": user["id"], "recipeId": 9999},
    ).status_code == 404
    assert client.get("/api/recipes/9999").status_code == 404


# --- catalog ---

def test_condition_catalog(client, condition_ids):
    catalog = client.get("/api/medical-conditions").json()
    assert catalog["count"] == len(condition_ids)

    found = client.get("/api/medical-conditions/search", params={"q": "diabetes"}).json()
    assert [c["name"] for c in found["conditions"]] == ["Type 2 Diabetes"]
    assert client.get("/api/medical-conditions/search").status_code == 400

    one = client.get(f"/api/medical-conditions/{condition_ids['Osteoporosis']}").json()
    assert one["condition"]["recommendedNutrients"]["vitamin_d"] == "high"
    assert client.get("/api/medical-conditions/9999").status_code == 404


# --- chat ---

def test_chat(client, assistant):
    payload = {
        "messages": [{"role": "user", "content": "Can I freeze it?"}],
        "recipeContext": {"title": "Fiber Bowl", "instructions": ["Mix"]},
    }
    response = client.post("/api/chat", json=payload)
    assert response.status_code == 200
    assert response.json()["message"] == {
        "role": "assistant",
        "content": "About Fiber Bowl: Can I freeze it?",
    }
    assert len(assistant.calls) == 1


def test_chat_validation_and_failure(client, assistant):
    assert client.post("/api/chat", json={"messages": []}).status_code == 400

    assistant.error = GenerationError("Failed to get cooking assistance. Please try again in a moment.")
    response = client.post("/api/chat", json={
        "messages": [{"role": "user", "content": "Hi"}],
        "recipeContext": {"title": "Fiber Bowl"},
    })
    assert response.status_code == 500
    assert response.json()["success"] is False
