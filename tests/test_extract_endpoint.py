from unittest.mock import AsyncMock

import httpx
import pytest

from recipe_ai.app.services.ai import recipe_parser
from recipe_ai.app.services.ai.providers import AIProviderError

PAGE_HTML = "<html><body><h1>Omelette</h1><ul><li>3 eggs</li></ul></body></html>"


def _auth(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def fake_provider(monkeypatch):
    provider = AsyncMock()
    provider.generate_structured_output = AsyncMock(
        return_value={
            "name": "Omelette",
            "recipeIngredient": {"metric": ["3 eggs", "10 g butter"], "us": ["3 eggs", "2 tsp butter"]},
            "recipeInstructions": {"metric": ["Whisk", "Cook"], "us": ["Whisk", "Cook"]},
        }
    )

    async def _get_provider(store):
        return provider

    monkeypatch.setattr(recipe_parser, "get_ai_provider", _get_provider)
    return provider


def test_extract_requires_authentication(client):
    resp = client.post("/recipes/extract", json={"html": PAGE_HTML})
    assert resp.status_code == 401


def test_extract_returns_dual_unit_recipe(client, user_token, ai_enabled, fake_provider):
    resp = client.post(
        "/recipes/extract",
        json={"html": PAGE_HTML, "url": "https://example.com/omelette"},
        headers=_auth(user_token),
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    recipe = body["recipe"]
    assert recipe["name"] == "Omelette"
    assert recipe["url"] == "https://example.com/omelette"
    assert [(i["system_used"], i["order"]) for i in recipe["recipe_ingredients"]] == [
        ("metric", 0),
        ("metric", 1),
        ("us", 0),
        ("us", 1),
    ]
    assert recipe["recipe_ingredients"][3]["unit"] == "teaspoon"
    assert [(s["system_used"], s["order"]) for s in recipe["steps"]] == [
        ("metric", 1),
        ("metric", 2),
        ("us", 1),
        ("us", 2),
    ]


def test_extract_when_ai_disabled(client, user_token, fake_provider):
    resp = client.post("/recipes/extract", json={"html": PAGE_HTML}, headers=_auth(user_token))
    assert resp.status_code == 200
    assert resp.json() == {"success": False, "recipe": None, "message": "No recipe could be extracted"}
    fake_provider.generate_structured_output.assert_not_called()


@pytest.mark.parametrize("error", [AIProviderError("bad model"), httpx.ConnectError("refused")])
def test_extract_maps_provider_failures_to_502(client, user_token, ai_enabled, fake_provider, error):
    fake_provider.generate_structured_output.side_effect = error
    resp = client.post("/recipes/extract", json={"html": PAGE_HTML}, headers=_auth(user_token))
    assert resp.status_code == 502
    assert resp.json()["detail"] == "AI provider request failed"


def test_extract_requires_html(client, user_token):
    resp = client.post("/recipes/extract", json={"html": ""}, headers=_auth(user_token))
    assert resp.status_code == 422
    assert resp.json()["error_code"] == "validation_error"


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
