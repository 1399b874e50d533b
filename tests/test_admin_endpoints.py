import pytest

from recipe_ai.app.db import models
from recipe_ai.app.services import admin_config_service
from recipe_ai.app.services.ai.connection_tests import ConnectionTestResult
from recipe_ai.app.services.events import permissions_emitter

DEFAULT_EXTRACTION_PROMPT = "Default recipe extraction prompt content"


def _auth(token):
    return {"Authorization": f"Bearer {token}"}


def test_requires_authentication(client):
    resp = client.get("/admin/prompts")
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Not authenticated"


def test_rejects_invalid_token(client):
    resp = client.get("/admin/prompts", headers=_auth("not-a-jwt"))
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid or expired token"


@pytest.mark.parametrize(
    "method, path, body",
    [
        ("get", "/admin/prompts", None),
        ("get", "/admin/prompts/recipe-extraction", None),
        ("put", "/admin/prompts/recipe-extraction", {"content": "hijack"}),
        ("delete", "/admin/prompts/recipe-extraction", None),
        ("put", "/admin/ai-config", {"enabled": True}),
        ("put", "/admin/video-config", {"enabled": True}),
        ("post", "/admin/ai-config/test", {"provider": "openai"}),
    ],
)
def test_non_admin_is_forbidden(client, user_token, db_session, method, path, body):
    kwargs = {"headers": _auth(user_token)}
    if body is not None:
        kwargs["json"] = body
    resp = client.request(method.upper(), path, **kwargs)
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Server admin access required"
    assert db_session.query(models.ServerConfig).count() == 0


def test_prompt_crud_round_trip(client, admin_token):
    headers = _auth(admin_token)

    resp = client.get("/admin/prompts/recipe-extraction", headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {
        "name": "recipe-extraction",
        "content": DEFAULT_EXTRACTION_PROMPT,
        "is_custom": False,
        "default_content": DEFAULT_EXTRACTION_PROMPT,
    }

    resp = client.put("/admin/prompts/recipe-extraction", json={"content": "Extract everything"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {"success": True}

    body = client.get("/admin/prompts/recipe-extraction", headers=headers).json()
    assert body["is_custom"] is True
    assert body["content"] == "Extract everything"

    listing = client.get("/admin/prompts", headers=headers).json()
    assert listing == [
        {"name": "recipe-extraction", "is_custom": True},
        {"name": "unit-conversion", "is_custom": False},
    ]

    resp = client.delete("/admin/prompts/recipe-extraction", headers=headers)
    assert resp.json() == {"success": True}
    body = client.get("/admin/prompts/recipe-extraction", headers=headers).json()
    assert body["is_custom"] is False
    assert body["content"] == DEFAULT_EXTRACTION_PROMPT


def test_empty_prompt_content_is_validation_error(client, admin_token, db_session):
    resp = client.put("/admin/prompts/unit-conversion", json={"content": ""}, headers=_auth(admin_token))
    assert resp.status_code == 422
    body = resp.json()
    assert body["error_code"] == "validation_error"
    assert body["details"][0]["field"] == "body.content"
    assert db_session.get(models.ServerConfig, "prompt_unit_conversion") is None


def test_whitespace_prompt_content_is_rejected(client, admin_token, db_session):
    resp = client.put("/admin/prompts/unit-conversion", json={"content": "   "}, headers=_auth(admin_token))
    assert resp.status_code == 422
    assert resp.json()["detail"] == "Prompt content is required"
    assert db_session.get(models.ServerConfig, "prompt_unit_conversion") is None


def test_unknown_prompt_name(client, admin_token):
    resp = client.get("/admin/prompts/summarize", headers=_auth(admin_token))
    assert resp.status_code == 422
    assert resp.json()["error_code"] == "validation_error"


def test_update_ai_config_broadcasts_on_enable(client, admin_token, db_session):
    received = []
    unsubscribe = permissions_emitter.subscribe(admin_config_service.POLICY_UPDATED_EVENT, received.append)
    try:
        resp = client.put(
            "/admin/ai-config",
            json={"enabled": True, "provider": "ollama", "endpoint": "http://ollama:11434/", "model": "llama3"},
            headers=_auth(admin_token),
        )
        assert resp.status_code == 200
        resp = client.put(
            "/admin/ai-config",
            json={"enabled": True, "provider": "ollama", "endpoint": "http://ollama:11434", "model": "qwen"},
            headers=_auth(admin_token),
        )
        assert resp.status_code == 200
    finally:
        unsubscribe()

    assert len(received) == 1
    assert "recipePolicy" in received[0]
    row = db_session.get(models.ServerConfig, "ai_config")
    assert row.value["endpoint"] == "http://ollama:11434"
    assert row.value["model"] == "qwen"
    assert row.is_sensitive is True
    assert row.updated_by == "admin-1"


def test_update_ai_config_rejects_bad_endpoint(client, admin_token, db_session):
    resp = client.put("/admin/ai-config", json={"enabled": True, "endpoint": "ftp://box"}, headers=_auth(admin_token))
    assert resp.status_code == 422
    assert db_session.get(models.ServerConfig, "ai_config") is None


def test_update_video_config(client, admin_token, db_session):
    resp = client.put(
        "/admin/video-config",
        json={"enabled": True, "youtube_enabled": True, "max_length_seconds": 300},
        headers=_auth(admin_token),
    )
    assert resp.status_code == 200
    row = db_session.get(models.ServerConfig, "video_config")
    assert row.value["max_length_seconds"] == 300
    assert row.is_sensitive is True


def test_ai_endpoint_check(client, admin_token, monkeypatch):
    async def fake_check(provider, endpoint, api_key):
        return ConnectionTestResult(success=False, error=f"unreachable {provider} {endpoint}")

    monkeypatch.setattr(admin_config_service, "check_ai_endpoint", fake_check)
    resp = client.post(
        "/admin/ai-config/test",
        json={"provider": "lm-studio", "endpoint": "http://studio:1234/v1"},
        headers=_auth(admin_token),
    )
    assert resp.status_code == 200
    assert resp.json() == {"success": False, "error": "unreachable lm-studio http://studio:1234/v1", "models": None}


def test_ai_endpoint_check_validates_payload(client, admin_token):
    resp = client.post("/admin/ai-config/test", json={"provider": "acme"}, headers=_auth(admin_token))
    assert resp.status_code == 422
