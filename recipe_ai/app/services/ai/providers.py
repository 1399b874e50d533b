"""Generative AI providers returning structured JSON output."""

import json
import logging
import re
from typing import Any, Dict, Optional, Protocol

import httpx

from recipe_ai.app.core.config import get_settings
from recipe_ai.app.schemas.server_config import AIConfig
from recipe_ai.app.services.config_loader import get_ai_config
from recipe_ai.app.services.server_config_service import ConfigStore

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINTS: Dict[str, Optional[str]] = {
    "openai": "https://api.openai.com/v1",
    "lm-studio": "http://localhost:1234/v1",
    "ollama": "http://localhost:11434",
    "generic-openai": None,
}


class AIProviderError(Exception):
    """Provider is misconfigured or answered with an error payload."""


class AIProvider(Protocol):
    async def generate_structured_output(
        self, prompt: str, schema: Dict[str, Any], system_instruction: str
    ) -> Optional[Dict[str, Any]]:
        ...


def parse_json_content(raw: str) -> Any:
    """Parse model output into JSON, tolerating code fences and surrounding prose."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        cleaned = raw.strip()
        if cleaned.startswith("```"):
            cleaned = re.sub(r"^```[a-zA-Z0-9_-]*", "", cleaned).strip()
            if cleaned.endswith("```"):
                cleaned = cleaned[:-3].strip()

        start = cleaned.find("{")
        end = cleaned.rfind("}")
        if start != -1 and end != -1 and end > start:
            try:
                return json.loads(cleaned[start : end + 1])
            except json.JSONDecodeError:
                pass
    raise AIProviderError("AI response was not valid JSON")


def _timeout() -> httpx.Timeout:
    settings = get_settings()
    return httpx.Timeout(settings.ai_request_timeout_seconds, connect=settings.ai_connect_timeout_seconds)


def resolve_endpoint(provider: str, endpoint: Optional[str]) -> str:
    resolved = endpoint or DEFAULT_ENDPOINTS.get(provider)
    if not resolved:
        raise AIProviderError(f"No endpoint configured for provider {provider}")
    return resolved.rstrip("/")


class _HttpProvider:
    def __init__(self, config: AIConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.endpoint = resolve_endpoint(config.provider, config.endpoint)
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        return headers

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=_timeout(), transport=self.transport) as client:
            response = await client.post(f"{self.endpoint}{path}", json=payload, headers=self._headers())
        response.raise_for_status()
        data = response.json()
        if isinstance(data, dict) and data.get("error"):
            error = data["error"]
            message = error.get("message", "Unknown error") if isinstance(error, dict) else str(error)
            logger.error(
                "AI provider returned error provider=%s model=%s message=%s",
                self.config.provider,
                self.config.model,
                message[:500],
            )
            raise AIProviderError(f"AI provider error: {message}")
        return data

    def _decode(self, content: Optional[str]) -> Optional[Dict[str, Any]]:
        if not content or not content.strip():
            logger.warning("AI provider returned empty content provider=%s", self.config.provider)
            return None
        parsed = parse_json_content(content)
        if not isinstance(parsed, dict):
            logger.warning(
                "AI provider returned non-object JSON provider=%s type=%s",
                self.config.provider,
                type(parsed).__name__,
            )
            return None
        return parsed


class OpenAICompatibleProvider(_HttpProvider):
    """OpenAI chat completions API, also served by LM Studio and compatible proxies."""

    async def generate_structured_output(
        self, prompt: str, schema: Dict[str, Any], system_instruction: str
    ) -> Optional[Dict[str, Any]]:
        payload = {
            "model": self.config.model,
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
            "response_format": {
                "type": "json_schema",
                "json_schema": {"name": "structured_output", "schema": schema},
            },
            "messages": [
                {"role": "system", "content": system_instruction},
                {"role": "user", "content": prompt},
            ],
            "stream": False,
        }
        data = await self._post("/chat/completions", payload)
        content = None
        choices = data.get("choices") or []
        if choices and isinstance(choices[0], dict):
            content = (choices[0].get("message") or {}).get("content")
        return self._decode(content)


class OllamaProvider(_HttpProvider):
    async def generate_structured_output(
        self, prompt: str, schema: Dict[str, Any], system_instruction: str
    ) -> Optional[Dict[str, Any]]:
        payload = {
            "model": self.config.model,
            "format": schema,
            "stream": False,
            "options": {"temperature": self.config.temperature, "num_predict": self.config.max_tokens},
            "messages": [
                {"role": "system", "content": system_instruction},
                {"role": "user", "content": prompt},
            ],
        }
        data = await self._post("/api/chat", payload)
        content = (data.get("message") or {}).get("content")
        return self._decode(content)


def build_provider(config: AIConfig, transport: Optional[httpx.AsyncBaseTransport] = None) -> AIProvider:
    if config.provider == "ollama":
        return OllamaProvider(config, transport=transport)
    return OpenAICompatibleProvider(config, transport=transport)


async def get_ai_provider(store: ConfigStore) -> AIProvider:
    config = await get_ai_config(store)
    if config is None:
        raise AIProviderError("AI provider is not configured")
    logger.debug("Using AI provider=%s model=%s", config.provider, config.model)
    return build_provider(config)
