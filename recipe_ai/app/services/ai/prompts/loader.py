"""Prompt resolution: admin overrides from the config store, else bundled defaults."""

import enum
import logging
from pathlib import Path
from typing import Dict, Mapping, Optional, Protocol

from recipe_ai.app.core.config import get_settings
from recipe_ai.app.schemas.server_config import PromptConfig, ServerConfigKey
from recipe_ai.app.services.server_config_service import ConfigStore, get_typed

logger = logging.getLogger(__name__)


class PromptName(str, enum.Enum):
    RECIPE_EXTRACTION = "recipe-extraction"
    UNIT_CONVERSION = "unit-conversion"


PROMPT_NAME_TO_CONFIG_KEY: Dict[PromptName, ServerConfigKey] = {
    PromptName.RECIPE_EXTRACTION: ServerConfigKey.PROMPT_RECIPE_EXTRACTION,
    PromptName.UNIT_CONVERSION: ServerConfigKey.PROMPT_UNIT_CONVERSION,
}


class DefaultPromptNotFoundError(LookupError):
    pass


class DefaultPromptProvider(Protocol):
    def default_for(self, name: PromptName) -> str:
        ...


class FileDefaultPromptProvider:
    """Reads ``<prompts_dir>/<name>.txt``."""

    def __init__(self, prompts_dir: Optional[Path] = None):
        self.prompts_dir = Path(prompts_dir or get_settings().prompts_dir)

    def default_for(self, name: PromptName) -> str:
        path = self.prompts_dir / f"{PromptName(name).value}.txt"
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise DefaultPromptNotFoundError(f"Default prompt file missing: {path}") from exc


class StaticDefaultPromptProvider:
    def __init__(self, prompts: Mapping[PromptName, str]):
        self.prompts = dict(prompts)

    def default_for(self, name: PromptName) -> str:
        try:
            return self.prompts[PromptName(name)]
        except KeyError as exc:
            raise DefaultPromptNotFoundError(f"No default prompt for {name}") from exc


def config_key_for(name: PromptName) -> ServerConfigKey:
    return PROMPT_NAME_TO_CONFIG_KEY[PromptName(name)]


async def get_prompt_override(store: ConfigStore, name: PromptName) -> Optional[PromptConfig]:
    return await get_typed(store, config_key_for(name), PromptConfig)


async def load_prompt(
    name: PromptName, store: ConfigStore, defaults: Optional[DefaultPromptProvider] = None
) -> str:
    override = await get_prompt_override(store, name)
    if override is not None:
        logger.debug("Using custom prompt name=%s length=%d", PromptName(name).value, len(override.content))
        return override.content

    defaults = defaults or FileDefaultPromptProvider()
    return defaults.default_for(name)


def fill_prompt(template: str, vars: Mapping[str, str]) -> str:
    """Replace every ``{{key}}`` with its value; values are inserted verbatim."""
    result = template
    for key, value in vars.items():
        result = result.replace("{{" + key + "}}", value)
    return result
