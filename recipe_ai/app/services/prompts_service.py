"""Admin operations over prompt overrides.

Authorization is enforced by the calling route; these functions assume an
admin actor and only record ``user_id`` for auditing and logs.
"""

import asyncio
import logging
from typing import List, Optional

from recipe_ai.app.schemas.prompts import PromptRead, PromptStatus
from recipe_ai.app.schemas.server_config import PromptConfig
from recipe_ai.app.services.ai.prompts.loader import (
    DefaultPromptProvider,
    FileDefaultPromptProvider,
    PromptName,
    config_key_for,
    get_prompt_override,
)
from recipe_ai.app.services.server_config_service import ConfigStore

logger = logging.getLogger(__name__)


class PromptValidationError(ValueError):
    pass


async def get_prompt(
    store: ConfigStore,
    name: PromptName,
    user_id: str,
    defaults: Optional[DefaultPromptProvider] = None,
) -> PromptRead:
    logger.debug("Getting prompt user_id=%s name=%s", user_id, name.value)
    defaults = defaults or FileDefaultPromptProvider()
    override = await get_prompt_override(store, name)
    default_content = defaults.default_for(name)

    if override is not None:
        return PromptRead(name=name, content=override.content, is_custom=True, default_content=default_content)
    return PromptRead(name=name, content=default_content, is_custom=False, default_content=default_content)


async def update_prompt(store: ConfigStore, name: PromptName, content: str, user_id: str) -> None:
    if not content or not content.strip():
        raise PromptValidationError("Prompt content is required")
    logger.info("Updating prompt user_id=%s name=%s content_length=%d", user_id, name.value, len(content))
    await store.set(config_key_for(name), PromptConfig(content=content), user_id, False)


async def reset_prompt(store: ConfigStore, name: PromptName, user_id: str) -> None:
    logger.info("Resetting prompt to default user_id=%s name=%s", user_id, name.value)
    await store.delete(config_key_for(name))


async def list_prompts(store: ConfigStore, user_id: str) -> List[PromptStatus]:
    logger.debug("Listing prompts user_id=%s", user_id)

    async def _status(name: PromptName) -> PromptStatus:
        override = await store.get(config_key_for(name))
        return PromptStatus(name=name, is_custom=override is not None)

    return list(await asyncio.gather(*(_status(name) for name in PromptName)))
