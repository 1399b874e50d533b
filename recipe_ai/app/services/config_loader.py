"""Typed accessors for admin-managed server configuration."""

import logging
from typing import List

from recipe_ai.app.schemas.server_config import (
    DEFAULT_UNITS,
    AIConfig,
    RecipePermissionPolicy,
    ServerConfigKey,
    UnitDefinition,
    UnitsConfig,
)
from recipe_ai.app.services.server_config_service import ConfigStore, get_typed

logger = logging.getLogger(__name__)


async def get_ai_config(store: ConfigStore) -> AIConfig | None:
    return await get_typed(store, ServerConfigKey.AI_CONFIG, AIConfig)


async def is_ai_enabled(store: ConfigStore) -> bool:
    config = await get_ai_config(store)
    return bool(config and config.enabled)


async def get_units(store: ConfigStore) -> List[UnitDefinition]:
    config = await get_typed(store, ServerConfigKey.UNITS, UnitsConfig)
    if config and config.units:
        return config.units
    logger.debug("No unit table configured; using %d built-in units", len(DEFAULT_UNITS))
    return DEFAULT_UNITS


async def get_recipe_permission_policy(store: ConfigStore) -> RecipePermissionPolicy:
    policy = await get_typed(store, ServerConfigKey.RECIPE_PERMISSION_POLICY, RecipePermissionPolicy)
    return policy or RecipePermissionPolicy()
