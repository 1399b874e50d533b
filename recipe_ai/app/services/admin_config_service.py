"""Admin updates to AI and video configuration."""

import logging
from typing import Optional

from pydantic import BaseModel, Field

from recipe_ai.app.schemas.server_config import AIConfig, AIProviderName, ServerConfigKey, VideoConfig
from recipe_ai.app.services.ai.connection_tests import ConnectionTestResult, check_ai_endpoint
from recipe_ai.app.services.config_loader import get_ai_config, get_recipe_permission_policy
from recipe_ai.app.services.events import PermissionsEmitter, permissions_emitter
from recipe_ai.app.services.server_config_service import ConfigStore

logger = logging.getLogger(__name__)

POLICY_UPDATED_EVENT = "policyUpdated"


class AIEndpointTestRequest(BaseModel):
    provider: AIProviderName
    endpoint: Optional[str] = Field(None, pattern=r"^https?://")
    api_key: Optional[str] = None


async def update_ai_config(
    store: ConfigStore,
    config: AIConfig,
    user_id: str,
    emitter: PermissionsEmitter = permissions_emitter,
) -> None:
    """Store the AI config; announce a policy update when AI is switched on or off.

    The recipe permission policy is re-broadcast so clients refresh whether
    AI-backed actions (such as unit conversion) are shown.
    """
    logger.info("Updating AI config user_id=%s enabled=%s", user_id, config.enabled)

    current = await get_ai_config(store)
    enabled_changed = (current.enabled if current else None) != config.enabled

    await store.set(ServerConfigKey.AI_CONFIG, config, user_id, True)

    if enabled_changed:
        logger.info("AI enabled state changed, broadcasting policy update enabled=%s", config.enabled)
        policy = await get_recipe_permission_policy(store)
        emitter.broadcast(POLICY_UPDATED_EVENT, {"recipePolicy": policy.model_dump()})


async def update_video_config(store: ConfigStore, config: VideoConfig, user_id: str) -> None:
    logger.info("Updating video config user_id=%s enabled=%s", user_id, config.enabled)
    # carries the transcription API key
    await store.set(ServerConfigKey.VIDEO_CONFIG, config, user_id, True)


async def run_ai_endpoint_test(request: AIEndpointTestRequest, user_id: str) -> ConnectionTestResult:
    logger.info("Testing AI endpoint user_id=%s provider=%s", user_id, request.provider)
    return await check_ai_endpoint(request.provider, request.endpoint, request.api_key)
