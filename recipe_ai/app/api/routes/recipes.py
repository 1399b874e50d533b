import logging

import httpx
from fastapi import APIRouter, Depends, HTTPException, status

from recipe_ai.app.api.deps import get_config_store, get_current_user, get_default_prompts
from recipe_ai.app.schemas.auth import CurrentUser
from recipe_ai.app.schemas.recipe import (
    ConvertRecipeRequest,
    ConvertRecipeResponse,
    ExtractRecipeRequest,
    ExtractRecipeResponse,
)
from recipe_ai.app.services.ai import recipe_parser, unit_converter
from recipe_ai.app.services.ai.prompts.loader import DefaultPromptProvider
from recipe_ai.app.services.ai.providers import AIProviderError
from recipe_ai.app.services.server_config_service import ConfigStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recipes", tags=["recipes"])


@router.post("/extract", response_model=ExtractRecipeResponse)
async def extract_recipe(
    payload: ExtractRecipeRequest,
    store: ConfigStore = Depends(get_config_store),
    defaults: DefaultPromptProvider = Depends(get_default_prompts),
    current_user: CurrentUser = Depends(get_current_user),
):
    logger.info("Recipe extraction requested user_id=%s url=%s html_length=%d", current_user.id, payload.url, len(payload.html))
    try:
        recipe = await recipe_parser.extract_recipe_with_ai(store, payload.html, payload.url, defaults=defaults)
    except (AIProviderError, httpx.HTTPError) as exc:
        logger.error("AI provider failure url=%s: %s", payload.url, exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="AI provider request failed")

    if recipe is None:
        return ExtractRecipeResponse(success=False, message="No recipe could be extracted")
    return ExtractRecipeResponse(success=True, recipe=recipe)


@router.post("/convert", response_model=ConvertRecipeResponse)
async def convert_recipe(
    payload: ConvertRecipeRequest,
    store: ConfigStore = Depends(get_config_store),
    defaults: DefaultPromptProvider = Depends(get_default_prompts),
    current_user: CurrentUser = Depends(get_current_user),
):
    logger.info(
        "Unit conversion requested user_id=%s name=%s target=%s",
        current_user.id,
        payload.recipe.name,
        payload.target.value,
    )
    try:
        converted = await unit_converter.convert_recipe_units(store, payload.recipe, payload.target, defaults=defaults)
    except (AIProviderError, httpx.HTTPError) as exc:
        logger.error("AI provider failure during unit conversion name=%s: %s", payload.recipe.name, exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="AI provider request failed")

    if converted is None:
        return ConvertRecipeResponse(success=False, message="Recipe units could not be converted")
    return ConvertRecipeResponse(success=True, converted=converted)
