import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from recipe_ai.app.api.deps import get_config_store, get_default_prompts, require_admin
from recipe_ai.app.schemas.auth import CurrentUser
from recipe_ai.app.schemas.prompts import PromptRead, PromptStatus, PromptUpdate, SuccessResponse
from recipe_ai.app.schemas.server_config import AIConfig, VideoConfig
from recipe_ai.app.services import admin_config_service, prompts_service
from recipe_ai.app.services.ai.connection_tests import ConnectionTestResult
from recipe_ai.app.services.ai.prompts.loader import DefaultPromptNotFoundError, DefaultPromptProvider, PromptName
from recipe_ai.app.services.server_config_service import ConfigStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/prompts", response_model=List[PromptStatus])
async def list_prompts(
    store: ConfigStore = Depends(get_config_store),
    admin: CurrentUser = Depends(require_admin),
):
    return await prompts_service.list_prompts(store, admin.id)


@router.get("/prompts/{name}", response_model=PromptRead)
async def get_prompt(
    name: PromptName,
    store: ConfigStore = Depends(get_config_store),
    defaults: DefaultPromptProvider = Depends(get_default_prompts),
    admin: CurrentUser = Depends(require_admin),
):
    try:
        return await prompts_service.get_prompt(store, name, admin.id, defaults)
    except DefaultPromptNotFoundError as exc:
        logger.error("Default prompt missing name=%s: %s", name.value, exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Default prompt unavailable")


@router.put("/prompts/{name}", response_model=SuccessResponse)
async def update_prompt(
    name: PromptName,
    payload: PromptUpdate,
    store: ConfigStore = Depends(get_config_store),
    admin: CurrentUser = Depends(require_admin),
):
    try:
        await prompts_service.update_prompt(store, name, payload.content, admin.id)
    except prompts_service.PromptValidationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    return SuccessResponse()


@router.delete("/prompts/{name}", response_model=SuccessResponse)
async def reset_prompt(
    name: PromptName,
    store: ConfigStore = Depends(get_config_store),
    admin: CurrentUser = Depends(require_admin),
):
    await prompts_service.reset_prompt(store, name, admin.id)
    return SuccessResponse()


@router.put("/ai-config", response_model=SuccessResponse)
async def update_ai_config(
    payload: AIConfig,
    store: ConfigStore = Depends(get_config_store),
    admin: CurrentUser = Depends(require_admin),
):
    await admin_config_service.update_ai_config(store, payload, admin.id)
    return SuccessResponse()


@router.put("/video-config", response_model=SuccessResponse)
async def update_video_config(
    payload: VideoConfig,
    store: ConfigStore = Depends(get_config_store),
    admin: CurrentUser = Depends(require_admin),
):
    await admin_config_service.update_video_config(store, payload, admin.id)
    return SuccessResponse()


@router.post("/ai-config/test", response_model=ConnectionTestResult)
async def check_ai_endpoint(
    payload: admin_config_service.AIEndpointTestRequest,
    admin: CurrentUser = Depends(require_admin),
):
    return await admin_config_service.run_ai_endpoint_test(payload, admin.id)
