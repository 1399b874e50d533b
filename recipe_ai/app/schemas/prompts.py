from pydantic import BaseModel, Field

from recipe_ai.app.services.ai.prompts.loader import PromptName


class PromptRead(BaseModel):
    name: PromptName
    content: str
    is_custom: bool
    default_content: str


class PromptStatus(BaseModel):
    name: PromptName
    is_custom: bool


class PromptUpdate(BaseModel):
    content: str = Field(..., min_length=1, description="Prompt content is required")


class SuccessResponse(BaseModel):
    success: bool = True
