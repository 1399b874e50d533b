"""Prompt templates and their resolution."""

from recipe_ai.app.services.ai.prompts.loader import (
    DefaultPromptNotFoundError,
    DefaultPromptProvider,
    FileDefaultPromptProvider,
    PromptName,
    StaticDefaultPromptProvider,
    fill_prompt,
    load_prompt,
)

__all__ = [
    "DefaultPromptNotFoundError",
    "DefaultPromptProvider",
    "FileDefaultPromptProvider",
    "PromptName",
    "StaticDefaultPromptProvider",
    "fill_prompt",
    "load_prompt",
]
