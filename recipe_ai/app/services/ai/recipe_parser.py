"""AI-assisted recipe extraction from webpage HTML."""

import logging
from typing import Optional

from recipe_ai.app.schemas.recipe import FullRecipeInsert, MeasurementSystem
from recipe_ai.app.services.ai.html_sanitizer import extract_sanitized_body
from recipe_ai.app.services.ai.prompts.loader import DefaultPromptProvider, PromptName, load_prompt
from recipe_ai.app.services.ai.providers import AIProvider, get_ai_provider
from recipe_ai.app.services.ai.schemas import JSONLD_RECIPE_SCHEMA, validate_extraction
from recipe_ai.app.services.config_loader import get_units, is_ai_enabled
from recipe_ai.app.services.recipe_normalizer import build_ingredients, build_steps, normalize_recipe_from_json
from recipe_ai.app.services.server_config_service import ConfigStore

logger = logging.getLogger(__name__)

MAX_WEBPAGE_TEXT_CHARS = 50_000
EXTRACTION_SYSTEM_INSTRUCTION = (
    "You extract recipe data as JSON-LD with both metric and US measurements. "
    "Return {} if insufficient data."
)


async def build_extraction_prompt(
    store: ConfigStore,
    html: str,
    url: Optional[str] = None,
    defaults: Optional[DefaultPromptProvider] = None,
) -> str:
    sanitized = extract_sanitized_body(html)
    truncated = sanitized[:MAX_WEBPAGE_TEXT_CHARS]
    prompt = await load_prompt(PromptName.RECIPE_EXTRACTION, store, defaults)
    url_line = f"URL: {url}\n" if url else ""
    return f"{prompt}\n{url_line}\nWEBPAGE TEXT:\n{truncated}"


async def extract_recipe_with_ai(
    store: ConfigStore,
    html: str,
    url: Optional[str] = None,
    *,
    provider: Optional[AIProvider] = None,
    defaults: Optional[DefaultPromptProvider] = None,
) -> Optional[FullRecipeInsert]:
    """Extract a dual-unit recipe from ``html``.

    Returns None when AI is disabled or the provider could not produce a
    complete recipe. Provider transport errors propagate to the caller.
    """
    if not await is_ai_enabled(store):
        logger.info("AI features are disabled, skipping extraction")
        return None

    logger.info("Starting AI recipe extraction url=%s", url)

    if provider is None:
        provider = await get_ai_provider(store)
    prompt = await build_extraction_prompt(store, html, url, defaults)

    logger.debug("Sending prompt to AI provider url=%s prompt_length=%d", url, len(prompt))

    raw = await provider.generate_structured_output(prompt, JSONLD_RECIPE_SCHEMA, EXTRACTION_SYSTEM_INSTRUCTION)

    validation = validate_extraction(raw)
    if validation.reason == "empty":
        logger.error("Empty or null response from AI provider url=%s", url)
        return None
    if not validation.ok:
        logger.error("Invalid recipe data from AI provider url=%s reason=%s", url, validation.reason)
        return None

    extraction = validation.recipe
    logger.debug(
        "AI response received url=%s name=%s metric_ingredients=%d us_ingredients=%d metric_steps=%d us_steps=%d",
        url,
        extraction.name,
        len(extraction.recipe_ingredient.metric),
        len(extraction.recipe_ingredient.us),
        len(extraction.recipe_instructions.metric),
        len(extraction.recipe_instructions.us),
    )

    units = await get_units(store)
    normalized = normalize_recipe_from_json(
        extraction.single_system_view(MeasurementSystem.METRIC), units, MeasurementSystem.METRIC
    )
    if normalized is None:
        logger.error("Failed to normalize recipe from JSON-LD url=%s", url)
        return None

    us_ingredients = build_ingredients(extraction.recipe_ingredient.us, units, MeasurementSystem.US)
    us_steps = build_steps(extraction.recipe_instructions.us, MeasurementSystem.US)

    normalized.url = url
    normalized.recipe_ingredients = [*normalized.recipe_ingredients, *us_ingredients]
    normalized.steps = [*normalized.steps, *us_steps]

    logger.info(
        "AI recipe extraction completed url=%s name=%s total_ingredients=%d total_steps=%d system=%s",
        url,
        normalized.name,
        len(normalized.recipe_ingredients),
        len(normalized.steps),
        normalized.system_used.value,
    )
    return normalized
