"""Convert a recipe's ingredients and steps to the other measurement system."""

import logging
from typing import List, Optional

from recipe_ai.app.schemas.recipe import (
    ConvertedLines,
    FullRecipeInsert,
    MeasurementSystem,
    RecipeIngredientInsert,
)
from recipe_ai.app.services.ai.prompts.loader import DefaultPromptProvider, PromptName, fill_prompt, load_prompt
from recipe_ai.app.services.ai.providers import AIProvider, get_ai_provider
from recipe_ai.app.services.ai.schemas import UNIT_CONVERSION_SCHEMA
from recipe_ai.app.services.config_loader import get_units, is_ai_enabled
from recipe_ai.app.services.recipe_normalizer import build_ingredients, build_steps
from recipe_ai.app.services.server_config_service import ConfigStore

logger = logging.getLogger(__name__)

CONVERSION_SYSTEM_INSTRUCTION = (
    "You convert recipe measurements between metric and US units. "
    "Return {} if the recipe cannot be converted."
)
SYSTEM_LABELS = {MeasurementSystem.METRIC: "metric", MeasurementSystem.US: "US customary"}


def _format_ingredient(ing: RecipeIngredientInsert) -> str:
    parts = []
    if ing.amount is not None:
        parts.append(format(ing.amount.normalize(), "f"))
    if ing.unit:
        parts.append(ing.unit)
    parts.append(ing.ingredient_name)
    return " ".join(parts)


def _source_lines(recipe: FullRecipeInsert, source: MeasurementSystem) -> tuple[List[str], List[str]]:
    ingredients = sorted(
        (i for i in recipe.recipe_ingredients if i.system_used == source), key=lambda i: i.order
    )
    steps = sorted((s for s in recipe.steps if s.system_used == source), key=lambda s: s.order)
    return [_format_ingredient(i) for i in ingredients], [s.step for s in steps]


async def convert_recipe_units(
    store: ConfigStore,
    recipe: FullRecipeInsert,
    target: MeasurementSystem,
    *,
    provider: Optional[AIProvider] = None,
    defaults: Optional[DefaultPromptProvider] = None,
) -> Optional[ConvertedLines]:
    if not await is_ai_enabled(store):
        logger.info("AI features are disabled, skipping unit conversion")
        return None

    source = MeasurementSystem.US if target == MeasurementSystem.METRIC else MeasurementSystem.METRIC
    ingredient_lines, step_lines = _source_lines(recipe, source)
    if not ingredient_lines and not step_lines:
        logger.info("Nothing to convert name=%s source=%s", recipe.name, source.value)
        return None

    template = await load_prompt(PromptName.UNIT_CONVERSION, store, defaults)
    instructions = fill_prompt(
        template, {"sourceSystem": SYSTEM_LABELS[source], "targetSystem": SYSTEM_LABELS[target]}
    )
    prompt = "\n".join(
        [instructions, "", f"RECIPE: {recipe.name}", "INGREDIENTS:", *ingredient_lines, "STEPS:", *step_lines]
    )

    if provider is None:
        provider = await get_ai_provider(store)
    logger.info(
        "Converting recipe units name=%s source=%s target=%s prompt_length=%d",
        recipe.name,
        source.value,
        target.value,
        len(prompt),
    )
    result = await provider.generate_structured_output(prompt, UNIT_CONVERSION_SCHEMA, CONVERSION_SYSTEM_INSTRUCTION)

    ingredients = (result or {}).get("ingredients")
    steps = (result or {}).get("steps")
    if not isinstance(ingredients, list) or not isinstance(steps, list) or not ingredients or not steps:
        logger.error("Unit conversion returned incomplete data name=%s", recipe.name)
        return None

    units = await get_units(store)
    converted = ConvertedLines(
        system_used=target,
        recipe_ingredients=build_ingredients([i for i in ingredients if isinstance(i, str)], units, target),
        steps=build_steps([s for s in steps if isinstance(s, str) and s.strip()], target),
    )
    logger.info(
        "Unit conversion completed name=%s ingredients=%d steps=%d",
        recipe.name,
        len(converted.recipe_ingredients),
        len(converted.steps),
    )
    return converted
