"""Normalize JSON-LD recipe data into the insert DTO."""

import logging
import re
from typing import Any, Iterable, List, Optional

from recipe_ai.app.schemas.recipe import (
    FullRecipeInsert,
    MeasurementSystem,
    RecipeIngredientInsert,
    StepInsert,
)
from recipe_ai.app.schemas.server_config import UnitDefinition
from recipe_ai.app.services.ingredient_parser import clean_text, parse_ingredient_with_defaults

logger = logging.getLogger(__name__)


def parse_iso8601_duration(duration: str) -> Optional[int]:
    """Parse a minimal ISO-8601 duration string (e.g., PT1H30M) into minutes."""
    if not duration:
        return None
    match = re.match(r"P(?:(\d+)D)?T?(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?", duration.strip().upper())
    if not match:
        return None
    days = int(match.group(1) or 0)
    hours = int(match.group(2) or 0)
    minutes = int(match.group(3) or 0)
    seconds = int(match.group(4) or 0)
    total_minutes = days * 24 * 60 + hours * 60 + minutes + (1 if seconds >= 30 else 0)
    return total_minutes or None


def parse_minutes(value) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        iso_minutes = parse_iso8601_duration(value)
        if iso_minutes is not None:
            return iso_minutes
        match = re.search(r"(\d+)\s*(min|minute|minutes)", value, flags=re.I)
        if match:
            return int(match.group(1))
    return None


def parse_servings(value) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, list):
        value = value[0] if value else None
        return parse_servings(value)
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        match = re.search(r"\d+", value)
        if match:
            return int(match.group())
    return None


def extract_image(value) -> Optional[str]:
    if isinstance(value, str):
        return value or None
    if isinstance(value, dict):
        return extract_image(value.get("url"))
    if isinstance(value, list):
        for item in value:
            url = extract_image(item)
            if url:
                return url
    return None


def extract_instruction_text(instructions) -> List[str]:
    """Flatten strings, HowToStep objects and HowToSection lists into step texts."""
    steps: List[str] = []
    if isinstance(instructions, str):
        cleaned = clean_text(instructions)
        if cleaned:
            steps.append(cleaned)
    elif isinstance(instructions, list):
        for entry in instructions:
            steps.extend(extract_instruction_text(entry))
    elif isinstance(instructions, dict):
        if "itemListElement" in instructions:
            steps.extend(extract_instruction_text(instructions.get("itemListElement")))
        else:
            cleaned = clean_text(instructions.get("text") or instructions.get("description") or "")
            if cleaned:
                steps.append(cleaned)
    return steps


def _ingredient_lines(value: Any) -> List[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    return [clean_text(v) for v in value if isinstance(v, str) and clean_text(v)]


def build_ingredients(
    lines: Iterable[str], units: Iterable[UnitDefinition], system: MeasurementSystem
) -> List[RecipeIngredientInsert]:
    """Parse ``lines`` into ingredients tagged with ``system``; order is 0-based per system."""
    parsed = parse_ingredient_with_defaults(lines, units)
    return [
        RecipeIngredientInsert(
            ingredient_id=None,
            ingredient_name=ing.description,
            amount=ing.quantity,
            unit=ing.unit_of_measure_id,
            system_used=system,
            order=i,
        )
        for i, ing in enumerate(parsed)
    ]


def build_steps(lines: Iterable[str], system: MeasurementSystem) -> List[StepInsert]:
    """Steps tagged with ``system``; order is 1-based per system."""
    return [StepInsert(step=line, order=i + 1, system_used=system) for i, line in enumerate(lines)]


def normalize_recipe_from_json(
    data: Any,
    units: Iterable[UnitDefinition],
    system_used: MeasurementSystem = MeasurementSystem.METRIC,
) -> Optional[FullRecipeInsert]:
    """Convert a single-system JSON-LD recipe into a ``FullRecipeInsert``.

    Returns None when the data has no name or neither ingredients nor steps.
    """
    if not isinstance(data, dict):
        logger.warning("Cannot normalize recipe: expected object, got %s", type(data).__name__)
        return None

    name = clean_text(data.get("name") or "") if isinstance(data.get("name"), str) else ""
    ingredient_lines = _ingredient_lines(data.get("recipeIngredient"))
    step_lines = extract_instruction_text(data.get("recipeInstructions"))

    if not name:
        logger.info("Cannot normalize recipe: missing name")
        return None
    if not ingredient_lines and not step_lines:
        logger.info("Cannot normalize recipe name=%s: no ingredients or steps", name)
        return None

    prep = parse_minutes(data.get("prepTime"))
    cook = parse_minutes(data.get("cookTime"))
    total = parse_minutes(data.get("totalTime"))
    if total is None and (prep is not None or cook is not None):
        total = (prep or 0) + (cook or 0)

    description = data.get("description")
    recipe = FullRecipeInsert(
        name=name,
        description=clean_text(description) if isinstance(description, str) and description.strip() else None,
        url=data.get("url") if isinstance(data.get("url"), str) else None,
        image=extract_image(data.get("image")),
        servings=parse_servings(data.get("recipeYield")),
        prep_minutes=prep,
        cook_minutes=cook,
        total_minutes=total,
        system_used=system_used,
        recipe_ingredients=build_ingredients(ingredient_lines, units, system_used),
        steps=build_steps(step_lines, system_used),
    )
    logger.debug(
        "Normalized recipe name=%s ingredients=%d steps=%d system=%s",
        recipe.name,
        len(recipe.recipe_ingredients),
        len(recipe.steps),
        system_used.value,
    )
    return recipe
