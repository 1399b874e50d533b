"""Structured-output schema for dual-unit recipe extraction and its validation."""

from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from recipe_ai.app.schemas.recipe import MeasurementSystem

_STRING_LIST = {"type": "array", "items": {"type": "string"}}
_DUAL_UNIT_LIST = {
    "type": "object",
    "properties": {"metric": _STRING_LIST, "us": _STRING_LIST},
    "required": ["metric", "us"],
}

JSONLD_RECIPE_SCHEMA = {
    "type": "object",
    "properties": {
        "@context": {"type": "string"},
        "@type": {"type": "string"},
        "name": {"type": "string"},
        "description": {"type": ["string", "null"]},
        "image": {"type": ["string", "null"]},
        "recipeYield": {"type": ["number", "string", "null"]},
        "prepTime": {"type": ["string", "null"]},
        "cookTime": {"type": ["string", "null"]},
        "totalTime": {"type": ["string", "null"]},
        "recipeIngredient": _DUAL_UNIT_LIST,
        "recipeInstructions": _DUAL_UNIT_LIST,
    },
    "required": ["name", "recipeIngredient", "recipeInstructions"],
}

UNIT_CONVERSION_SCHEMA = {
    "type": "object",
    "properties": {"ingredients": _STRING_LIST, "steps": _STRING_LIST},
    "required": ["ingredients", "steps"],
}


class DualUnitLines(BaseModel):
    metric: List[str] = Field(default_factory=list)
    us: List[str] = Field(default_factory=list)

    @field_validator("metric", "us", mode="before")
    @classmethod
    def drop_blank_lines(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return [v.strip() for v in value if isinstance(v, str) and v.strip()]
        return value

    def for_system(self, system: MeasurementSystem) -> List[str]:
        return self.metric if system == MeasurementSystem.METRIC else self.us


class DualUnitRecipeJson(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str = ""
    description: Optional[str] = None
    image: Optional[Any] = None
    recipe_yield: Optional[Union[int, float, str]] = Field(None, alias="recipeYield")
    prep_time: Optional[Union[str, int, float]] = Field(None, alias="prepTime")
    cook_time: Optional[Union[str, int, float]] = Field(None, alias="cookTime")
    total_time: Optional[Union[str, int, float]] = Field(None, alias="totalTime")
    recipe_ingredient: DualUnitLines = Field(default_factory=DualUnitLines, alias="recipeIngredient")
    recipe_instructions: DualUnitLines = Field(default_factory=DualUnitLines, alias="recipeInstructions")

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value: Any) -> Any:
        if value is None:
            return ""
        return value.strip() if isinstance(value, str) else value

    def single_system_view(self, system: MeasurementSystem) -> dict:
        """JSON-LD dict carrying only ``system``'s ingredient and instruction lines."""
        data = self.model_dump(by_alias=True, exclude={"recipe_ingredient", "recipe_instructions"})
        data["recipeIngredient"] = list(self.recipe_ingredient.for_system(system))
        data["recipeInstructions"] = list(self.recipe_instructions.for_system(system))
        return data


class ExtractionValidation(BaseModel):
    ok: bool
    recipe: Optional[DualUnitRecipeJson] = None
    reason: Optional[str] = None


def validate_extraction(raw: Any) -> ExtractionValidation:
    """Check a provider response is a complete dual-unit recipe; partial data is rejected."""
    if not raw:
        return ExtractionValidation(ok=False, reason="empty")
    if not isinstance(raw, dict):
        return ExtractionValidation(ok=False, reason="invalid_shape")
    try:
        recipe = DualUnitRecipeJson.model_validate(raw)
    except ValidationError:
        return ExtractionValidation(ok=False, reason="invalid_shape")

    if not recipe.name:
        return ExtractionValidation(ok=False, reason="missing_name")
    for system in MeasurementSystem:
        if not recipe.recipe_ingredient.for_system(system):
            return ExtractionValidation(ok=False, reason=f"missing_{system.value}_ingredients")
    for system in MeasurementSystem:
        if not recipe.recipe_instructions.for_system(system):
            return ExtractionValidation(ok=False, reason=f"missing_{system.value}_steps")
    return ExtractionValidation(ok=True, recipe=recipe)
