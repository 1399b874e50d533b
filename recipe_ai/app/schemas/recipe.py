import enum
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class MeasurementSystem(str, enum.Enum):
    METRIC = "metric"
    US = "us"


class RecipeIngredientInsert(BaseModel):
    ingredient_id: Optional[str] = None
    ingredient_name: str
    amount: Optional[Decimal] = None
    unit: Optional[str] = None
    system_used: MeasurementSystem
    order: int


class StepInsert(BaseModel):
    step: str
    order: int
    system_used: MeasurementSystem


class FullRecipeInsert(BaseModel):
    """Recipe as handed to the persistence layer.

    Ingredients and steps of both measurement systems share one list each;
    entries are told apart by ``system_used`` and ``order`` restarts per system.
    """

    name: str
    description: Optional[str] = None
    url: Optional[str] = None
    image: Optional[str] = None
    servings: Optional[int] = None
    prep_minutes: Optional[int] = None
    cook_minutes: Optional[int] = None
    total_minutes: Optional[int] = None
    system_used: MeasurementSystem = MeasurementSystem.METRIC
    recipe_ingredients: List[RecipeIngredientInsert] = Field(default_factory=list)
    steps: List[StepInsert] = Field(default_factory=list)


class ExtractRecipeRequest(BaseModel):
    html: str = Field(..., min_length=1)
    url: Optional[str] = None


class ExtractRecipeResponse(BaseModel):
    success: bool
    recipe: Optional[FullRecipeInsert] = None
    message: Optional[str] = None


class ConvertedLines(BaseModel):
    system_used: MeasurementSystem
    recipe_ingredients: List[RecipeIngredientInsert]
    steps: List[StepInsert]


class ConvertRecipeRequest(BaseModel):
    recipe: FullRecipeInsert
    target: MeasurementSystem


class ConvertRecipeResponse(BaseModel):
    success: bool
    converted: Optional[ConvertedLines] = None
    message: Optional[str] = None
