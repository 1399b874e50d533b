import enum
from typing import Dict, List, Literal, Optional, Type

from pydantic import BaseModel, Field, field_validator


class ServerConfigKey(str, enum.Enum):
    AI_CONFIG = "ai_config"
    VIDEO_CONFIG = "video_config"
    UNITS = "units"
    RECIPE_PERMISSION_POLICY = "recipe_permission_policy"
    PROMPT_RECIPE_EXTRACTION = "prompt_recipe_extraction"
    PROMPT_UNIT_CONVERSION = "prompt_unit_conversion"


AIProviderName = Literal["openai", "ollama", "lm-studio", "generic-openai"]
PermissionLevel = Literal["everyone", "household", "owner"]


class AIConfig(BaseModel):
    enabled: bool = False
    provider: AIProviderName = "openai"
    endpoint: Optional[str] = None
    model: str = "gpt-4o-mini"
    api_key: Optional[str] = None
    temperature: float = Field(0.0, ge=0.0, le=2.0)
    max_tokens: int = Field(10000, gt=0)

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError("Endpoint must be an http(s) URL")
        return value.rstrip("/")


class VideoConfig(BaseModel):
    enabled: bool = False
    youtube_enabled: bool = False
    max_length_seconds: int = Field(120, gt=0)
    ytdlp_version: str = "latest"
    transcription_provider: Literal["openai", "generic-openai", "disabled"] = "disabled"
    transcription_endpoint: Optional[str] = None
    transcription_api_key: Optional[str] = None
    transcription_model: str = "whisper-1"


class PromptConfig(BaseModel):
    content: str = Field(..., min_length=1)


class UnitDefinition(BaseModel):
    id: str
    short: str
    plural: str
    alternates: List[str] = Field(default_factory=list)

    def tokens(self) -> List[str]:
        return [self.id, self.short, self.plural, *self.alternates]


class UnitsConfig(BaseModel):
    units: List[UnitDefinition] = Field(default_factory=list)


class RecipePermissionPolicy(BaseModel):
    view: PermissionLevel = "everyone"
    edit: PermissionLevel = "owner"
    delete: PermissionLevel = "owner"


# One record type per key; reads are validated against it.
CONFIG_RECORD_TYPES: Dict[ServerConfigKey, Type[BaseModel]] = {
    ServerConfigKey.AI_CONFIG: AIConfig,
    ServerConfigKey.VIDEO_CONFIG: VideoConfig,
    ServerConfigKey.UNITS: UnitsConfig,
    ServerConfigKey.RECIPE_PERMISSION_POLICY: RecipePermissionPolicy,
    ServerConfigKey.PROMPT_RECIPE_EXTRACTION: PromptConfig,
    ServerConfigKey.PROMPT_UNIT_CONVERSION: PromptConfig,
}


def _unit(id: str, short: str, plural: str, *alternates: str) -> UnitDefinition:
    return UnitDefinition(id=id, short=short, plural=plural, alternates=list(alternates))


DEFAULT_UNITS: List[UnitDefinition] = [
    _unit("gram", "g", "grams", "gr", "gramme", "grammes"),
    _unit("kilogram", "kg", "kilograms", "kilo", "kilos"),
    _unit("milligram", "mg", "milligrams"),
    _unit("milliliter", "ml", "milliliters", "millilitre", "millilitres", "mL"),
    _unit("centiliter", "cl", "centiliters", "centilitre", "centilitres"),
    _unit("deciliter", "dl", "deciliters", "decilitre", "decilitres"),
    _unit("liter", "l", "liters", "litre", "litres", "L"),
    _unit("teaspoon", "tsp", "teaspoons", "t"),
    _unit("tablespoon", "tbsp", "tablespoons", "tbs", "tbl", "T"),
    _unit("cup", "cup", "cups", "c"),
    _unit("fluid_ounce", "fl oz", "fluid ounces", "fl. oz", "floz"),
    _unit("ounce", "oz", "ounces"),
    _unit("pound", "lb", "pounds", "lbs"),
    _unit("pint", "pt", "pints"),
    _unit("quart", "qt", "quarts"),
    _unit("gallon", "gal", "gallons"),
    _unit("pinch", "pinch", "pinches"),
    _unit("dash", "dash", "dashes"),
    _unit("clove", "clove", "cloves"),
    _unit("slice", "slice", "slices"),
    _unit("piece", "pc", "pieces", "pcs"),
    _unit("can", "can", "cans"),
    _unit("package", "pkg", "packages", "pack", "packs"),
    _unit("stick", "stick", "sticks"),
    _unit("inch", "in", "inches"),
    _unit("centimeter", "cm", "centimeters", "centimetre", "centimetres"),
]
