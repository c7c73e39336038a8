"""
Dinner Planner - Generation output parsing.

Model output is untrusted text. It is fence-stripped, parsed as JSON and
turned into one of three results:

- Generated: ingredients/recipe/nutrition ready to store
- Rejected: the model says the input is not food (message is user-facing)
- Failed: anything else that went wrong (logged, never shown)
"""

import json
import logging
import math
import re
from dataclasses import dataclass, field

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from dinner_planner.ai.prompts import INVALID_INPUT, invalid_dish_message
from dinner_planner.config import Language

logger = logging.getLogger(__name__)

NUTRITION_FIELDS = ("calories", "proteins", "fats", "carbs")

_JSON_FENCE_OPEN = re.compile(r"^```json\n?")
_FENCE_OPEN = re.compile(r"^```\n?")
_FENCE_CLOSE = re.compile(r"\n?```$")


class GeneratedIngredient(BaseModel):
    """One ingredient line from the model (or the cache)."""

    name: str = Field(min_length=1)
    amount: str = ""
    unit: str = ""

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("amount", mode="before")
    @classmethod
    def _amount_as_text(cls, v):
        if v is None:
            return ""
        return str(v)

    @field_validator("unit", mode="before")
    @classmethod
    def _unit_as_text(cls, v):
        if v is None:
            return ""
        return str(v).strip()


def _to_int(value) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(str(value).replace(",", "."))
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return int(round(number))


class Nutrition(BaseModel):
    """Whole-dish nutrition estimate. Every field is optional."""

    calories: int | None = None
    proteins: int | None = None
    fats: int | None = None
    carbs: int | None = None

    @field_validator(*NUTRITION_FIELDS, mode="before")
    @classmethod
    def _coerce(cls, v):
        return _to_int(v)

    def present_fields(self) -> dict[str, int]:
        """Only the fields that have a value."""
        return {name: value for name, value in self.model_dump().items() if value is not None}


@dataclass(frozen=True)
class Generated:
    ingredients: list[GeneratedIngredient] = field(default_factory=list)
    recipe: str = ""
    nutrition: Nutrition = field(default_factory=Nutrition)
    cached: bool = False


@dataclass(frozen=True)
class Rejected:
    message: str


@dataclass(frozen=True)
class Failed:
    reason: str


GenerationResult = Generated | Rejected | Failed


def strip_code_fences(text: str) -> str:
    """
    Remove a Markdown code fence around a response.

    Examples:
        strip_code_fences('```json\\n{"a": 1}\\n```') -> '{"a": 1}'
        strip_code_fences('{"a": 1}') -> '{"a": 1}'
    """
    text = text.strip()
    if text.startswith("```json"):
        text = _FENCE_CLOSE.sub("", _JSON_FENCE_OPEN.sub("", text))
    elif text.startswith("```"):
        text = _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", text))
    return text


def parse_ingredients(items) -> list[GeneratedIngredient]:
    """Keep the well-formed ingredient entries, drop the rest."""
    if not isinstance(items, list):
        return []

    ingredients = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            ingredients.append(GeneratedIngredient.model_validate(item))
        except PydanticValidationError:
            logger.debug(f"Dropping malformed ingredient: {item!r}")
    return ingredients


def parse_generation(raw_text: str | None, lang: Language) -> GenerationResult:
    """Turn raw model output into a GenerationResult."""
    text = strip_code_fences(raw_text or "")

    try:
        payload = json.loads(text or "{}")
    except json.JSONDecodeError as e:
        return Failed(f"Response is not valid JSON: {e}")

    if not isinstance(payload, dict):
        return Failed(f"Expected a JSON object, got {type(payload).__name__}")

    if payload.get("error") == INVALID_INPUT:
        message = payload.get("message")
        if not isinstance(message, str) or not message.strip():
            message = invalid_dish_message(lang)
        return Rejected(message)

    ingredients = parse_ingredients(payload.get("ingredients"))
    recipe = payload.get("recipe")
    recipe = recipe.strip() if isinstance(recipe, str) else ""

    if not ingredients and not recipe:
        return Failed("Response has neither ingredients nor recipe")

    nutrition = Nutrition.model_validate({name: payload.get(name) for name in NUTRITION_FIELDS})
    return Generated(ingredients=ingredients, recipe=recipe, nutrition=nutrition)
