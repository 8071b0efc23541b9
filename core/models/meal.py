from __future__ import annotations

import math
import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")


class ExcludedMealSlot(str, Enum):
    breakfast = "breakfast"
    lunch = "lunch"
    dinner = "dinner"
    snacks = "snacks"


def to_calories(value: Any) -> int:
    """Best-effort integer kcal from whatever the model emitted (0 if unusable)."""
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, (int, float)):
        return int(round(value)) if math.isfinite(value) else 0
    if isinstance(value, str):
        match = _NUMBER.search(value)
        if match:
            return int(round(float(match.group())))
    return 0


class Meal(BaseModel):
    """Immutable once generated; UI edits build a new value via `model_copy`."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = ""
    calories: int = 0
    protein: str = "0g"
    carbs: str = "0g"
    fats: str = "0g"
    ingredients: list[str] = Field(default_factory=list)
    instructions: str = ""

    @field_validator("name", "instructions", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("calories", mode="before")
    @classmethod
    def _kcal(cls, v: Any) -> int:
        return max(to_calories(v), 0)

    @field_validator("protein", "carbs", "fats", mode="before")
    @classmethod
    def _grams(cls, v: Any) -> str:
        if v is None or isinstance(v, bool):
            return "0g"
        if isinstance(v, (int, float)):
            return f"{v:g}g" if math.isfinite(v) else "0g"
        return str(v).strip() or "0g"

    @field_validator("ingredients", mode="before")
    @classmethod
    def _ingredients(cls, v: Any) -> list[str]:
        if v is None or isinstance(v, bool):
            return []
        if isinstance(v, (list, tuple)):
            return [str(item) for item in v if item is not None]
        return [str(v)]


class DailyPlan(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    day: str
    breakfast: Meal | None = None
    lunch: Meal | None = None
    dinner: Meal | None = None
    snacks: list[Meal] = Field(default_factory=list)
    total_calories: int = 0
    summary: str = ""

    def meals(self) -> list[Meal]:
        """Every meal present on the day, snacks last."""
        named = [m for m in (self.breakfast, self.lunch, self.dinner) if m is not None]
        return named + list(self.snacks)

    def calorie_sum(self) -> int:
        return sum(m.calories for m in self.meals())
