from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from core.models.meal import ExcludedMealSlot


class InlineData(BaseModel):
    data: str
    mime_type: str = Field(..., alias="mimeType")

    model_config = ConfigDict(populate_by_name=True)


class ReferenceData(BaseModel):
    """Attached reference image, in the `{inlineData: {...}}` shape the UI sends."""

    inline_data: InlineData = Field(..., alias="inlineData")

    model_config = ConfigDict(populate_by_name=True)


class MealGenerationParameters(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    age: int
    gender: str
    weight: float
    height: float
    goal: str
    activity_level: str
    allergies: str = ""
    preferences: str = ""
    medical_history: str | None = None
    medications: str | None = None
    dietary_history: str | None = None
    social_background: str | None = None
    custom_instructions: str | None = None
    reference_data: ReferenceData | None = None
    exclude_meal: ExcludedMealSlot | None = None

    @model_validator(mode="before")
    @classmethod
    def _legacy_exclude_lunch(cls, data: Any) -> Any:
        # older clients send `excludeLunch: true` instead of `excludeMeal`
        if isinstance(data, dict) and data.get("excludeMeal") is None and data.get("exclude_meal") is None:
            if data.get("excludeLunch"):
                data = {**data, "excludeMeal": "lunch"}
        return data
