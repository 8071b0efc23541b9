# api/schemas/ai.py
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from core.models.client import MealGenerationParameters
from core.models.meal import DailyPlan
from services.providers import ProviderName


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProvidersOut(BaseModel):
    providers: list[str]


# ───────── meal plan ────────────────────────────────────────────────
class MealPlanRequest(_CamelModel):
    provider: ProviderName
    params: MealGenerationParameters


class MealPlanOut(BaseModel):
    plan: list[DailyPlan]


# ───────── food analysis ────────────────────────────────────────────
class FoodAnalysisRequest(_CamelModel):
    provider: ProviderName
    base64_image: str | None = None
    mime_type: str | None = None
    client_note: str | None = None
    goal: str | None = Field(None, examples=["Weight Loss"])


class AnalysisResult(BaseModel):
    result: str


# ───────── medical documents ────────────────────────────────────────
class DocumentAnalysisRequest(_CamelModel):
    provider: ProviderName
    file_content: str
    mime_type: str
    is_image: bool = False


# ───────── insights ─────────────────────────────────────────────────
class InsightRequest(_CamelModel):
    provider: ProviderName
    client_name: str
    weight_history: list[float] = Field(default_factory=list)
    goal: str
