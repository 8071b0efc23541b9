"""Re-export individual schema modules for easy imports."""

from core.models.records import ExtractedRecords

from .ai import (
    AnalysisResult,
    DocumentAnalysisRequest,
    FoodAnalysisRequest,
    InsightRequest,
    MealPlanOut,
    MealPlanRequest,
    ProvidersOut,
)

__all__ = [
    "AnalysisResult",
    "DocumentAnalysisRequest",
    "ExtractedRecords",
    "FoodAnalysisRequest",
    "InsightRequest",
    "MealPlanOut",
    "MealPlanRequest",
    "ProvidersOut",
]
