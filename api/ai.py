# api/ai.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status

from api.deps import current_user, get_registry
from api.schemas import (
    AnalysisResult,
    DocumentAnalysisRequest,
    ExtractedRecords,
    FoodAnalysisRequest,
    InsightRequest,
    MealPlanOut,
    MealPlanRequest,
    ProvidersOut,
)
from core import prompts
from core.insights import weight_trend
from core.normalizer import normalize_plan, parse_json_text
from services import documents
from services.errors import ImageNotSupportedError, InputValidationError, NormalizationError
from services.providers import ImagePayload, ProviderRegistry

_LOG = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(current_user)])

DEFAULT_GOAL = "General Health"


# ───────────────────────── providers ────────────────────────
@router.get(
    "/providers",
    response_model=ProvidersOut,
    summary="List AI providers whose credentials are configured",
)
async def list_providers(
    registry: ProviderRegistry = Depends(get_registry),
) -> ProvidersOut:
    return ProvidersOut(providers=registry.available())


# ───────────────────────── meal plan ────────────────────────
@router.post(
    "/generate-meal-plan",
    response_model=MealPlanOut,
    status_code=status.HTTP_200_OK,
    summary="Generate a normalised 7-day meal plan",
)
async def generate_meal_plan(
    body: MealPlanRequest,
    registry: ProviderRegistry = Depends(get_registry),
    user_id: str = Depends(current_user),
) -> MealPlanOut:
    caller = registry.get(body.provider)
    params = body.params
    excluded = params.exclude_meal

    image = None
    if params.reference_data is not None:
        ref = params.reference_data.inline_data
        image = ImagePayload(ref.data, ref.mime_type)

    if caller.supports_schema:
        system = prompts.PLAN_SYSTEM_INSTRUCTION
        schema = prompts.plan_response_schema(excluded)
    else:
        system = prompts.PLAN_SYSTEM_INSTRUCTION + prompts.plan_json_format(excluded)
        schema = None

    _LOG.info("meal plan requested by %s via %s (exclude=%s)", user_id, caller.name, excluded)
    raw = await caller.call(
        system,
        prompts.plan_user_prompt(params),
        image=image,
        json_mode=True,
        response_schema=schema,
        temperature=0.7,
    )
    try:
        plan = normalize_plan(raw, excluded)
    except NormalizationError:
        _LOG.error("could not normalise %s meal plan response", caller.name)
        raise
    return MealPlanOut(plan=plan)


# ───────────────────────── food analysis ────────────────────
@router.post(
    "/analyze-food-image",
    response_model=AnalysisResult,
    summary="Estimate calories/macros for a meal photo or description",
)
async def analyze_food_image(
    body: FoodAnalysisRequest,
    registry: ProviderRegistry = Depends(get_registry),
) -> AnalysisResult:
    if body.base64_image and not body.mime_type:
        raise InputValidationError("mimeType is required when base64Image is provided")
    if not body.base64_image and not body.client_note:
        raise InputValidationError("Please provide an image or a description of your meal.")

    caller = registry.get(body.provider)
    image = None
    if body.base64_image:
        image = ImagePayload(body.base64_image, body.mime_type or "")
        if not image.is_image:
            raise InputValidationError(f"Expected an image upload, got {image.mime_type}.")

    goal = body.goal or DEFAULT_GOAL
    text = await caller.call(
        prompts.NUTRITIONIST,
        prompts.food_prompt(goal, body.client_note, has_image=image is not None),
        image=image,
        temperature=0.7,
    )
    return AnalysisResult(result=text or "Could not analyze meal.")


# ───────────────────────── medical documents ────────────────
@router.post(
    "/analyze-medical-document",
    response_model=ExtractedRecords,
    summary="Extract history/allergies/medications from an uploaded document",
)
async def analyze_medical_document(
    body: DocumentAnalysisRequest,
    registry: ProviderRegistry = Depends(get_registry),
) -> ExtractedRecords:
    caller = registry.get(body.provider)
    if body.is_image and not caller.supports_images:
        raise ImageNotSupportedError(
            f"{caller.label} does not support image analysis. Please use Gemini or OpenAI "
            "for image analysis, or provide a text document instead."
        )

    kind = documents.classify(body.mime_type)
    prompt = prompts.records_prompt(body.is_image)
    attachment = None

    if body.is_image and kind is documents.DocumentKind.image:
        attachment = ImagePayload(body.file_content, body.mime_type)
        user_content = prompt
    elif kind is documents.DocumentKind.pdf and caller.supports_inline_documents:
        attachment = ImagePayload(body.file_content, documents.PDF_MIME)
        user_content = prompt
    else:
        text = documents.document_text(body.file_content, body.mime_type)
        user_content = prompts.with_document(text, prompt)

    raw = await caller.call(
        prompts.RECORDS_ANALYST,
        user_content,
        image=attachment,
        json_mode=True,
        response_schema=prompts.RECORDS_SCHEMA,
        temperature=0.7,
    )
    parsed = parse_json_text(raw) if raw.strip() else {}
    if not isinstance(parsed, dict):
        raise NormalizationError("Document analysis did not return a JSON object.")
    return ExtractedRecords.model_validate(parsed)


# ───────────────────────── insights ─────────────────────────
@router.post(
    "/generate-insights",
    response_model=AnalysisResult,
    summary="Short progress insight from a client's weight history",
)
async def generate_insights(
    body: InsightRequest,
    registry: ProviderRegistry = Depends(get_registry),
) -> AnalysisResult:
    caller = registry.get(body.provider)
    trend = weight_trend(body.weight_history)
    text = await caller.call(
        prompts.COACH,
        prompts.insight_prompt(body.client_name, body.weight_history, body.goal, trend.describe()),
        temperature=0.7,
    )
    return AnalysisResult(result=text or "No insights available.")
