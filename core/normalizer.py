"""
core/normalizer.py
────────────────────────────────────────────────────────────────────────
Turns a provider's raw completion text into the canonical weekly plan.

Two steps, kept apart on purpose:

1.  `classify_entry()` – decide which shape a day entry uses
       • NamedSlotsEntry  → explicit breakfast / lunch / dinner keys
       • MealsArrayEntry  → a flat `meals: [...]` list
2.  `_from_named_slots()` / `_from_meals_array()` – map each variant onto
    the four slots, then `_finalize()` enforces the excluded slot and
    reconciles `totalCalories`.

Nothing here is retried: malformed text is a `NormalizationError`.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Union

from pydantic import ValidationError

from core.models.meal import DailyPlan, ExcludedMealSlot, Meal, to_calories
from services.errors import NormalizationError

_LOG = logging.getLogger(__name__)

DAYS_PER_WEEK = 7
MAIN_SLOTS = ("breakfast", "lunch", "dinner")

SCHEMA_MISMATCH = (
    "Response structure did not match expected schema. Expected { plan: DailyPlan[] }."
)

_FENCE = re.compile(r"^\s*```(?:json)?\s*([\s\S]*?)\s*```\s*$")


# ──────────────────────────────────────────────────────────────────────
#  Tagged variants
# ──────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class NamedSlotsEntry:
    raw: dict[str, Any]


@dataclass(frozen=True)
class MealsArrayEntry:
    raw: dict[str, Any]
    meals: list[Any] = field(default_factory=list)


DayEntry = Union[NamedSlotsEntry, MealsArrayEntry]


@dataclass
class _Slots:
    breakfast: Meal | None
    lunch: Meal | None
    dinner: Meal | None
    snacks: list[Meal]


def classify_entry(entry: Any) -> DayEntry:
    if not isinstance(entry, dict):
        raise NormalizationError("Invalid plan entry format from model.")

    meals = entry.get("meals")
    has_named = any(entry.get(slot) for slot in MAIN_SLOTS)
    if not has_named and isinstance(meals, list) and meals:
        return MealsArrayEntry(raw=entry, meals=meals)
    return NamedSlotsEntry(raw=entry)


# ──────────────────────────────────────────────────────────────────────
#  Public entrypoint
# ──────────────────────────────────────────────────────────────────────
def parse_json_text(raw_text: str | None) -> Any:
    """`json.loads` that tolerates a surrounding ```json fence."""
    text = (raw_text or "").strip()
    fenced = _FENCE.match(text)
    if fenced:
        text = fenced.group(1)
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError) as exc:
        _LOG.warning("provider returned non-JSON text (%d chars)", len(text))
        raise NormalizationError(f"Failed to parse AI response as JSON: {exc}") from exc


def normalize_plan(
    raw_text: str | None,
    excluded: ExcludedMealSlot | None = None,
) -> list[DailyPlan]:
    parsed = parse_json_text(raw_text)

    if isinstance(parsed, dict) and isinstance(parsed.get("plan"), list):
        entries = parsed["plan"]
    elif isinstance(parsed, list):
        entries = parsed
    else:
        raise NormalizationError(SCHEMA_MISMATCH)

    plan = [normalize_entry(entry, excluded) for entry in entries]
    if len(plan) != DAYS_PER_WEEK:
        _LOG.warning("plan has %d day(s), expected %d", len(plan), DAYS_PER_WEEK)
    return plan


def normalize_entry(entry: Any, excluded: ExcludedMealSlot | None = None) -> DailyPlan:
    variant = classify_entry(entry)
    if isinstance(variant, MealsArrayEntry):
        slots = _from_meals_array(variant, excluded)
    else:
        slots = _from_named_slots(variant)
    return _finalize(variant.raw, slots, excluded)


# ──────────────────────────────────────────────────────────────────────
#  Variant transforms
# ──────────────────────────────────────────────────────────────────────
def _from_named_slots(entry: NamedSlotsEntry) -> _Slots:
    raw = entry.raw
    return _Slots(
        breakfast=_meal(raw.get("breakfast")),
        lunch=_meal(raw.get("lunch")),
        dinner=_meal(raw.get("dinner")),
        snacks=_meal_list(raw.get("snacks")),
    )


def _from_meals_array(entry: MealsArrayEntry, excluded: ExcludedMealSlot | None) -> _Slots:
    # fill the non-excluded main slots in order; leftovers become snacks
    active = [s for s in MAIN_SLOTS if excluded is None or s != excluded.value]
    assigned: dict[str, Meal | None] = dict.fromkeys(MAIN_SLOTS)
    for slot, item in zip(active, entry.meals):
        assigned[slot] = _meal(item)

    snacks = _meal_list(entry.raw.get("snacks"))
    if excluded is not ExcludedMealSlot.snacks:
        snacks += _meal_list(entry.meals[len(active):])

    return _Slots(snacks=snacks, **assigned)


def _finalize(raw: dict[str, Any], slots: _Slots, excluded: ExcludedMealSlot | None) -> DailyPlan:
    dropped = False
    if excluded is ExcludedMealSlot.snacks:
        dropped = bool(slots.snacks)
        slots.snacks = []
    elif excluded is not None:
        dropped = getattr(slots, excluded.value) is not None
        setattr(slots, excluded.value, None)

    day = DailyPlan(
        day=str(raw.get("day") or "Day"),
        breakfast=slots.breakfast,
        lunch=slots.lunch,
        dinner=slots.dinner,
        snacks=slots.snacks,
        summary=str(raw.get("summary") or ""),
    )

    total = to_calories(raw.get("totalCalories"))
    if total <= 0 or dropped:
        total = day.calorie_sum()
    return day.model_copy(update={"total_calories": total})


# ──────────────────────────────────────────────────────────────────────
#  Meal coercion
# ──────────────────────────────────────────────────────────────────────
def _meal(item: Any) -> Meal | None:
    if not isinstance(item, dict):
        return None
    try:
        return Meal.model_validate(item)
    except ValidationError as exc:
        raise NormalizationError(f"Invalid meal in AI response: {exc.errors()[0]['msg']}") from exc


def _meal_list(items: Any) -> list[Meal]:
    if isinstance(items, dict):
        items = [items]
    if not isinstance(items, list):
        return []
    return [m for m in (_meal(i) for i in items) if m is not None]
