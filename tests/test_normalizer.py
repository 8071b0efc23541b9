# tests/test_normalizer.py
from __future__ import annotations

import json

import pytest

from core.models.meal import ExcludedMealSlot
from core.normalizer import (
    MealsArrayEntry,
    NamedSlotsEntry,
    classify_entry,
    normalize_entry,
    normalize_plan,
)
from services.errors import NormalizationError

DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def meal(name: str, kcal: int) -> dict:
    return {
        "name": name,
        "calories": kcal,
        "protein": "20g",
        "carbs": "30g",
        "fats": "10g",
        "ingredients": [f"100g {name.lower()}"],
        "instructions": "Serve.",
    }


OATS, SALAD, SALMON, APPLE = meal("Oats", 400), meal("Salad", 600), meal("Salmon", 800), meal("Apple", 80)


def named_day(day: str, **extra) -> dict:
    return {
        "day": day,
        "breakfast": OATS,
        "lunch": SALAD,
        "dinner": SALMON,
        "snacks": [APPLE],
        "totalCalories": 1880,
        "summary": "Balanced day",
        **extra,
    }


def week(**extra) -> str:
    return json.dumps({"plan": [named_day(d, **extra) for d in DAYS]})


# ── exclusion invariant ─────────────────────────────────────────────
@pytest.mark.parametrize("slot", list(ExcludedMealSlot))
def test_excluded_slot_is_empty_every_day(slot):
    plan = normalize_plan(week(), slot)

    assert len(plan) == 7
    for day in plan:
        if slot is ExcludedMealSlot.snacks:
            assert day.snacks == []
        else:
            assert getattr(day, slot.value) is None


def test_no_exclusion_keeps_everything():
    plan = normalize_plan(week(), None)
    monday = plan[0]
    assert monday.breakfast.name == "Oats"
    assert [s.name for s in monday.snacks] == ["Apple"]
    assert monday.total_calories == 1880


# ── total-calorie reconciliation ────────────────────────────────────
@pytest.mark.parametrize("raw_total", [None, 0, -150, "n/a"])
def test_missing_or_bad_total_is_recomputed(raw_total):
    entry = named_day("Monday", totalCalories=raw_total)
    assert normalize_entry(entry).total_calories == 400 + 600 + 800 + 80


def test_total_is_zero_without_meals():
    entry = {"day": "Monday", "breakfast": None, "lunch": None, "dinner": None, "snacks": []}
    assert normalize_entry(entry).total_calories == 0


def test_positive_total_is_kept_when_nothing_was_dropped():
    entry = named_day("Monday", totalCalories=2000)
    assert normalize_entry(entry).total_calories == 2000


def test_snacks_excluded_end_to_end():
    # the provider ignored the exclusion and counted the apple in its total
    plan = normalize_plan(week(), ExcludedMealSlot.snacks)

    assert all(day.snacks == [] for day in plan)
    assert all(day.total_calories == 1800 for day in plan)


# ── shape tolerance ─────────────────────────────────────────────────
def test_classify_entry_variants():
    assert isinstance(classify_entry(named_day("Monday")), NamedSlotsEntry)
    assert isinstance(classify_entry({"day": "Monday", "meals": [OATS]}), MealsArrayEntry)
    # empty meals list falls back to named slots
    assert isinstance(classify_entry({"day": "Monday", "meals": []}), NamedSlotsEntry)


def test_meals_array_maps_onto_named_slots():
    raw = json.dumps({"plan": [{"day": "Monday", "meals": [OATS, SALAD, SALMON], "snacks": []}]})
    monday = normalize_plan(raw)[0]

    assert monday.breakfast.name == "Oats"
    assert monday.lunch.name == "Salad"
    assert monday.dinner.name == "Salmon"
    assert monday.snacks == []


@pytest.mark.parametrize("slot", [None, *ExcludedMealSlot])
def test_meals_array_matches_named_slot_output(slot):
    named = {"day": "Monday", "breakfast": OATS, "lunch": SALAD, "dinner": SALMON, "snacks": [APPLE]}
    active = [m for s, m in (("breakfast", OATS), ("lunch", SALAD), ("dinner", SALMON))
              if slot is None or s != slot.value]
    flat = {"day": "Monday", "meals": active + [APPLE]}
    if slot is not None and slot is not ExcludedMealSlot.snacks:
        named[slot.value] = None

    assert normalize_entry(flat, slot).model_dump() == normalize_entry(named, slot).model_dump()


def test_meals_array_shifts_around_excluded_breakfast():
    monday = normalize_entry({"day": "Monday", "meals": [SALAD, SALMON, APPLE]}, ExcludedMealSlot.breakfast)

    assert monday.breakfast is None
    assert monday.lunch.name == "Salad"
    assert monday.dinner.name == "Salmon"
    assert [s.name for s in monday.snacks] == ["Apple"]


def test_meals_array_excluded_dinner_keeps_third_meal_as_snack():
    monday = normalize_entry({"day": "Monday", "meals": [OATS, SALAD, APPLE]}, ExcludedMealSlot.dinner)

    assert monday.dinner is None
    assert monday.lunch.name == "Salad"
    assert [s.name for s in monday.snacks] == ["Apple"]
    assert monday.total_calories == 400 + 600 + 80


def test_meals_array_with_snacks_excluded_drops_extras():
    monday = normalize_entry(
        {"day": "Monday", "meals": [OATS, SALAD, SALMON, APPLE], "snacks": [APPLE]},
        ExcludedMealSlot.snacks,
    )
    assert monday.snacks == []
    assert monday.total_calories == 1800


def test_bare_list_and_code_fence_are_accepted():
    body = json.dumps([named_day(d) for d in DAYS])
    assert len(normalize_plan(body)) == 7
    assert len(normalize_plan(f"```json\n{body}\n```")) == 7


def test_short_plan_is_not_padded():
    raw = json.dumps({"plan": [named_day(d) for d in DAYS[:5]]})
    plan = normalize_plan(raw)
    assert [d.day for d in plan] == DAYS[:5]


def test_loose_meal_fields_are_coerced():
    entry = named_day("Monday", breakfast={"name": "Eggs", "calories": "350 kcal", "protein": 25,
                                           "carbs": 2.5, "ingredients": "2 eggs"})
    breakfast = normalize_entry(entry).breakfast

    assert breakfast.calories == 350
    assert breakfast.protein == "25g"
    assert breakfast.carbs == "2.5g"
    assert breakfast.fats == "0g"
    assert breakfast.ingredients == ["2 eggs"]


@pytest.mark.parametrize("value, expected", [(2, ["2"]), (3.5, ["3.5"]), (True, []), ({"a": 1}, ["{'a': 1}"])])
def test_scalar_ingredients_do_not_crash(value, expected):
    raw = json.dumps({"plan": [{"day": "Monday", "breakfast": {"name": "Eggs", "calories": 300,
                                                               "ingredients": value}}]})
    assert normalize_plan(raw)[0].breakfast.ingredients == expected


def test_non_finite_macros_fall_back_to_zero():
    raw = '{"plan": [{"day": "Monday", "lunch": {"name": "Soup", "calories": 200, "protein": NaN, "fats": Infinity}}]}'
    lunch = normalize_plan(raw)[0].lunch

    assert lunch.protein == "0g"
    assert lunch.fats == "0g"


def test_single_snack_object_is_kept():
    entry = named_day("Monday", snacks=APPLE, totalCalories=None)
    monday = normalize_entry(entry)

    assert [s.name for s in monday.snacks] == ["Apple"]
    assert monday.total_calories == 1880


def test_single_snack_object_is_dropped_when_snacks_excluded():
    entry = named_day("Monday", snacks=APPLE)
    monday = normalize_entry(entry, ExcludedMealSlot.snacks)

    assert monday.snacks == []
    assert monday.total_calories == 1800


def test_defaults_for_day_and_summary():
    day = normalize_entry({"breakfast": OATS})
    assert day.day == "Day"
    assert day.summary == ""


# ── malformed input ─────────────────────────────────────────────────
@pytest.mark.parametrize("raw", ["not json", "", None, "{", "```json\n{oops}\n```"])
def test_unparseable_text_raises(raw):
    with pytest.raises(NormalizationError):
        normalize_plan(raw)


@pytest.mark.parametrize("raw", ['{"days": []}', "42", '"plan"', '{"plan": {"day": "Monday"}}'])
def test_unexpected_structure_raises(raw):
    with pytest.raises(NormalizationError, match="did not match expected schema"):
        normalize_plan(raw)


def test_non_object_day_entry_raises():
    with pytest.raises(NormalizationError, match="Invalid plan entry"):
        normalize_plan(json.dumps({"plan": ["Monday"]}))
