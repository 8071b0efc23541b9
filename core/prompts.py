"""
core/prompts.py
────────────────────────────────────────────────────────────────────────
Prompt text and Gemini response schemas for the four AI tasks.

Schema dicts use the upper-case type names of Gemini's OpenAPI subset;
the OpenAI-compatible providers never see them and are told the JSON
shape through `plan_json_format()` instead.
"""

from __future__ import annotations

from core.models.client import MealGenerationParameters
from core.models.meal import ExcludedMealSlot

NUTRITIONIST = "You are an expert nutritionist."
COACH = "You are a professional nutrition coach."
RECORDS_ANALYST = (
    "You are a medical records analyst. Extract relevant information from the "
    "provided document and return it in a structured JSON format."
)

NONE_PROVIDED = "None provided."

# ───────────── meal plan ─────────────
PLAN_SYSTEM_INSTRUCTION = """You are an expert nutritionist creating a 7-day meal plan.
CRITICAL RULES:
1. Adhere strictly to all health constraints, allergies, and medication interactions.
2. Base meal suggestions on the client's goal and dietary history for preference.
3. Output must be a valid JSON object matching the requested schema exactly.
4. Instructions: MAX 10 words.
5. Ingredients: MAX 5 items, each MUST include specific quantity.
6. Snacks: Name & ingredients only (with quantities).
7. Be concise.

MANDATORY NUTRITIONAL DATA FOR EVERY MEAL:
- calories: a positive integer (e.g. 350, 450, 520)
- protein: a string with numeric value and "g" unit (e.g. "25g")
- carbs: a string with numeric value and "g" unit (e.g. "45g")
- fats: a string with numeric value and "g" unit (e.g. "12g")

INGREDIENTS FORMAT:
- Each ingredient MUST include the quantity and unit: g, ml, pcs, cups, tbsp, tsp
- Format: "quantity unit ingredient name" (e.g. "150g chicken breast", "2 eggs", "200ml milk")
- Quantities must agree with the nutritional values provided

Example meal:
{
  "name": "Grilled Chicken Salad",
  "calories": 420,
  "protein": "35g",
  "carbs": "25g",
  "fats": "18g",
  "ingredients": ["150g chicken breast", "100g mixed greens", "50g cherry tomatoes", "1 tbsp olive oil", "1 lemon wedge"],
  "instructions": "Grill chicken, toss with greens and dressing"
}"""


def exclusion_instruction(excluded: ExcludedMealSlot | None) -> str:
    if excluded is None:
        return ""
    if excluded is ExcludedMealSlot.snacks:
        how = 'Set "snacks" to an empty array [] for every day.'
    else:
        how = f'Set "{excluded.value}" to null or omit it entirely.'
    return f"IMPORTANT: Do NOT include {excluded.value} in any day of the meal plan. {how}"


def plan_user_prompt(p: MealGenerationParameters) -> str:
    lines = [
        "Client Profile:",
        f"- Age: {p.age} y/o {p.gender}",
        f"- Current Metrics: {p.weight:g}kg, {p.height:g}cm",
        f"- Primary Goal: {p.goal}",
        f"- Activity Level: {p.activity_level}",
        "",
        "Critical Health Information (MUST BE CONSIDERED):",
        f"- Medical History: {p.medical_history or NONE_PROVIDED}",
        f"- Current Medications: {p.medications or NONE_PROVIDED}",
        f"- Allergies / Exclusions: {p.allergies or NONE_PROVIDED}",
        "",
        "Client Preferences (from history & notes):",
        f"- Dietary History & Preferences: {p.dietary_history or NONE_PROVIDED}",
        f"- Other Stated Preferences: {p.preferences or NONE_PROVIDED}",
        "",
        "Social & Lifestyle Context:",
        f"- Social Background: {p.social_background or NONE_PROVIDED}",
        "(Includes: occupation, work schedule, living situation, family context, "
        "cultural background, lifestyle factors)",
        "",
        "Nutritionist's Custom Instructions:",
        f"- {p.custom_instructions or 'None.'}",
        "",
    ]
    if p.reference_data is not None:
        lines += ["An image has been attached as reference material.", ""]

    lines.append("Generate a 7-day (Mon-Sun) meal plan based on ALL the above information.")
    exclusion = exclusion_instruction(p.exclude_meal)
    if exclusion:
        lines += ["", exclusion]

    lines += [
        "",
        "For each meal (breakfast, lunch, dinner, and snacks) provide the exact calorie count "
        'as an integer, protein, carbohydrates and fats in grams (format: "XXg"), and '
        "ingredients with SPECIFIC QUANTITIES.",
        "Calculate these values from the ingredients and portion sizes. Do not leave any "
        "nutritional values empty or zero unless the meal truly has none.",
    ]
    return "\n".join(lines)


def plan_json_format(excluded: ExcludedMealSlot | None) -> str:
    """Output-shape addendum for providers without schema enforcement."""

    def slot(name: str) -> str:
        if excluded is not None and excluded.value == name:
            return "[]" if name == "snacks" else "null"
        return "[ /* array of Meal objects */ ]" if name == "snacks" else "{ /* Meal object */ }"

    text = f"""

JSON OUTPUT FORMAT (MANDATORY):
- Return a single JSON object with a top-level key "plan"
- "plan" must be an array of 7 items (one per day), where each item has this exact structure:
  {{
    "day": "Monday",
    "breakfast": {slot("breakfast")},
    "lunch": {slot("lunch")},
    "dinner": {slot("dinner")},
    "snacks": {slot("snacks")},
    "totalCalories": 0,
    "summary": "..."
  }}
- Do NOT use a "meals" array; you MUST use the separate keys "breakfast", "lunch", "dinner", and "snacks".
- Every ingredient MUST include a specific quantity (e.g. "150g chicken breast", "2 eggs")."""
    exclusion = exclusion_instruction(excluded)
    return text + ("\n" + exclusion if exclusion else "")


def _meal_schema() -> dict:
    return {
        "type": "OBJECT",
        "properties": {
            "name": {"type": "STRING"},
            "calories": {"type": "INTEGER"},
            "protein": {"type": "STRING"},
            "carbs": {"type": "STRING"},
            "fats": {"type": "STRING"},
            "ingredients": {"type": "ARRAY", "items": {"type": "STRING"}},
            "instructions": {"type": "STRING"},
        },
        "required": ["name", "calories", "protein", "carbs", "fats", "ingredients", "instructions"],
    }


def plan_response_schema(excluded: ExcludedMealSlot | None = None) -> dict:
    day_props = {
        "day": {"type": "STRING"},
        "breakfast": {**_meal_schema(), "nullable": True},
        "lunch": {**_meal_schema(), "nullable": True},
        "dinner": {**_meal_schema(), "nullable": True},
        "snacks": {"type": "ARRAY", "items": _meal_schema()},
        "totalCalories": {"type": "INTEGER"},
        "summary": {"type": "STRING"},
    }
    required = [k for k in day_props if excluded is None or k != excluded.value]
    return {
        "type": "OBJECT",
        "properties": {
            "plan": {
                "type": "ARRAY",
                "items": {"type": "OBJECT", "properties": day_props, "required": required},
            }
        },
        "required": ["plan"],
    }


# ───────────── food analysis ─────────────
_FOOD_QUESTIONS = """
1. {basis}estimate calories and macros (Protein/Carbs/Fats).
2. Is this good for their goal?
3. Give 1 constructive suggestion.
Keep it under 100 words."""


def food_prompt(goal: str, note: str | None, has_image: bool) -> str:
    if has_image and note:
        head = (
            f"Analyze this meal image and the client's note. The client's goal is: {goal}. "
            f'Client\'s note: "{note}".'
        )
        basis = "Based on BOTH the image and note, "
    elif has_image:
        head = f"Analyze this meal image. The client's goal is: {goal}."
        basis = ""
    else:
        head = (
            f"Analyze this client's food description. The client's goal is: {goal}. "
            f'Client\'s description: "{note}".'
        )
        basis = "Based on the description, "
    return head + _FOOD_QUESTIONS.format(basis=basis)


# ───────────── medical documents ─────────────
RECORDS_FIELDS = ("medicalHistory", "allergies", "medications", "dietaryHistory", "socialBackground")

RECORDS_SCHEMA = {
    "type": "OBJECT",
    "properties": {name: {"type": "STRING"} for name in RECORDS_FIELDS},
}


def records_prompt(is_image: bool) -> str:
    kind = "image" if is_image else "document"
    return f"""Analyze this {kind} and extract the following information if present:

1. Medical History: Any past or current medical conditions, diagnoses, surgeries, or health issues.
2. Allergies: Any food allergies, medication allergies, or other allergic reactions mentioned.
3. Medications: Current medications, dosages, and frequency.
4. Dietary History: Previous diets tried, food preferences, dietary restrictions, eating patterns.
5. Social Background: Occupation, work schedule, living situation, family context, cultural background, lifestyle factors that may affect nutrition.

Return ONLY a valid JSON object with these exact keys (use empty strings if information is not found):
{{
  "medicalHistory": "...",
  "allergies": "...",
  "medications": "...",
  "dietaryHistory": "...",
  "socialBackground": "..."
}}"""


def with_document(text: str, prompt: str) -> str:
    return f"Document content:\n{text}\n\n{prompt}"


# ───────────── insights ─────────────
def insight_prompt(client_name: str, weights: list[float], goal: str, trend: str) -> str:
    if weights:
        history = " -> ".join(f"{w:g}" for w in weights)
        opening = f"Client {client_name} has the following weight history (newest last): {history} kg."
    else:
        opening = f"Client {client_name} has not logged any weigh-ins yet."
    return (
        f"{opening}\n"
        f"{trend}\n"
        f"Goal: {goal}.\n"
        "Provide a 3-sentence professional insight on their progress and a motivational tip."
    )
