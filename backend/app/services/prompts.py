"""Prompt construction for the nutrition analyzer and the diet-plan generator.

Every builder is a pure function of the validated request: same input, same
messages. The user message always carries a worked JSON example because
models follow a concrete shape far more reliably than a field list alone.
"""
from typing import Any, Dict, List

from app.models.mealplan import DietRequest
from app.models.nutrition import AnalysisRequest

DEFAULT_AVAILABLE_FOODS = "common ingredients"
NO_RESTRICTIONS = "none"

NUTRITION_SYSTEM_PROMPT = (
    "You are a nutrition expert. Analyze food images and return ONLY a JSON object with exactly "
    "these fields: calories (string with unit 'kcal'), protein (string with unit 'g'), "
    "carbs (string with unit 'g'), fats (string with unit 'g'), benefits (concise string). "
    "Do not add any other fields, text or markdown. Keep it short and precise."
)

NUTRITION_EXAMPLE_JSON = (
    '{"calories":"350 kcal","protein":"25g","carbs":"40g","fats":"12g",'
    '"benefits":"Rich in protein and fiber, supports muscle growth"}'
)

DIET_PLAN_SYSTEM_PROMPT = (
    "You are a nutrition expert. Generate diverse meal plans with country-specific foods. "
    "Return ONLY a JSON object with exactly these fields: breakfast, lunch, dinner and snacks, each an array. "
    "Each meal must have: meal (name), calories (number), protein (string with unit 'g'), "
    "carbs (string with unit 'g'), fats (string with unit 'g'). "
    "Every array must contain at least two different meals and never repeat a meal. "
    "Make meals VARIED and culturally appropriate."
)

DIET_PLAN_EXAMPLE_JSON = """{
  "breakfast": [{"meal": "name", "calories": 350, "protein": "20g", "carbs": "40g", "fats": "12g"}, {"meal": "different meal", "calories": 300, "protein": "15g", "carbs": "35g", "fats": "10g"}],
  "lunch": [{"meal": "name", "calories": 450, "protein": "30g", "carbs": "50g", "fats": "15g"}, {"meal": "different meal", "calories": 420, "protein": "28g", "carbs": "45g", "fats": "14g"}],
  "dinner": [{"meal": "name", "calories": 500, "protein": "35g", "carbs": "55g", "fats": "18g"}, {"meal": "different meal", "calories": 480, "protein": "32g", "carbs": "52g", "fats": "16g"}],
  "snacks": [{"meal": "name", "calories": 150, "protein": "8g", "carbs": "20g", "fats": "6g"}, {"meal": "different snack", "calories": 180, "protein": "10g", "carbs": "15g", "fats": "8g"}]
}"""


def format_preferences(request: DietRequest) -> str:
    """Comma-joined active restriction flags, or 'none'."""
    return ", ".join(request.preferences.active_flags()) or NO_RESTRICTIONS


def build_nutrition_messages(request: AnalysisRequest) -> List[Dict[str, Any]]:
    text = (
        f"Analyze this food, judging portions as typically served in {request.country}, "
        f"and return ONLY a JSON object with: calories, protein, carbs, fats, benefits. "
        f"Be concise. Example: {NUTRITION_EXAMPLE_JSON}"
    )
    return [
        {"role": "system", "content": NUTRITION_SYSTEM_PROMPT},
        {
            "role": "user",
            "content": [
                {"type": "text", "text": text},
                {"type": "image_url", "image_url": {"url": request.image}},
            ],
        },
    ]


def build_diet_plan_messages(request: DietRequest) -> List[Dict[str, Any]]:
    available_foods = request.available_foods.strip() or DEFAULT_AVAILABLE_FOODS
    text = (
        f"Create a varied meal plan for {request.country} cuisine following {request.diet_pattern} diet. "
        f"Dietary restrictions: {format_preferences(request)}. "
        f"Available foods: {available_foods}.\n\n"
        f"Return ONLY this JSON structure:\n{DIET_PLAN_EXAMPLE_JSON}"
    )
    return [
        {"role": "system", "content": DIET_PLAN_SYSTEM_PROMPT},
        {"role": "user", "content": text},
    ]
