"""Turns raw model text into validated results.

The model's reply is untrusted: it may be empty, wrapped in markdown, not
JSON at all, or JSON of the wrong shape. Each sanitizer makes one decode
attempt and reports the outcome as a tagged SanitizedResult instead of
raising:

* ``ok``: ``data`` holds the validated model.
* ``fallback``: ``data`` holds the schema-complete placeholder (nutrition only).
* ``invalid``: ``data`` is None; the caller decides how to fail (meal plans).
"""
import json
import logging
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ValidationError as PydanticValidationError

from app.models.mealplan import BARE_NUMBER_PATTERN, MEAL_SECTIONS, MealEntry, MealPlan
from app.models.nutrition import UNABLE_TO_ESTIMATE, NutritionResult

logger = logging.getLogger(__name__)

FALLBACK_BENEFITS = "Unable to analyze this image, please try uploading a clearer image."
DEFAULT_BENEFITS = "No additional health information available."

NON_FINITE_TEXT = {"nan", "inf", "-inf", "infinity", "-infinity"}

NUTRIENT_UNITS = {"calories": "kcal", "protein": "g", "carbs": "g", "fats": "g"}

FENCE_OPEN_PATTERN = re.compile(r"^```[\w+-]*[ \t]*\n?")
FENCE_CLOSE_PATTERN = re.compile(r"\n?[ \t]*```\s*$")


class Outcome(str, Enum):
    OK = "ok"
    FALLBACK = "fallback"
    INVALID = "invalid"


@dataclass(frozen=True)
class SanitizedResult:
    outcome: Outcome
    data: Optional[BaseModel] = None
    reason: Optional[str] = None
    raw: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.OK


def strip_code_fences(text: str) -> str:
    """Removes a surrounding markdown code fence (with optional language tag)."""
    cleaned = text.strip()
    if not cleaned.startswith("```"):
        return cleaned
    cleaned = FENCE_OPEN_PATTERN.sub("", cleaned, count=1)
    cleaned = FENCE_CLOSE_PATTERN.sub("", cleaned, count=1)
    return cleaned.strip()


def decode_json_object(content: Optional[str]) -> Optional[Dict[str, Any]]:
    """Single decode attempt: returns the JSON object or None."""
    if content is None or not content.strip():
        return None
    try:
        data = json.loads(strip_code_fences(content))
    except (ValueError, RecursionError):
        # RecursionError: pathologically nested arrays or objects
        return None
    return data if isinstance(data, dict) else None


# --- Nutrition ---

def nutrition_fallback(raw: Optional[str] = None) -> NutritionResult:
    """The fixed placeholder returned when the model's answer cannot be trusted."""
    notes = None
    if raw and raw.strip() and decode_json_object(raw) is None:
        notes = raw.strip()
    return NutritionResult(
        calories=UNABLE_TO_ESTIMATE,
        protein=UNABLE_TO_ESTIMATE,
        carbs=UNABLE_TO_ESTIMATE,
        fats=UNABLE_TO_ESTIMATE,
        benefits=FALLBACK_BENEFITS,
        notes=notes,
    )


def _with_unit(value: Any, unit: str) -> Optional[str]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        text = str(value)
    elif isinstance(value, float):
        if not math.isfinite(value):
            return None
        text = f"{value:g}"
    elif isinstance(value, str):
        text = value.strip()
    else:
        return None
    if not text or text.lower() == UNABLE_TO_ESTIMATE.lower() or text.lower() in NON_FINITE_TEXT:
        return None
    if BARE_NUMBER_PATTERN.fullmatch(text):
        return f"{text} kcal" if unit == "kcal" else f"{text}{unit}"
    return text


def _fallback(reason: str, content: Optional[str]) -> SanitizedResult:
    logger.warning(f"Nutrition response unusable ({reason}), returning fallback estimate.")
    return SanitizedResult(Outcome.FALLBACK, nutrition_fallback(content), reason, content)


def sanitize_nutrition(content: Optional[str]) -> SanitizedResult:
    """Validates a nutrition reply; never fails, degrades to the fallback instead."""
    if content is None or not content.strip():
        return _fallback("empty response", content)

    data = decode_json_object(content)
    if data is None:
        return _fallback("not a JSON object", content)

    fields = {}
    invalid = []
    for name, unit in NUTRIENT_UNITS.items():
        value = _with_unit(data.get(name), unit)
        if value is None:
            invalid.append(name)
        else:
            fields[name] = value
    if invalid:
        return _fallback(f"missing or empty fields: {', '.join(invalid)}", content)

    benefits = data.get("benefits")
    fields["benefits"] = benefits.strip() if isinstance(benefits, str) and benefits.strip() else DEFAULT_BENEFITS
    return SanitizedResult(Outcome.OK, NutritionResult(**fields), raw=content)


# --- Meal plan ---

def _distinct_meals(entries: List[MealEntry]) -> List[MealEntry]:
    seen = set()
    distinct = []
    for entry in entries:
        key = entry.meal.casefold()
        if key in seen:
            continue
        seen.add(key)
        distinct.append(entry)
    return distinct


def _invalid(reason: str, content: Optional[str]) -> SanitizedResult:
    logger.debug(f"Meal plan response rejected: {reason}")
    return SanitizedResult(Outcome.INVALID, None, reason, content)


def sanitize_meal_plan(content: Optional[str]) -> SanitizedResult:
    """Validates a meal-plan reply. Anything short of a complete plan is ``invalid``."""
    if content is None or not content.strip():
        return _invalid("empty response", content)

    data = decode_json_object(content)
    if data is None:
        return _invalid("not a JSON object", content)

    missing = [section for section in MEAL_SECTIONS if section not in data]
    if missing:
        return _invalid(f"missing sections: {', '.join(missing)}", content)

    try:
        plan = MealPlan.model_validate({section: data[section] for section in MEAL_SECTIONS})
    except PydanticValidationError as e:
        return _invalid(f"sections do not match the meal entry shape ({e.error_count()} errors)", content)

    sections = {}
    for section in MEAL_SECTIONS:
        entries = _distinct_meals(getattr(plan, section))
        if len(entries) < 2:
            return _invalid(f"section '{section}' has fewer than two distinct meals", content)
        sections[section] = entries

    return SanitizedResult(Outcome.OK, MealPlan(**sections), raw=content)
