import logging
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from app.models.mealplan import DietRequest
from app.models.nutrition import AnalysisRequest
from app.services.errors import ValidationError

logger = logging.getLogger(__name__)

ANALYSIS_REQUIRED_FIELDS = ("image", "country")
DIET_REQUIRED_FIELDS = ("country", "dietPattern")


def missing_fields(payload: Dict[str, Any], required: Iterable[str]) -> List[str]:
    """Returns the required field names that are absent, null or blank."""
    missing = []
    for name in required:
        value = payload.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(name)
    return missing


def _as_object(payload: Optional[Any]) -> Dict[str, Any]:
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError(["body"], "Request body must be a JSON object")
    return payload


def _invalid_field_names(exc: PydanticValidationError) -> List[str]:
    names = []
    for err in exc.errors():
        name = str(err["loc"][0]) if err.get("loc") else "body"
        if name not in names:
            names.append(name)
    return names


def _check_required(payload: Dict[str, Any], required: Iterable[str], kind: str) -> None:
    missing = missing_fields(payload, required)
    if missing:
        logger.warning(f"Rejected {kind} request, missing fields: {missing}")
        raise ValidationError(missing)


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def validate_analysis_request(payload: Optional[Any]) -> AnalysisRequest:
    """Checks an analyze-nutrition body and returns it as an AnalysisRequest."""
    data = _as_object(payload)
    _check_required(data, ANALYSIS_REQUIRED_FIELDS, "nutrition analysis")
    try:
        return AnalysisRequest(image=_strip(data["image"]), country=_strip(data["country"]))
    except PydanticValidationError as e:
        fields = _invalid_field_names(e)
        raise ValidationError(fields, f"Invalid value for fields: {', '.join(fields)}")


def validate_diet_request(payload: Optional[Any]) -> DietRequest:
    """Checks a generate-diet-plan body and returns it as a DietRequest.

    'preferences' and 'availableFoods' are optional and fall back to no
    restrictions and an empty string.
    """
    data = _as_object(payload)
    _check_required(data, DIET_REQUIRED_FIELDS, "diet plan")

    fields = {
        "country": _strip(data["country"]),
        "dietPattern": _strip(data["dietPattern"]),
        "availableFoods": _strip(data.get("availableFoods")) or "",
    }
    if data.get("preferences") is not None:
        fields["preferences"] = data["preferences"]

    try:
        return DietRequest.model_validate(fields)
    except PydanticValidationError as e:
        invalid = _invalid_field_names(e)
        raise ValidationError(invalid, f"Invalid value for fields: {', '.join(invalid)}")
