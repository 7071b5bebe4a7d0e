from fastapi import APIRouter, Body, Depends
from typing import Any, Optional

from app.dependencies import get_model_client
from app.models.common import ErrorResponse
from app.models.nutrition import NutritionResult
from app.services.model_client import ModelClient
from app.services.nutrition_service import NutritionAnalyzer

router = APIRouter(
    tags=["nutrition"],
)


@router.post(
    "/analyze-nutrition",
    response_model=NutritionResult,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def analyze_nutrition(
    payload: Optional[Any] = Body(None),
    client: ModelClient = Depends(get_model_client),
):
    """
    Estimates calories, protein, carbs and fats for a food photo sent as `{image, country}`.

    When the model's reply cannot be used the response is still a 200 with every value set
    to "Unable to estimate".
    """
    return NutritionAnalyzer(client).analyze(payload)
