from fastapi import APIRouter, Body, Depends
from typing import Any, Optional

from app.dependencies import get_model_client
from app.models.common import ErrorResponse
from app.models.mealplan import MealPlan
from app.services.diet_plan_service import DietPlanGenerator
from app.services.model_client import ModelClient

router = APIRouter(
    tags=["mealplan"],
)


@router.post(
    "/generate-diet-plan",
    response_model=MealPlan,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def generate_diet_plan(
    payload: Optional[Any] = Body(None),
    client: ModelClient = Depends(get_model_client),
):
    """
    Generates a breakfast/lunch/dinner/snacks plan for a country's cuisine and a diet pattern.

    Expects `{country, dietPattern, preferences, availableFoods}`. A reply from the model
    that cannot be read as a complete plan is reported as a 500 rather than a partial plan.
    """
    # Declared with `def` so FastAPI runs the blocking model call in its threadpool
    return DietPlanGenerator(client).generate(payload)
