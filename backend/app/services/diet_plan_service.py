import logging
from typing import Any, Optional

from app.models.mealplan import MealPlan
from app.services import prompts, sanitizer, validation
from app.services.errors import FormatError
from app.services.model_client import ModelClient

logger = logging.getLogger(__name__)


class DietPlanGenerator:
    """Builds a breakfast/lunch/dinner/snacks plan for a cuisine and diet pattern.

    Unlike the nutrition analyzer there is no degraded answer: a plan with a
    missing section reads as "nothing to eat", so an unusable reply is a
    FormatError.
    """

    def __init__(self, client: ModelClient):
        self._client = client

    def generate(self, payload: Optional[Any]) -> MealPlan:
        request = validation.validate_diet_request(payload)
        logger.info(
            f"Generating meal plan for country={request.country}, pattern={request.diet_pattern}, "
            f"restrictions={prompts.format_preferences(request)}"
        )

        messages = prompts.build_diet_plan_messages(request)
        content = self._client.complete(messages)

        result = sanitizer.sanitize_meal_plan(content)
        if not result.ok:
            logger.error(f"Failed to parse meal plan: {result.reason}")
            raise FormatError("Invalid meal plan format", raw=content)

        logger.info("Meal plan generated successfully")
        return result.data
