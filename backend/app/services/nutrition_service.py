import logging
from typing import Any, Optional

from app.models.nutrition import NutritionResult
from app.services import prompts, sanitizer, validation
from app.services.model_client import ModelClient

logger = logging.getLogger(__name__)


class NutritionAnalyzer:
    """Estimates calories and macros for a food photo.

    A reply the model gets wrong is absorbed into the fallback estimate, so
    callers only see errors for bad input, missing configuration or a
    failing model endpoint.
    """

    def __init__(self, client: ModelClient):
        self._client = client

    def analyze(self, payload: Optional[Any]) -> NutritionResult:
        request = validation.validate_analysis_request(payload)
        logger.info(f"Analyzing food image for country: {request.country}")

        messages = prompts.build_nutrition_messages(request)
        content = self._client.complete(messages)

        result = sanitizer.sanitize_nutrition(content)
        if result.ok:
            logger.info("Analysis completed successfully")
        return result.data
