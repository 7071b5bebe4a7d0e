from pydantic import BaseModel, Field
from typing import Optional

UNABLE_TO_ESTIMATE = "Unable to estimate"

# Codes offered by the nutrition and diet-plan pages. Other non-empty codes are passed through.
KNOWN_COUNTRIES = [
    "usa", "uk", "india", "china", "japan", "australia", "canada",
    "germany", "france", "mexico", "italy", "spain", "mediterranean", "other",
]


class AnalysisRequest(BaseModel):
    image: str = Field(..., description="The food photo encoded as a data URI (e.g. 'data:image/jpeg;base64,...').")
    country: str = Field(..., description="Country code of the user, used to judge typical portions (e.g. 'usa').")


class NutritionResult(BaseModel):
    calories: str = Field(..., description="Estimated energy with unit suffix (e.g. '350 kcal').")
    protein: str = Field(..., description="Estimated protein with unit suffix (e.g. '25g').")
    carbs: str = Field(..., description="Estimated carbohydrates with unit suffix (e.g. '40g').")
    fats: str = Field(..., description="Estimated fats with unit suffix (e.g. '12g').")
    benefits: str = Field(..., description="One short sentence on the health benefits of the food.")
    notes: Optional[str] = Field(None, description="Raw model text, only set on a fallback result when the model did not answer in JSON.")
