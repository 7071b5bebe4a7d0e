import math
import re

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Union

MEAL_SECTIONS = ("breakfast", "lunch", "dinner", "snacks")

# A quantity the model sent without its unit, e.g. "20" or "12.5"
BARE_NUMBER_PATTERN = re.compile(r"\d+(\.\d+)?")

KNOWN_DIET_PATTERNS = ["balanced", "keto", "paleo", "mediterranean", "plant-based", "intermittent"]


class DietaryPreferences(BaseModel):
    """Dietary restriction flags. Field order is the order flags are listed in the prompt."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    vegetarian: bool = False
    vegan: bool = False
    gluten_free: bool = Field(False, alias="glutenFree")
    dairy_free: bool = Field(False, alias="dairyFree")
    low_carb: bool = Field(False, alias="lowCarb")
    high_protein: bool = Field(False, alias="highProtein")

    def active_flags(self) -> List[str]:
        """Wire names (e.g. 'glutenFree') of the flags that are switched on."""
        return [
            field.alias or name
            for name, field in type(self).model_fields.items()
            if getattr(self, name)
        ]


class DietRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    country: str = Field(..., description="Country code whose cuisine the plan should follow (e.g. 'india').")
    diet_pattern: str = Field(..., alias="dietPattern", description="Dietary pattern, e.g. 'keto' or 'plant-based'.")
    preferences: DietaryPreferences = Field(default_factory=DietaryPreferences)
    available_foods: str = Field("", alias="availableFoods", description="Free-text list of foods the user has at hand.")


class MealEntry(BaseModel):
    meal: str = Field(..., min_length=1, description="Name of the meal.")
    calories: Union[int, float] = Field(..., description="Energy of the meal in kcal.")
    protein: str = Field(..., min_length=1, description="Protein with unit (e.g. '20g').")
    carbs: str = Field(..., min_length=1, description="Carbohydrates with unit (e.g. '40g').")
    fats: str = Field(..., min_length=1, description="Fats with unit (e.g. '12g').")

    @field_validator("meal", mode="before")
    @classmethod
    def _strip_meal(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("calories", mode="before")
    @classmethod
    def _reject_bool_calories(cls, value):
        if isinstance(value, bool):
            raise ValueError("calories must be a number")
        return value

    @field_validator("calories")
    @classmethod
    def _finite_non_negative_calories(cls, value):
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError("calories must be a finite number")
        if value < 0:
            raise ValueError("calories cannot be negative")
        return value

    @field_validator("protein", "carbs", "fats", mode="before")
    @classmethod
    def _grams_with_unit(cls, value):
        # Models sometimes drop the unit and answer with a bare number
        if isinstance(value, bool):
            raise ValueError("expected a quantity with unit")
        if isinstance(value, int):
            return f"{value}g"
        if isinstance(value, float):
            if not math.isfinite(value):
                raise ValueError("expected a finite quantity")
            return f"{value:g}g"
        if isinstance(value, str):
            text = value.strip()
            return f"{text}g" if BARE_NUMBER_PATTERN.fullmatch(text) else text
        return value


class MealPlan(BaseModel):
    breakfast: List[MealEntry] = Field(..., description="Breakfast options, in the order the model listed them.")
    lunch: List[MealEntry] = Field(..., description="Lunch options.")
    dinner: List[MealEntry] = Field(..., description="Dinner options.")
    snacks: List[MealEntry] = Field(..., description="Snack options.")
