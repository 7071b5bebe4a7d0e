import json

from app.models.mealplan import DietaryPreferences, DietRequest
from app.models.nutrition import AnalysisRequest
from app.services import prompts


def _diet_request(**overrides) -> DietRequest:
    fields = {"country": "usa", "dietPattern": "keto"}
    fields.update(overrides)
    return DietRequest.model_validate(fields)


def test_examples_are_valid_json() -> None:
    nutrition = json.loads(prompts.NUTRITION_EXAMPLE_JSON)
    assert set(nutrition) == {"calories", "protein", "carbs", "fats", "benefits"}

    plan = json.loads(prompts.DIET_PLAN_EXAMPLE_JSON)
    assert list(plan) == ["breakfast", "lunch", "dinner", "snacks"]
    assert all(len(entries) == 2 for entries in plan.values())


def test_nutrition_messages_carry_image_and_example() -> None:
    request = AnalysisRequest(image="data:image/jpeg;base64,/9j/AAAA", country="italy")
    messages = prompts.build_nutrition_messages(request)

    assert [m["role"] for m in messages] == ["system", "user"]
    system = messages[0]["content"]
    for field in ("calories", "protein", "carbs", "fats", "benefits", "kcal"):
        assert field in system

    text_part, image_part = messages[1]["content"]
    assert text_part["type"] == "text"
    assert prompts.NUTRITION_EXAMPLE_JSON in text_part["text"]
    assert "italy" in text_part["text"]
    assert image_part == {"type": "image_url", "image_url": {"url": "data:image/jpeg;base64,/9j/AAAA"}}


def test_nutrition_messages_are_deterministic() -> None:
    request = AnalysisRequest(image="data:image/png;base64,AAAA", country="usa")
    assert prompts.build_nutrition_messages(request) == prompts.build_nutrition_messages(request)


def test_preferences_joined_in_fixed_order() -> None:
    request = _diet_request(preferences={"highProtein": True, "vegetarian": True, "dairyFree": True})
    assert prompts.format_preferences(request) == "vegetarian, dairyFree, highProtein"


def test_no_preferences_renders_none() -> None:
    assert prompts.format_preferences(_diet_request()) == "none"
    assert prompts.format_preferences(_diet_request(preferences=DietaryPreferences())) == "none"


def test_diet_plan_messages() -> None:
    request = _diet_request(preferences={"vegan": True}, availableFoods="eggs, spinach")
    system, user = prompts.build_diet_plan_messages(request)

    assert system["role"] == "system"
    for field in ("breakfast", "lunch", "dinner", "snacks", "meal", "calories"):
        assert field in system["content"]

    assert user["role"] == "user"
    assert "usa cuisine following keto diet" in user["content"]
    assert "Dietary restrictions: vegan." in user["content"]
    assert "Available foods: eggs, spinach." in user["content"]
    assert prompts.DIET_PLAN_EXAMPLE_JSON in user["content"]


def test_blank_available_foods_uses_common_ingredients() -> None:
    _, user = prompts.build_diet_plan_messages(_diet_request(availableFoods="   "))
    assert "Available foods: common ingredients." in user["content"]
