from pydantic import BaseModel, Field
from typing import List


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Human readable reason the request failed.")


class RequestOptions(BaseModel):
    countries: List[str] = Field(..., description="Country codes offered to users.")
    diet_patterns: List[str] = Field(..., description="Dietary patterns offered to users.")
    preferences: List[str] = Field(..., description="Dietary restriction flags accepted in 'preferences'.")
