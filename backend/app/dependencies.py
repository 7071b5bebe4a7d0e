from fastapi import Depends

from app.config import Settings, get_settings
from app.services.model_client import ModelClient, create_model_client


# Dependency to get a model client per request; tests override it with fakes
def get_model_client(settings: Settings = Depends(get_settings)) -> ModelClient:
    return create_model_client(settings)
