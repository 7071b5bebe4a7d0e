import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from app.services.errors import ConfigurationError

# Load environment variables (AI_GATEWAY_API_KEY, GOOGLE_API_KEY, ...)
load_dotenv()

GATEWAY_PROVIDER = "gateway"
GEMINI_PROVIDER = "gemini"

DEFAULT_GATEWAY_URL = "https://ai.gateway.lovable.dev/v1/chat/completions"
DEFAULT_GATEWAY_MODEL = "google/gemini-2.5-flash"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_REQUEST_TIMEOUT_S = 60.0

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


class Settings(BaseModel):
    provider: str = Field(GATEWAY_PROVIDER, description="Which model backend to call: 'gateway' or 'gemini'.")
    gateway_api_key: Optional[str] = Field(None, description="Bearer credential for the chat-completions gateway.")
    gateway_url: str = DEFAULT_GATEWAY_URL
    gateway_model: str = DEFAULT_GATEWAY_MODEL
    google_api_key: Optional[str] = Field(None, description="API key used when calling Gemini directly.")
    gemini_model: str = DEFAULT_GEMINI_MODEL
    request_timeout_s: float = Field(DEFAULT_REQUEST_TIMEOUT_S, gt=0)


def _env(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def get_settings() -> Settings:
    """Builds Settings from the process environment.

    Called per request so that the credential is read at call time rather
    than frozen at import.
    """
    timeout = _env("AI_REQUEST_TIMEOUT_S")
    try:
        request_timeout_s = float(timeout) if timeout else DEFAULT_REQUEST_TIMEOUT_S
    except ValueError:
        raise ConfigurationError(f"AI_REQUEST_TIMEOUT_S must be a number, got '{timeout}'")
    if request_timeout_s <= 0:
        raise ConfigurationError("AI_REQUEST_TIMEOUT_S must be greater than zero")

    return Settings(
        provider=(_env("AI_PROVIDER") or GATEWAY_PROVIDER).lower(),
        gateway_api_key=_env("AI_GATEWAY_API_KEY"),
        gateway_url=_env("AI_GATEWAY_URL") or DEFAULT_GATEWAY_URL,
        gateway_model=_env("AI_MODEL") or DEFAULT_GATEWAY_MODEL,
        google_api_key=_env("GOOGLE_API_KEY"),
        gemini_model=_env("GEMINI_MODEL") or DEFAULT_GEMINI_MODEL,
        request_timeout_s=request_timeout_s,
    )
