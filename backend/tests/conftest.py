"""Shared fixtures: clean AI environment, fake model clients and an app TestClient."""

from typing import Any, Callable, Dict, Generator, List, Optional

import pytest
from fastapi.testclient import TestClient

from app.dependencies import get_model_client
from app.main import app

AI_ENV_VARS = (
    "AI_PROVIDER",
    "AI_GATEWAY_API_KEY",
    "AI_GATEWAY_URL",
    "AI_MODEL",
    "GOOGLE_API_KEY",
    "GEMINI_MODEL",
    "AI_REQUEST_TIMEOUT_S",
)


class FakeModelClient:
    """Stands in for the outbound model call and records every prompt it receives."""

    def __init__(self, reply: Optional[str] = None, error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.calls: List[List[Dict[str, Any]]] = []

    def complete(self, messages: List[Dict[str, Any]]) -> Optional[str]:
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture(autouse=True)
def _clear_ai_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keeps values from a local .env from leaking into tests."""
    for name in AI_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def use_model(client: TestClient) -> Callable[..., FakeModelClient]:
    """Installs a FakeModelClient for the duration of a test and returns it."""

    def _install(reply: Optional[str] = None, error: Optional[Exception] = None) -> FakeModelClient:
        fake = FakeModelClient(reply=reply, error=error)
        app.dependency_overrides[get_model_client] = lambda: fake
        return fake

    return _install
