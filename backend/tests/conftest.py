import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_llm_client
from config.settings import Settings
from main import create_app


class FakeLLM:
    """Stands in for LLMManager; records calls and returns a canned reply."""

    def __init__(self, reply="", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def complete(self, model, messages, json_mode=False):
        self.calls.append({"model": model, "messages": messages, "json_mode": json_mode})
        if self.error is not None:
            raise self.error
        return self.reply

    async def aclose(self):
        pass


@pytest.fixture
def settings(tmp_path, monkeypatch):
    monkeypatch.setenv("PROMPTS_DIR", str(tmp_path / "prompts"))
    monkeypatch.setenv("OPENROUTER_API_KEY", "test-key")
    monkeypatch.setenv("ADMIN_PASSWORD", "letmein")
    monkeypatch.setenv("JWT_SECRET_KEY", "test-secret")
    return Settings()


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def store(app):
    return app.state.prompt_store


@pytest.fixture
def fake_llm(app):
    fake = FakeLLM()
    app.dependency_overrides[get_llm_client] = lambda: fake
    return fake


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def admin_headers(app):
    token, _ = app.state.auth_service.create_access_token()
    return {"Authorization": f"Bearer {token}"}
