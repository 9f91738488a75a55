import asyncio

import httpx
import openai
import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from config.settings import Settings
from services.errors import LLMConfigurationError, MalformedUpstreamResponse, UpstreamLLMError
from utils.llm_manager import LLMManager, to_langchain_messages


class _StubLLM:
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.received = None

    async def ainvoke(self, messages):
        self.received = messages
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def manager(monkeypatch):
    monkeypatch.setenv("OPENROUTER_API_KEY", "test-key")
    return LLMManager(Settings())


def _use_stub(monkeypatch, manager, stub):
    monkeypatch.setattr(manager, "get_llm", lambda model, json_mode=False: stub)


def test_to_langchain_messages_maps_roles():
    converted = to_langchain_messages([
        {"role": "system", "content": "sys"},
        {"role": "user", "content": "hi"},
        {"role": "assistant", "content": "hello"},
    ])
    assert [type(m) for m in converted] == [SystemMessage, HumanMessage, AIMessage]
    assert converted[1].content == "hi"


def test_to_langchain_messages_rejects_unknown_role():
    with pytest.raises(ValueError):
        to_langchain_messages([{"role": "tool", "content": "x"}])


def test_get_llm_requires_api_key(monkeypatch):
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    mgr = LLMManager(Settings())
    with pytest.raises(LLMConfigurationError):
        mgr.get_llm("openai/gpt-4")


def test_get_llm_caches_per_model_and_mode(manager):
    first = manager.get_llm("openai/gpt-4")
    assert manager.get_llm("openai/gpt-4") is first
    assert manager.get_llm("openai/gpt-4", json_mode=True) is not first
    assert manager.get_pool_stats() == {"cached_llm_instances": 2, "http_client_active": 1}

    asyncio.run(manager.aclose())
    assert manager.get_pool_stats() == {"cached_llm_instances": 0, "http_client_active": 0}


def test_complete_returns_message_text(monkeypatch, manager):
    stub = _StubLLM(reply=AIMessage(content="workflow text"))
    _use_stub(monkeypatch, manager, stub)

    out = asyncio.run(manager.complete("openai/gpt-4", [{"role": "user", "content": "build it"}]))
    assert out == "workflow text"
    assert isinstance(stub.received[0], HumanMessage)


def test_complete_maps_provider_error_status(monkeypatch, manager):
    response = httpx.Response(503, request=httpx.Request("POST", "https://openrouter.test/chat"))
    error = openai.APIStatusError("Service Unavailable", response=response, body={"error": "overloaded"})
    _use_stub(monkeypatch, manager, _StubLLM(error=error))

    with pytest.raises(UpstreamLLMError) as exc_info:
        asyncio.run(manager.complete("openai/gpt-4", [{"role": "user", "content": "x"}]))
    assert exc_info.value.status_code == 503
    assert exc_info.value.details == {"error": "overloaded"}
    assert "Service Unavailable" in str(exc_info.value)


def test_complete_maps_connection_error_to_bad_gateway(monkeypatch, manager):
    error = openai.APIConnectionError(request=httpx.Request("POST", "https://openrouter.test/chat"))
    _use_stub(monkeypatch, manager, _StubLLM(error=error))

    with pytest.raises(UpstreamLLMError) as exc_info:
        asyncio.run(manager.complete("openai/gpt-4", [{"role": "user", "content": "x"}]))
    assert exc_info.value.status_code == 502


@pytest.mark.parametrize("reply", [AIMessage(content=""), AIMessage(content="   "), None])
def test_complete_rejects_empty_reply(monkeypatch, manager, reply):
    _use_stub(monkeypatch, manager, _StubLLM(reply=reply))

    with pytest.raises(MalformedUpstreamResponse):
        asyncio.run(manager.complete("openai/gpt-4", [{"role": "user", "content": "x"}]))
