"""
LLM manager: pooled chat-completion clients for the OpenRouter API
"""
import logging
from threading import Lock
from typing import Dict, List, Mapping, Optional, Tuple

import httpx
import openai
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from config.settings import Settings
from services.errors import LLMConfigurationError, MalformedUpstreamResponse, UpstreamLLMError
from utils.request_context import get_request_context

logger = logging.getLogger(__name__)

_ROLE_TO_MESSAGE = {
    "system": SystemMessage,
    "user": HumanMessage,
    "assistant": AIMessage,
}


def to_langchain_messages(messages: List[Mapping[str, str]]) -> List[BaseMessage]:
    converted = []
    for message in messages:
        role = message.get("role", "user")
        if role not in _ROLE_TO_MESSAGE:
            raise ValueError(f"Unsupported chat role: {role}")
        converted.append(_ROLE_TO_MESSAGE[role](content=message.get("content", "")))
    return converted


class LLMManager:
    """
    Builds and reuses ChatOpenAI clients pointed at OpenRouter.

    One pooled httpx.AsyncClient is shared by every model instance; instances
    are cached per (model, json_mode). Calls are single-attempt.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self._lock = Lock()
        self._llm_instances: Dict[Tuple[str, bool], object] = {}
        self._http_client: Optional[httpx.AsyncClient] = None

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:

            async def _inject_request_id(request: httpx.Request):
                req_id = (get_request_context() or {}).get("request_id")
                if req_id and "x-request-id" not in request.headers:
                    request.headers["x-request-id"] = req_id

            self._http_client = httpx.AsyncClient(
                limits=httpx.Limits(
                    max_keepalive_connections=20,
                    max_connections=100,
                    keepalive_expiry=30.0,
                ),
                timeout=httpx.Timeout(self.settings.llm_timeout_seconds, connect=10.0),
                event_hooks={"request": [_inject_request_id]},
            )
        return self._http_client

    def get_llm(self, model_name: str, json_mode: bool = False):
        """Get a pooled chat model for an OpenRouter model id"""
        api_key = self.settings.openrouter_api_key
        if not api_key:
            raise LLMConfigurationError("OPENROUTER_API_KEY is not set")

        key = (model_name, json_mode)
        if key not in self._llm_instances:
            with self._lock:
                if key not in self._llm_instances:
                    llm = ChatOpenAI(
                        model=model_name,
                        api_key=api_key,
                        base_url=self.settings.openrouter_base_url,
                        max_retries=0,
                        timeout=self.settings.llm_timeout_seconds,
                        http_async_client=self._get_http_client(),
                        streaming=False,
                    )
                    if json_mode:
                        llm = llm.bind(response_format={"type": "json_object"})
                    self._llm_instances[key] = llm
                    logger.info("Created chat model client", extra={"model": model_name, "json_mode": json_mode})
        return self._llm_instances[key]

    async def complete(
        self,
        model: str,
        messages: List[Mapping[str, str]],
        json_mode: bool = False,
    ) -> str:
        """
        Send a chat completion and return the assistant's text.

        Raises:
            LLMConfigurationError: no API key configured
            UpstreamLLMError: provider returned an error status or was unreachable
            MalformedUpstreamResponse: the reply had no text content
        """
        llm = self.get_llm(model, json_mode)
        try:
            reply = await llm.ainvoke(to_langchain_messages(messages))
        except openai.APIStatusError as e:
            logger.error("LLM provider error", extra={"model": model, "status_code": e.status_code})
            raise UpstreamLLMError(
                f"Failed to fetch from LLM: {e.message}",
                status_code=e.status_code,
                details=e.body,
            ) from e
        except openai.APIConnectionError as e:
            logger.error("LLM provider unreachable", extra={"model": model, "error": str(e)})
            raise UpstreamLLMError(f"Failed to reach LLM provider: {e}", status_code=502) from e

        content = getattr(reply, "content", None)
        if not isinstance(content, str) or not content.strip():
            raise MalformedUpstreamResponse("Unexpected response structure from LLM.")
        return content

    async def aclose(self):
        """Close pooled connections (call on app shutdown)"""
        with self._lock:
            self._llm_instances.clear()
            client, self._http_client = self._http_client, None
        if client is not None:
            await client.aclose()

    def get_pool_stats(self) -> Dict[str, int]:
        return {
            "cached_llm_instances": len(self._llm_instances),
            "http_client_active": 1 if self._http_client else 0,
        }
