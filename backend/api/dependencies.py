"""
FastAPI dependencies handing the app-scoped services to route handlers.
create_app() stores one instance of each on app.state.
"""
from fastapi import Request

from config.settings import Settings
from services.prompt_store import PromptStore
from utils.llm_manager import LLMManager


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_prompt_store(request: Request) -> PromptStore:
    return request.app.state.prompt_store


def get_llm_client(request: Request) -> LLMManager:
    return request.app.state.llm_manager
