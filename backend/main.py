from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import Settings
from config.logging import configure_logging
from api.generate import generate_router
from api.admin.prompts import admin_router
from middleware.correlation_id import CorrelationIdMiddleware
from services.auth_service import AdminAuthService
from services.prompt_store import PromptStore
from utils.llm_manager import LLMManager


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the app with its own prompt store, LLM client and admin auth."""
    settings = settings or Settings()

    app = FastAPI(
        title="n8n Workflow Generator",
        description="Turns natural-language automation requests into n8n workflows and setup guides",
        version="1.0.0",
    )

    app.state.settings = settings
    app.state.prompt_store = PromptStore(settings.prompts_dir)
    app.state.llm_manager = LLMManager(settings)
    app.state.auth_service = AdminAuthService(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)

    @app.on_event("startup")
    async def startup_event():
        app.state.prompt_store.initialize_prompt_files()

    @app.on_event("shutdown")
    async def shutdown_event():
        await app.state.llm_manager.aclose()

    app.include_router(generate_router)
    app.include_router(admin_router)

    @app.get("/health")
    async def health_check():
        """Simple health check endpoint"""
        return {"status": "healthy", "service": "workflow-generator"}

    @app.get("/health/pool-stats")
    async def get_pool_stats():
        return app.state.llm_manager.get_pool_stats()

    return app


load_dotenv()
configure_logging()

app = create_app()
