from fastapi import APIRouter, Depends, HTTPException, status
import logging

from api.dependencies import get_prompt_store
from api.schema.admin_prompts import (
    AddPromptVersionRequest,
    AddPromptVersionResponse,
    AdminLoginRequest,
    AdminLoginResponse,
    AdminPromptEntry,
    AdminPromptsResponse,
    TokenEstimateResponse,
)
from models.prompt import PromptType, PromptVersion
from services.auth_service import AdminAuthService, get_auth_service, require_admin
from services.errors import AdminAuthNotConfigured, PromptStoreError
from services.prompt_store import PromptStore, select_active_version
from services.template_filler import unrecognized_placeholders
from services.tool_matcher import LLM_MODELS
from utils.token_calculator import count_tokens, token_calculator

admin_router = APIRouter(prefix="/api/admin", tags=["admin"])
logger = logging.getLogger(__name__)


@admin_router.post("/login", response_model=AdminLoginResponse, summary="Exchange the admin password for a token")
async def admin_login(
    payload: AdminLoginRequest,
    auth_service: AdminAuthService = Depends(get_auth_service),
):
    try:
        if not auth_service.verify_password(payload.password):
            logger.warning("Admin login failed: invalid password")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid password")
        token, _expire = auth_service.create_access_token()
    except AdminAuthNotConfigured as e:
        logger.error(str(e))
        raise HTTPException(status_code=500, detail="Admin authentication not configured.")

    return AdminLoginResponse(access_token=token)


@admin_router.get(
    "/prompts",
    response_model=AdminPromptsResponse,
    dependencies=[Depends(require_admin)],
    summary="All prompt types with their versions and placeholders",
)
async def list_admin_prompts(store: PromptStore = Depends(get_prompt_store)):
    response = {}
    for prompt_type in PromptType:
        versions = store.read_prompt_set(prompt_type)
        active = select_active_version(prompt_type, versions) if versions else None
        response[prompt_type.value] = AdminPromptEntry(
            display_name=prompt_type.display_name,
            type=prompt_type,
            filename=prompt_type.filename,
            versions=versions,
            available_variables=prompt_type.variables,
            active_version=active.version if active else None,
            estimated_tokens=count_tokens(active.content) if active else 0,
        )
    return response


@admin_router.get(
    "/prompts/{prompt_type}/active",
    response_model=PromptVersion,
    dependencies=[Depends(require_admin)],
    summary="The version currently used for a prompt type",
)
async def get_active_prompt(prompt_type: PromptType, store: PromptStore = Depends(get_prompt_store)):
    active = store.get_active_prompt(prompt_type)
    if active is None:
        raise HTTPException(status_code=404, detail=f"No prompt versions stored for {prompt_type.value}")
    return active


@admin_router.post(
    "/add-prompt-version",
    response_model=AddPromptVersionResponse,
    dependencies=[Depends(require_admin)],
    summary="Store new content as the active version of a prompt type",
)
async def add_prompt_version(
    payload: AddPromptVersionRequest,
    store: PromptStore = Depends(get_prompt_store),
):
    try:
        new_version = store.add_prompt_version(payload.prompt_type, payload.content, payload.change_description)
    except PromptStoreError as e:
        logger.error(f"Error adding new prompt version: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    unknown = unrecognized_placeholders(payload.content, payload.prompt_type)
    if unknown:
        logger.warning(
            "New prompt version contains placeholders that are never filled",
            extra={"prompt_type": payload.prompt_type.value, "placeholders": unknown},
        )
    return AddPromptVersionResponse(new_version=new_version, unrecognized_variables=unknown)


@admin_router.get(
    "/token-estimate",
    response_model=TokenEstimateResponse,
    dependencies=[Depends(require_admin)],
    summary="Token estimate for the active main generation prompt plus training data",
)
async def token_estimate(model: str = LLM_MODELS[0], store: PromptStore = Depends(get_prompt_store)):
    template = store.get_active_prompt(PromptType.GENERATION_MAIN)
    training = store.get_active_prompt(PromptType.GENERATION_MAIN_TRAINING_DATA)
    estimate = token_calculator.estimate_generation_tokens(
        template.content if template else None,
        training.content if training else None,
        model,
    )
    return TokenEstimateResponse(
        model=model,
        template_version=template.version if template else None,
        training_data_version=training.version if training else None,
        template_tokens=estimate["template_tokens"],
        training_data_tokens=estimate["training_data_tokens"],
        total_tokens=estimate["total_tokens"],
    )
