import json
import logging

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import ValidationError

from api.dependencies import get_app_settings, get_llm_client, get_prompt_store
from api.schema.generation import (
    GENERATE_RAW_REQUEST_EXAMPLE,
    GenerateGuideRequest,
    GenerateGuideResponse,
    GenerateRawRequest,
    GenerateRawResponse,
    LLMValidationResult,
    ToolOptionsResponse,
    ValidatePromptRequest,
    ValidationResponse,
)
from config.settings import Settings
from models.prompt import PromptType, PromptVersion
from services.errors import (
    LLMConfigurationError,
    MalformedUpstreamResponse,
    PromptNotConfigured,
    UpstreamLLMError,
)
from services.prompt_store import PromptStore
from services.template_filler import fill_prompt
from services.tool_matcher import (
    ACTION_TOOL_KEYWORDS,
    ACTION_TOOLS,
    LLM_MODELS,
    PROCESS_LOGIC_TOOL_KEYWORDS,
    PROCESS_LOGIC_TOOLS,
    TRIGGER_TOOL_KEYWORDS,
    TRIGGER_TOOLS,
    match_action_tool,
    match_process_tool,
    match_trigger_tool,
)
from utils.jsonExtractor import extract_json_from_raw, split_workflow_and_guide
from utils.llm_manager import LLMManager
from utils.request_context import update_request_context

generate_router = APIRouter(prefix="/api", tags=["generation"])
logger = logging.getLogger(__name__)

GENERATION_SYSTEM_PROMPT = "You are a helpful assistant."


def require_active_prompt(store: PromptStore, prompt_type: PromptType) -> PromptVersion:
    """Active version with non-empty content, or PromptNotConfigured."""
    active = store.get_active_prompt(prompt_type)
    if active is None or not active.content:
        raise PromptNotConfigured(prompt_type)
    update_request_context(prompt_type=prompt_type.value, prompt_version=active.version)
    logger.info(f"Using {prompt_type.value} prompt version: {active.version}")
    return active


def to_http_exception(error: Exception, context: str) -> HTTPException:
    """Map a domain error raised while serving `context` to an HTTP error."""
    if isinstance(error, LLMConfigurationError):
        logger.error(f"{context}: {error}")
        return HTTPException(status_code=500, detail="API key not configured. Please contact support.")
    if isinstance(error, PromptNotConfigured):
        logger.error(f"CRITICAL: {error}")
        return HTTPException(
            status_code=500,
            detail=f"{context} instructions not configured. Please contact support.",
        )
    if isinstance(error, UpstreamLLMError):
        return HTTPException(
            status_code=error.status_code,
            detail={"error": f"{context} request to LLM failed: {error}", "details": error.details},
        )
    if isinstance(error, MalformedUpstreamResponse):
        detail = {"error": str(error)}
        if error.raw_output is not None:
            detail["rawOutput"] = error.raw_output
        if error.details is not None:
            detail["details"] = error.details
        return HTTPException(status_code=500, detail=detail)
    logger.exception(f"Unexpected error during {context.lower()}")
    return HTTPException(status_code=500, detail=f"An unexpected error occurred during {context.lower()}.")


def parse_validation_output(llm_output: str) -> LLMValidationResult:
    parsed = extract_json_from_raw(llm_output)
    if parsed is None:
        logger.error("LLM validation output was not JSON", extra={"raw_output": llm_output[:500]})
        raise MalformedUpstreamResponse(
            "LLM response for validation was not valid JSON.", raw_output=llm_output
        )
    try:
        return LLMValidationResult.model_validate(parsed)
    except ValidationError as e:
        logger.error("LLM validation output failed schema check", extra={"issues": e.errors(include_url=False)})
        raise MalformedUpstreamResponse(
            "LLM response for validation was not in the expected format.",
            details=json.loads(e.json(include_url=False)),
        )


@generate_router.get("/tool-options", response_model=ToolOptionsResponse)
async def tool_options():
    return ToolOptionsResponse(
        trigger_tools=TRIGGER_TOOLS,
        process_logic_tools=PROCESS_LOGIC_TOOLS,
        action_tools=ACTION_TOOLS,
        llm_models=LLM_MODELS,
        keywords={
            "trigger": TRIGGER_TOOL_KEYWORDS,
            "process": PROCESS_LOGIC_TOOL_KEYWORDS,
            "action": ACTION_TOOL_KEYWORDS,
        },
    )


@generate_router.post("/validate-prompt", response_model=ValidationResponse)
async def validate_prompt(
    request: ValidatePromptRequest,
    store: PromptStore = Depends(get_prompt_store),
    llm: LLMManager = Depends(get_llm_client),
    settings: Settings = Depends(get_app_settings),
):
    try:
        template = require_active_prompt(store, PromptType.VALIDATION)
        filled_prompt = fill_prompt(
            template.content, PromptType.VALIDATION, {"USER_PROMPT": request.user_prompt}
        )
        llm_output = await llm.complete(
            settings.validation_model,
            [{"role": "user", "content": filled_prompt}],
            json_mode=True,
        )
        result = parse_validation_output(llm_output)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "Validation")

    return ValidationResponse(
        valid=result.valid,
        extracted_trigger_text=result.trigger,
        extracted_process_text=result.process,
        extracted_action_text=result.action,
        feedback=result.feedback,
        suggestions=result.suggestions,
        matched_trigger_tool=match_trigger_tool(result.trigger),
        matched_process_tool=match_process_tool(result.process),
        matched_action_tool=match_action_tool(result.action),
    )


@generate_router.post("/generate-raw", response_model=GenerateRawResponse)
async def generate_raw(
    request: GenerateRawRequest = Body(..., examples=[GENERATE_RAW_REQUEST_EXAMPLE]),
    store: PromptStore = Depends(get_prompt_store),
    llm: LLMManager = Depends(get_llm_client),
):
    try:
        template = require_active_prompt(store, PromptType.GENERATION_MAIN)
        training_data = store.get_active_prompt(PromptType.GENERATION_MAIN_TRAINING_DATA)
        final_prompt = fill_prompt(
            template.content,
            PromptType.GENERATION_MAIN,
            {
                "USER_NATURAL_LANGUAGE_PROMPT": request.user_natural_language_prompt,
                "AI_EXTRACTED_TRIGGER_TEXT": request.ai_extracted_trigger,
                "AI_EXTRACTED_PROCESS_TEXT": request.ai_extracted_process,
                "AI_EXTRACTED_ACTION_TEXT": request.ai_extracted_action,
                "SELECTED_TRIGGER_TOOL": request.selected_trigger_tool,
                "SELECTED_PROCESS_LOGIC_TOOL": request.selected_process_logic_tool,
                "SELECTED_ACTION_TOOL": request.selected_action_tool,
                "TRAINING_DATA": training_data.content if training_data else None,
            },
        )
        output = await llm.complete(
            request.selected_llm_model,
            [
                {"role": "system", "content": GENERATION_SYSTEM_PROMPT},
                {"role": "user", "content": final_prompt},
            ],
        )
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "Generation")

    workflow_json, guide_markdown = split_workflow_and_guide(output)
    return GenerateRawResponse(output=output, workflow_json=workflow_json, guide_markdown=guide_markdown)


@generate_router.post("/generate-guide", response_model=GenerateGuideResponse)
async def generate_guide(
    request: GenerateGuideRequest,
    store: PromptStore = Depends(get_prompt_store),
    llm: LLMManager = Depends(get_llm_client),
):
    try:
        template = require_active_prompt(store, PromptType.GENERATION_GUIDE)
        final_prompt = fill_prompt(
            template.content,
            PromptType.GENERATION_GUIDE,
            {
                "USER_NATURAL_LANGUAGE_PROMPT": request.user_natural_language_prompt,
                "AI_EXTRACTED_TRIGGER_TEXT": request.ai_extracted_trigger,
                "AI_EXTRACTED_PROCESS_TEXT": request.ai_extracted_process,
                "AI_EXTRACTED_ACTION_TEXT": request.ai_extracted_action,
                "SELECTED_TRIGGER_TOOL": request.selected_trigger_tool,
                "SELECTED_PROCESS_LOGIC_TOOL": request.selected_process_logic_tool,
                "SELECTED_ACTION_TOOL": request.selected_action_tool,
                "N8N_WORKFLOW_JSON": request.n8n_workflow_json,
            },
            defaults={"USER_NATURAL_LANGUAGE_PROMPT": "", "N8N_WORKFLOW_JSON": "{}"},
        )
        guide_markdown = await llm.complete(
            request.selected_llm_model_for_guide,
            [{"role": "user", "content": final_prompt}],
        )
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "Guide generation")

    return GenerateGuideResponse(instructional_guide_markdown=guide_markdown.strip())
