from typing import Annotated, Any, Dict, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


def _require_text(value: str) -> str:
    if not value.strip():
        raise ValueError("must be a non-empty string")
    return value


NonBlankStr = Annotated[str, AfterValidator(_require_text)]


class ValidatePromptRequest(CamelModel):
    user_prompt: NonBlankStr = Field(..., alias="userPrompt", description="The user's natural-language automation request")


class LLMValidationResult(BaseModel):
    """Shape the validation prompt asks the LLM to answer with"""
    valid: bool
    trigger: Optional[str] = None
    process: Optional[str] = None
    action: Optional[str] = None
    feedback: Optional[str] = None
    suggestions: List[str] = Field(default_factory=list)


class ValidationResponse(CamelModel):
    valid: bool
    extracted_trigger_text: Optional[str] = Field(None, alias="extractedTriggerText")
    extracted_process_text: Optional[str] = Field(None, alias="extractedProcessText")
    extracted_action_text: Optional[str] = Field(None, alias="extractedActionText")
    feedback: Optional[str] = None
    suggestions: List[str] = Field(default_factory=list)
    matched_trigger_tool: str = Field(..., alias="matchedTriggerTool")
    matched_process_tool: str = Field(..., alias="matchedProcessTool")
    matched_action_tool: str = Field(..., alias="matchedActionTool")


class GenerateRawRequest(CamelModel):
    user_natural_language_prompt: NonBlankStr = Field(..., alias="userNaturalLanguagePrompt")
    selected_trigger_tool: NonBlankStr = Field(..., alias="selectedTriggerTool")
    selected_process_logic_tool: NonBlankStr = Field(..., alias="selectedProcessLogicTool")
    selected_action_tool: NonBlankStr = Field(..., alias="selectedActionTool")
    selected_llm_model: NonBlankStr = Field(..., alias="selectedLlmModel")
    ai_extracted_trigger: Optional[str] = Field(None, alias="aiExtractedTrigger")
    ai_extracted_process: Optional[str] = Field(None, alias="aiExtractedProcess")
    ai_extracted_action: Optional[str] = Field(None, alias="aiExtractedAction")


class GenerateRawResponse(CamelModel):
    output: str = Field(..., description="Raw generator output: workflow JSON, separator, setup guide")
    workflow_json: Optional[str] = Field(None, alias="workflowJson")
    guide_markdown: Optional[str] = Field(None, alias="guideMarkdown")


class GenerateGuideRequest(CamelModel):
    n8n_workflow_json: Optional[str] = Field(None, alias="n8nWorkflowJson")
    user_natural_language_prompt: Optional[str] = Field(None, alias="userNaturalLanguagePrompt")
    ai_extracted_trigger: Optional[str] = Field(None, alias="aiExtractedTrigger")
    ai_extracted_process: Optional[str] = Field(None, alias="aiExtractedProcess")
    ai_extracted_action: Optional[str] = Field(None, alias="aiExtractedAction")
    selected_trigger_tool: Optional[str] = Field(None, alias="selectedTriggerTool")
    selected_process_logic_tool: Optional[str] = Field(None, alias="selectedProcessLogicTool")
    selected_action_tool: Optional[str] = Field(None, alias="selectedActionTool")
    selected_llm_model_for_guide: NonBlankStr = Field(..., alias="selectedLlmModelForGuide")


class GenerateGuideResponse(CamelModel):
    instructional_guide_markdown: str = Field(..., alias="instructionalGuideMarkdown")


class ToolOptionsResponse(CamelModel):
    trigger_tools: List[str] = Field(..., alias="triggerTools")
    process_logic_tools: List[str] = Field(..., alias="processLogicTools")
    action_tools: List[str] = Field(..., alias="actionTools")
    llm_models: List[str] = Field(..., alias="llmModels")
    keywords: Dict[str, Dict[str, List[str]]]


GENERATE_RAW_REQUEST_EXAMPLE: Dict[str, Any] = {
    "userNaturalLanguagePrompt": "When a Google Form is submitted, post the answers to our #sales Slack channel.",
    "aiExtractedTrigger": "google form submitted",
    "aiExtractedProcess": None,
    "aiExtractedAction": "post answers to slack",
    "selectedTriggerTool": "Google Forms Trigger",
    "selectedProcessLogicTool": "Set Node",
    "selectedActionTool": "Slack (Send Message)",
    "selectedLlmModel": "openai/gpt-3.5-turbo",
}
