from typing import Dict, List, Optional

from pydantic import Field

from api.schema.generation import CamelModel, NonBlankStr
from models.prompt import PromptType, PromptVersion


class AdminLoginRequest(CamelModel):
    password: str


class AdminLoginResponse(CamelModel):
    success: bool = True
    message: str = "Login successful"
    access_token: str = Field(..., alias="accessToken")
    token_type: str = Field("bearer", alias="tokenType")


class AddPromptVersionRequest(CamelModel):
    prompt_type: PromptType = Field(..., alias="promptType")
    content: NonBlankStr
    change_description: NonBlankStr = Field(..., alias="changeDescription")


class AddPromptVersionResponse(CamelModel):
    success: bool = True
    new_version: PromptVersion = Field(..., alias="newVersion")
    unrecognized_variables: List[str] = Field(
        default_factory=list,
        alias="unrecognizedVariables",
        description="Placeholders in the new content that this prompt type never fills",
    )


class AdminPromptEntry(CamelModel):
    display_name: str = Field(..., alias="displayName")
    type: PromptType
    filename: str
    versions: List[PromptVersion]
    available_variables: List[str] = Field(..., alias="availableVariables")
    active_version: Optional[int] = Field(None, alias="activeVersion")
    estimated_tokens: int = Field(0, alias="estimatedTokens")


AdminPromptsResponse = Dict[str, AdminPromptEntry]


class TokenEstimateResponse(CamelModel):
    model: str
    template_version: Optional[int] = Field(None, alias="templateVersion")
    training_data_version: Optional[int] = Field(None, alias="trainingDataVersion")
    template_tokens: int = Field(..., alias="templateTokens")
    training_data_tokens: int = Field(..., alias="trainingDataTokens")
    total_tokens: int = Field(..., alias="totalTokens")
