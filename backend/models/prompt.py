from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class PromptType(str, Enum):
    """Prompt kinds managed by the admin prompt store"""
    VALIDATION = "validation"
    GENERATION_MAIN = "generation_main"
    GENERATION_GUIDE = "generation_guide"
    GENERATION_MAIN_TRAINING_DATA = "generation_main_training_data"

    @property
    def filename(self) -> str:
        return PROMPT_TYPE_FILENAMES[self]

    @property
    def display_name(self) -> str:
        # "generation_main" -> "Generation Main"
        return " ".join(word.capitalize() for word in self.value.split("_"))

    @property
    def variables(self) -> List[str]:
        return list(PROMPT_VARIABLES[self])


PROMPT_TYPE_FILENAMES: Dict[PromptType, str] = {
    PromptType.VALIDATION: "validation.json",
    PromptType.GENERATION_MAIN: "generation_main.json",
    PromptType.GENERATION_GUIDE: "generation_guide.json",
    PromptType.GENERATION_MAIN_TRAINING_DATA: "generation_main_training_data.json",
}

_SHARED_GENERATION_VARIABLES = [
    "{{USER_NATURAL_LANGUAGE_PROMPT}}",
    "{{AI_EXTRACTED_TRIGGER_TEXT}}",
    "{{AI_EXTRACTED_PROCESS_TEXT}}",
    "{{AI_EXTRACTED_ACTION_TEXT}}",
    "{{SELECTED_TRIGGER_TOOL}}",
    "{{SELECTED_PROCESS_LOGIC_TOOL}}",
    "{{SELECTED_ACTION_TOOL}}",
]

PROMPT_VARIABLES: Dict[PromptType, List[str]] = {
    PromptType.VALIDATION: ["{{USER_PROMPT}}"],
    PromptType.GENERATION_MAIN: _SHARED_GENERATION_VARIABLES + ["{{TRAINING_DATA}}"],
    PromptType.GENERATION_GUIDE: _SHARED_GENERATION_VARIABLES + ["{{N8N_WORKFLOW_JSON}}"],
    PromptType.GENERATION_MAIN_TRAINING_DATA: [],
}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PromptVersion(BaseModel):
    """One stored version of a prompt template; persisted with camelCase keys."""
    model_config = ConfigDict(populate_by_name=True)

    version: int = Field(..., ge=1)
    content: str
    change_description: str = Field(..., alias="changeDescription")
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")
    last_modified_at: datetime = Field(default_factory=utc_now, alias="lastModifiedAt")
    is_active: bool = Field(False, alias="isActive")

    def __repr__(self):
        return f"<PromptVersion v{self.version} active={self.is_active}>"
