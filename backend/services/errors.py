"""
Domain errors raised by the prompt store, the LLM client and admin auth.
Routes translate these into HTTP responses.
"""
from typing import Any, Optional


class WorkflowGeneratorError(Exception):
    """Base class for errors raised by this service"""


class PromptNotConfigured(WorkflowGeneratorError):
    """No usable active prompt exists for a prompt type"""

    def __init__(self, prompt_type):
        self.prompt_type = prompt_type
        super().__init__(f"No active prompt configured for {getattr(prompt_type, 'value', prompt_type)}")


class PromptStoreError(WorkflowGeneratorError):
    """Reading or writing a prompt set on disk failed"""


class LLMConfigurationError(WorkflowGeneratorError):
    """The LLM provider is not configured (e.g. missing API key)"""


class UpstreamLLMError(WorkflowGeneratorError):
    """The LLM provider answered with an error or could not be reached"""

    def __init__(self, message: str, status_code: int = 502, details: Optional[Any] = None):
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class MalformedUpstreamResponse(WorkflowGeneratorError):
    """The LLM answered, but not in the shape the caller expected"""

    def __init__(self, message: str, raw_output: Optional[str] = None, details: Optional[Any] = None):
        self.raw_output = raw_output
        self.details = details
        super().__init__(message)


class AdminAuthNotConfigured(WorkflowGeneratorError):
    """ADMIN_PASSWORD is not set"""
