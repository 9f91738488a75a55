import json
import re
from typing import Any, Dict, Optional, Tuple

WORKFLOW_GUIDE_SEPARATOR = "---JSON-GUIDE-SEPARATOR---"

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL | re.IGNORECASE)


def extract_json_from_raw(raw_text: str) -> Optional[Dict[str, Any]]:
    """Extract a JSON object from LLM text that might wrap it in a markdown code block"""
    if not raw_text:
        return None

    for block in _FENCED_BLOCK.findall(raw_text):
        try:
            parsed = json.loads(block)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            return parsed

    try:
        parsed = json.loads(raw_text)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def unwrap_code_fence(text: str) -> str:
    """Return the body of a single surrounding ``` fence, or the stripped text."""
    stripped = (text or "").strip()
    match = re.fullmatch(r"```[a-zA-Z]*\s*(.*?)\s*```", stripped, re.DOTALL)
    return match.group(1) if match else stripped


def split_workflow_and_guide(output: str) -> Tuple[str, Optional[str]]:
    """
    Split generator output into (workflow JSON text, guide markdown).

    The generation prompt asks for the workflow JSON, the separator, then the
    setup guide. Without a separator the whole output is treated as workflow
    text and the guide is None.
    """
    if WORKFLOW_GUIDE_SEPARATOR not in (output or ""):
        return unwrap_code_fence(output), None
    workflow_part, guide_part = output.split(WORKFLOW_GUIDE_SEPARATOR, 1)
    return unwrap_code_fence(workflow_part), guide_part.strip() or None
