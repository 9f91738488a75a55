"""
Tool catalogue for the n8n generator and the heuristic that maps LLM-extracted
trigger/process/action text onto one catalogue entry.
"""
from typing import Dict, List, Mapping, Optional, Sequence

TRIGGER_TOOLS: List[str] = [
    "Webhook Trigger",
    "Cron Trigger",
    "Manual Trigger",
    "Email Read IMAP",
    "Google Forms Trigger",
]

PROCESS_LOGIC_TOOLS: List[str] = [
    "Code (Function)",
    "IF Node",
    "Switch Node",
    "Set Node",
    "Merge Node",
    "Item Lists Node",
]

ACTION_TOOLS: List[str] = [
    "HTTP Request",
    "OpenAI Chat Model",
    "Slack (Send Message)",
    "Google Sheets (Append/Update)",
    "Notion (Create/Update Page)",
    "Email Send (SMTP)",
]

# first entry is the default model
LLM_MODELS: List[str] = [
    "openai/gpt-3.5-turbo",
    "openai/gpt-4",
    "anthropic/claude-3-haiku-20240307",
]

TRIGGER_TOOL_KEYWORDS: Dict[str, List[str]] = {
    "Webhook Trigger": [
        "webhook",
        "http request in",
        "incoming request",
        "post received",
        "get received",
    ],
    "Cron Trigger": [
        "schedule",
        "cron",
        "every day",
        "time-based",
        "interval",
        "daily",
        "weekly",
        "hourly",
        "定期",
    ],
    "Manual Trigger": ["manual", "start manually", "on demand"],
    "Email Read IMAP": [
        "email received",
        "new email",
        "imap",
        "read email",
        "when i get an email",
    ],
    "Google Forms Trigger": [
        "google form",
        "form submitted",
        "form response",
        "new survey response",
    ],
}

PROCESS_LOGIC_TOOL_KEYWORDS: Dict[str, List[str]] = {
    "Code (Function)": ["code", "function", "script", "custom logic", "javascript", "python"],
    "IF Node": ["if", "condition", "conditional"],
    "Switch Node": ["switch", "case", "route by"],
    "Set Node": ["set field", "edit field", "modify data", "add field"],
    "Merge Node": ["merge", "join data", "combine"],
    "Item Lists Node": ["item list", "split array", "aggregate items", "loop over"],
}

ACTION_TOOL_KEYWORDS: Dict[str, List[str]] = {
    "HTTP Request": ["http request out", "call api", "send data", "post to", "get from"],
    "OpenAI Chat Model": ["openai", "gpt", "chatgpt", "ai model", "generate text"],
    "Slack (Send Message)": [
        "slack",
        "notify slack",
        "send slack message",
        "post to slack",
        "slack alert",
    ],
    "Google Sheets (Append/Update)": [
        "google sheet",
        "spreadsheet",
        "add row to sheet",
        "update sheet",
    ],
    "Notion (Create/Update Page)": ["notion", "create page", "update notion"],
    "Email Send (SMTP)": [
        "send email",
        "smtp",
        "email out",
        "email notification",
        "email to",
        "mail to",
        "send a message to email",
    ],
}


def base_tool_name(tool_name: str) -> str:
    """'Slack (Send Message)' -> 'Slack'"""
    return tool_name.split(" (")[0]


def match_tool(
    candidates: Sequence[str],
    keywords: Mapping[str, Sequence[str]],
    extracted_text: Optional[str],
) -> str:
    """
    Pick the candidate tool that best fits a free-text description.

    In order, first hit wins: case-insensitive exact name match, keyword
    contained in the text, base tool name contained in the text, and finally
    the first candidate. Always returns a member of `candidates`.

    Raises:
        ValueError: if `candidates` is empty
    """
    if not candidates:
        raise ValueError("match_tool needs at least one candidate tool")

    if extracted_text:
        search_text = extracted_text.lower()

        for tool in candidates:
            if tool.lower() == search_text:
                return tool

        for tool in candidates:
            for keyword in keywords.get(tool, ()):
                if keyword.lower() in search_text:
                    return tool

        for tool in candidates:
            if base_tool_name(tool).lower() in search_text:
                return tool

    return candidates[0]


def match_trigger_tool(extracted_text: Optional[str]) -> str:
    return match_tool(TRIGGER_TOOLS, TRIGGER_TOOL_KEYWORDS, extracted_text)


def match_process_tool(extracted_text: Optional[str]) -> str:
    return match_tool(PROCESS_LOGIC_TOOLS, PROCESS_LOGIC_TOOL_KEYWORDS, extracted_text)


def match_action_tool(extracted_text: Optional[str]) -> str:
    return match_tool(ACTION_TOOLS, ACTION_TOOL_KEYWORDS, extracted_text)
