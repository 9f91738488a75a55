import re
from typing import Dict, List, Mapping, Optional

from models.prompt import PromptType

PLACEHOLDER_PATTERN = re.compile(r"\{\{([A-Z0-9_]+)\}\}")

DEFAULT_FALLBACK = "N/A"


def _bare_name(name: str) -> str:
    """'{{NAME}}' or 'NAME' -> 'NAME'"""
    name = name.strip()
    if name.startswith("{{") and name.endswith("}}"):
        return name[2:-2].strip()
    return name


def fill_template(
    template: str,
    values: Mapping[str, Optional[str]],
    fallback: str = DEFAULT_FALLBACK,
    defaults: Optional[Mapping[str, str]] = None,
    placeholders: Optional[List[str]] = None,
) -> str:
    """
    Substitute {{NAME}} placeholders in a prompt template.

    Every occurrence of each placeholder is replaced in a single pass, so text
    inserted from a value is never scanned for further placeholders. A value
    of None (or a missing key) becomes defaults[NAME] when given, otherwise
    `fallback`; empty strings are inserted as-is.

    Args:
        template: template text
        values: placeholder name (bare or braced) -> value
        fallback: replacement for absent values
        defaults: per-placeholder replacement for absent values
        placeholders: restrict substitution to these names plus the keys of
            `values` (typically a prompt type's recognized variables); other
            placeholders are left untouched. When omitted, every placeholder
            in the template is substituted.
    """
    resolved: Dict[str, Optional[str]] = {_bare_name(k): v for k, v in values.items()}
    per_name_defaults = {_bare_name(k): v for k, v in (defaults or {}).items()}
    names = None
    if placeholders is not None:
        names = set(resolved)
        names.update(_bare_name(p) for p in placeholders)

    def _replace(match: "re.Match[str]") -> str:
        name = match.group(1)
        if names is not None and name not in names:
            return match.group(0)
        value = resolved.get(name)
        if value is None:
            return per_name_defaults.get(name, fallback)
        return str(value)

    return PLACEHOLDER_PATTERN.sub(_replace, template)


def fill_prompt(
    template: str,
    prompt_type: PromptType,
    values: Mapping[str, Optional[str]],
    defaults: Optional[Mapping[str, str]] = None,
) -> str:
    """fill_template over the recognized variables of a prompt type."""
    return fill_template(template, values, defaults=defaults, placeholders=prompt_type.variables)


def extract_placeholders(template: str) -> List[str]:
    """Braced placeholders in order of first appearance."""
    seen: List[str] = []
    for match in PLACEHOLDER_PATTERN.finditer(template or ""):
        token = match.group(0)
        if token not in seen:
            seen.append(token)
    return seen


def unrecognized_placeholders(template: str, prompt_type: PromptType) -> List[str]:
    known = set(prompt_type.variables)
    return [p for p in extract_placeholders(template) if p not in known]
