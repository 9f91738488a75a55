"""
Seed a first version of every prompt type that has no versions yet.

Usage (from backend/):
    python scripts/seed_prompts.py [--prompts-dir DIR] [--force]

--force : add the seed content as a new active version even when versions exist
"""
import argparse
import logging
import sys
from typing import Dict, List

from config.logging import configure_logging
from config.settings import Settings
from models.prompt import PromptType
from services.errors import PromptStoreError
from services.prompt_store import PromptStore

logger = logging.getLogger(__name__)

VALIDATION_PROMPT = (
    "You review automation requests for an n8n workflow generator.\n\n"
    "User request:\n\"{{USER_PROMPT}}\"\n\n"
    "Decide whether the request describes an automation with a trigger, optional processing "
    "and an action. Respond with a JSON object only, with keys:\n"
    "- valid: boolean\n"
    "- trigger: short description of what starts the workflow, or null\n"
    "- process: short description of any filtering/transformation, or null\n"
    "- action: short description of the final action, or null\n"
    "- feedback: one sentence explaining what is missing when valid is false, else null\n"
    "- suggestions: list of up to 3 rephrasings that would make the request complete\n"
)

GENERATION_MAIN_PROMPT = (
    "Build an n8n workflow for this request:\n{{USER_NATURAL_LANGUAGE_PROMPT}}\n\n"
    "Extracted trigger: {{AI_EXTRACTED_TRIGGER_TEXT}}\n"
    "Extracted processing: {{AI_EXTRACTED_PROCESS_TEXT}}\n"
    "Extracted action: {{AI_EXTRACTED_ACTION_TEXT}}\n\n"
    "Use these nodes: trigger={{SELECTED_TRIGGER_TOOL}}, "
    "processing={{SELECTED_PROCESS_LOGIC_TOOL}}, action={{SELECTED_ACTION_TOOL}}.\n\n"
    "Reference workflows:\n{{TRAINING_DATA}}\n\n"
    "Output the importable workflow JSON, then a line containing ---JSON-GUIDE-SEPARATOR---, "
    "then a short markdown setup guide.\n"
)

GENERATION_GUIDE_PROMPT = (
    "Write a step-by-step markdown guide for setting up this n8n workflow.\n\n"
    "Original request: {{USER_NATURAL_LANGUAGE_PROMPT}}\n"
    "Trigger: {{AI_EXTRACTED_TRIGGER_TEXT}} ({{SELECTED_TRIGGER_TOOL}})\n"
    "Processing: {{AI_EXTRACTED_PROCESS_TEXT}} ({{SELECTED_PROCESS_LOGIC_TOOL}})\n"
    "Action: {{AI_EXTRACTED_ACTION_TEXT}} ({{SELECTED_ACTION_TOOL}})\n\n"
    "Workflow JSON:\n{{N8N_WORKFLOW_JSON}}\n\n"
    "Cover credentials, node configuration and how to test the workflow.\n"
)

GENERATION_MAIN_TRAINING_DATA = (
    '{"name": "Webhook to Slack", "nodes": [{"type": "n8n-nodes-base.webhook"}, '
    '{"type": "n8n-nodes-base.slack"}], "connections": {}}\n'
)

SEED_PROMPTS: Dict[PromptType, str] = {
    PromptType.VALIDATION: VALIDATION_PROMPT,
    PromptType.GENERATION_MAIN: GENERATION_MAIN_PROMPT,
    PromptType.GENERATION_GUIDE: GENERATION_GUIDE_PROMPT,
    PromptType.GENERATION_MAIN_TRAINING_DATA: GENERATION_MAIN_TRAINING_DATA,
}


def seed_prompts(store: PromptStore, force: bool = False) -> List[PromptType]:
    """Add the seed content for each type that needs it; returns the types seeded."""
    store.initialize_prompt_files()
    seeded = []
    for prompt_type, content in SEED_PROMPTS.items():
        if store.read_prompt_set(prompt_type) and not force:
            logger.info(f"[skip] {prompt_type.value} already has versions")
            continue
        version = store.add_prompt_version(prompt_type, content, "initial seed from built-in defaults")
        logger.info(f"[created] {prompt_type.value} v{version.version}")
        seeded.append(prompt_type)
    return seeded


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--prompts-dir", default=None, help="Prompt store directory (default: PROMPTS_DIR)")
    parser.add_argument("--force", action="store_true", help="Seed even when versions exist")
    args = parser.parse_args(argv)

    configure_logging()
    store = PromptStore(args.prompts_dir or Settings().prompts_dir)
    try:
        seed_prompts(store, force=args.force)
    except PromptStoreError as e:
        logger.error(f"[error] Failed to seed prompts: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
