"""
File-backed prompt version store.

Each PromptType is persisted as one JSON array of PromptVersion entries under
the store's root directory. Exactly one entry per set is active; adding a
version deactivates the others in the same whole-set rewrite.
"""
import json
import logging
import os
import tempfile
import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

from pydantic import ValidationError

from models.prompt import PromptType, PromptVersion, utc_now
from services.errors import PromptStoreError

logger = logging.getLogger(__name__)


class PromptSetStatus(str, Enum):
    OK = "ok"
    CREATED = "created"      # file was absent and has been initialised empty
    CORRUPTED = "corrupted"  # file exists but could not be read or parsed


@dataclass
class PromptSetLoad:
    prompt_type: PromptType
    status: PromptSetStatus
    versions: List[PromptVersion] = field(default_factory=list)
    error: Optional[str] = None


def select_active_version(
    prompt_type: PromptType, versions: List[PromptVersion]
) -> Optional[PromptVersion]:
    active = next((v for v in versions if v.is_active), None)
    if active is not None:
        return active
    if versions:
        logger.warning(
            "No active prompt found for %s, falling back to latest version.", prompt_type.value
        )
        return max(versions, key=lambda v: v.version)
    logger.error("No prompts found for %s and no fallback possible.", prompt_type.value)
    return None


class PromptStore:
    """Reads and appends versioned prompt templates on local disk"""

    def __init__(self, root_dir: Union[str, Path]):
        self.root_dir = Path(root_dir)
        self._locks = {t: threading.RLock() for t in PromptType}

    def _path(self, prompt_type: PromptType) -> Path:
        return self.root_dir / prompt_type.filename

    # ==============================
    # Reading
    # ==============================
    def load_prompt_set(self, prompt_type: PromptType) -> PromptSetLoad:
        """
        Load a prompt set and report how it was obtained.

        Returns:
            PromptSetLoad: CREATED with no versions when the file was missing,
            CORRUPTED with no versions when it could not be read or parsed,
            OK otherwise.
        """
        path = self._path(prompt_type)
        if not path.exists():
            # re-checked under the lock so a concurrent add is never overwritten with []
            with self._locks[prompt_type]:
                if not path.exists():
                    try:
                        self._write_json(path, [])
                    except OSError as e:
                        logger.error("Could not initialise prompt file %s: %s", path, e)
                        return PromptSetLoad(prompt_type, PromptSetStatus.CORRUPTED, error=str(e))
                    return PromptSetLoad(prompt_type, PromptSetStatus.CREATED)

        try:
            with path.open("r", encoding="utf-8") as fh:
                raw = json.load(fh)
            if not isinstance(raw, list):
                raise ValueError(f"expected a JSON array, got {type(raw).__name__}")
            versions = [PromptVersion.model_validate(item) for item in raw]
        except (OSError, ValueError, ValidationError) as e:
            # json.JSONDecodeError is a ValueError
            logger.error(
                "Error reading prompt set for %s from %s: %s", prompt_type.value, path, e
            )
            return PromptSetLoad(prompt_type, PromptSetStatus.CORRUPTED, error=str(e))

        return PromptSetLoad(prompt_type, PromptSetStatus.OK, versions)

    def read_prompt_set(self, prompt_type: PromptType) -> List[PromptVersion]:
        """All versions for a prompt type; empty when new or unreadable."""
        return self.load_prompt_set(prompt_type).versions

    def get_active_prompt(self, prompt_type: PromptType) -> Optional[PromptVersion]:
        """
        The active version of a prompt type.

        Falls back to the highest version number when no entry is flagged
        active, and returns None when the set is empty.
        """
        return select_active_version(prompt_type, self.read_prompt_set(prompt_type))

    # ==============================
    # Writing
    # ==============================
    def write_prompt_set(self, prompt_type: PromptType, versions: List[PromptVersion]) -> None:
        """Replace the whole set on disk. Raises PromptStoreError on failure."""
        path = self._path(prompt_type)
        payload = [v.model_dump(mode="json", by_alias=True) for v in versions]
        try:
            self._write_json(path, payload)
        except OSError as e:
            logger.error("Error writing prompt set for %s to %s: %s", prompt_type.value, path, e)
            raise PromptStoreError(f"Failed to write prompt set for {prompt_type.value}: {e}") from e

    def add_prompt_version(
        self, prompt_type: PromptType, content: str, change_description: str
    ) -> PromptVersion:
        """
        Append a new active version and deactivate all others.

        The version number is one more than the current maximum (1 for an
        empty set). Refuses to write over a set that could not be read.
        """
        with self._locks[prompt_type]:
            loaded = self.load_prompt_set(prompt_type)
            if loaded.status is PromptSetStatus.CORRUPTED:
                raise PromptStoreError(
                    f"Prompt set for {prompt_type.value} is unreadable ({loaded.error}); "
                    "refusing to overwrite it"
                )

            versions = loaded.versions
            new_number = max((v.version for v in versions), default=0) + 1
            now = utc_now()
            new_version = PromptVersion(
                version=new_number,
                content=content,
                change_description=change_description,
                created_at=now,
                last_modified_at=now,
                is_active=True,
            )

            updated = [v.model_copy(update={"is_active": False}) for v in versions]
            updated.append(new_version)
            self.write_prompt_set(prompt_type, updated)

        logger.info(
            "Added prompt version",
            extra={"prompt_type": prompt_type.value, "prompt_version": new_number},
        )
        return new_version

    def initialize_prompt_files(self) -> None:
        """Create the store directory and an empty set for every type without a file."""
        self.root_dir.mkdir(parents=True, exist_ok=True)
        for prompt_type in PromptType:
            path = self._path(prompt_type)
            with self._locks[prompt_type]:
                if not path.exists():
                    logger.info("Initializing empty prompt file for %s: %s", prompt_type.value, path)
                    self._write_json(path, [])

    def _write_json(self, path: Path, payload) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        # unique temp file per write; replace() is atomic within one directory
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, indent=2, ensure_ascii=False)
            os.replace(tmp_name, path)
        except Exception:
            Path(tmp_name).unlink(missing_ok=True)
            raise
