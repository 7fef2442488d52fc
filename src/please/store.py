"""Script store: one executable ``<name>.sh`` file per script."""

import logging
from pathlib import Path
from typing import List

from please._internal.fileio import write_text_atomic
from please.errors import (
    InvalidScriptName,
    ScriptAlreadyExistsError,
    ScriptNotFoundError,
    ScriptStoreError,
)

logger = logging.getLogger(__name__)

SCRIPT_SUFFIX = ".sh"
SCRIPT_MODE = 0o755


def normalize_name(name: str) -> str:
    """Validate a script name and strip an optional ``.sh`` suffix.

    deploy -> deploy
    deploy.sh -> deploy
    """
    name = name.strip()
    if name.endswith(SCRIPT_SUFFIX):
        name = name[: -len(SCRIPT_SUFFIX)]
    if not name:
        raise InvalidScriptName("script name cannot be empty")
    if "/" in name or "\\" in name or name.startswith("."):
        raise InvalidScriptName(
            f"invalid script name {name!r}: no path separators or leading dots"
        )
    return name


class ScriptStore:
    def __init__(self, scripts_dir: Path):
        self.scripts_dir = Path(scripts_dir)

    def path(self, name: str) -> Path:
        return self.scripts_dir / f"{normalize_name(name)}{SCRIPT_SUFFIX}"

    def exists(self, name: str) -> bool:
        return self.path(name).is_file()

    def save(self, name: str, text: str, overwrite: bool = False) -> Path:
        """Write a complete script and make it executable.

        Raises:
            ScriptAlreadyExistsError: A script with this name exists and overwrite is False
            ScriptStoreError: The file could not be written
        """
        path = self.path(name)
        if not overwrite and path.exists():
            raise ScriptAlreadyExistsError(normalize_name(name))
        try:
            write_text_atomic(path, text, mode=SCRIPT_MODE)
        except OSError as e:
            raise ScriptStoreError(f"cannot write script {path}: {e}") from e
        logger.info("Saved script %s", path)
        return path

    def load(self, name: str) -> str:
        path = self.path(name)
        try:
            return path.read_text(encoding="utf-8", errors="surrogateescape")
        except FileNotFoundError:
            raise ScriptNotFoundError(normalize_name(name))
        except OSError as e:
            raise ScriptStoreError(f"cannot read script {path}: {e}") from e

    def delete(self, name: str) -> None:
        path = self.path(name)
        try:
            path.unlink()
        except FileNotFoundError:
            raise ScriptNotFoundError(normalize_name(name))
        except OSError as e:
            raise ScriptStoreError(f"cannot delete script {path}: {e}") from e
        logger.info("Deleted script %s", path)

    def list(self) -> List[str]:
        """Return stored script names, sorted."""
        if not self.scripts_dir.is_dir():
            return []
        return sorted(
            p.name[: -len(SCRIPT_SUFFIX)]
            for p in self.scripts_dir.iterdir()
            if p.is_file() and p.name.endswith(SCRIPT_SUFFIX) and not p.name.startswith(".")
        )
