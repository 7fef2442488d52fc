"""Persisted build session state.

Each user command is a separate process, so the open build lives on disk
in a single JSON file. The file holds at most one session; its existence
is what "a build is open" means. Writes replace the file atomically.
"""

import json
import logging
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from please._internal.fileio import write_json_atomic
from please.errors import SessionStateCorrupt
from please.kernel.history import HistoryMarker

logger = logging.getLogger(__name__)


class SessionStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class AskEntry(BaseModel):
    """Template lines recorded by one ask, and where they go."""
    insertion_index: int = Field(..., ge=0)  # non-self commands since the marker when the ask ran
    template_lines: List[str]
    variable: str
    prompt: str = ""


class BuildSession(BaseModel):
    """The state of one in-progress build."""
    format: str = "please.build"
    version: str = "1"
    script_name: str
    start_marker: HistoryMarker
    status: SessionStatus = SessionStatus.OPEN
    ask_entries: List[AskEntry] = Field(default_factory=list)
    created_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    model_config = ConfigDict(extra="forbid")

    @property
    def is_open(self) -> bool:
        return self.status is SessionStatus.OPEN


class SessionStore:
    """File-backed storage for the single open build session."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> Optional[BuildSession]:
        """Read the session fresh from disk.

        Returns:
            The stored session, or None when no build is open

        Raises:
            SessionStateCorrupt: The state file exists but cannot be parsed
        """
        try:
            data = self.path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise SessionStateCorrupt(f"cannot read build state {self.path}: {e}") from e
        try:
            raw = data.decode("utf-8", errors="surrogateescape")
            session = BuildSession.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as e:
            raise SessionStateCorrupt(
                f"build state {self.path} is unreadable; run `please reset` to discard it"
            ) from e
        if not session.is_open:
            # A closed session left behind by an interrupted close.
            logger.debug("Ignoring closed session state for %s", session.script_name)
            return None
        return session

    def save(self, session: BuildSession) -> None:
        write_json_atomic(self.path, session.model_dump(mode="json"))
        logger.debug("Saved build state for %s to %s", session.script_name, self.path)

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
