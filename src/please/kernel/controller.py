"""Build session controller: open, extend, and close a build.

The controller owns the persisted BuildSession. Callers (the ask handler,
the API layer) mutate it only through the methods here. State is read
fresh from disk at the start of every operation.
"""

import logging
from typing import List, Optional

from please.config import PleaseConfig
from please.errors import BuildAlreadyOpenError, NoOpenSessionError, SessionStateCorrupt
from please.kernel.extract import ScriptDraft, extract_script, filter_commands
from please.kernel.history import HistoryReader, ZshHistoryReader
from please.kernel.session import AskEntry, BuildSession, SessionStatus, SessionStore

logger = logging.getLogger(__name__)


class SessionController:
    """Coordinates the history reader and the session store."""

    def __init__(
        self,
        config: PleaseConfig,
        reader: Optional[HistoryReader] = None,
        store: Optional[SessionStore] = None,
    ):
        self.config = config
        self.reader = reader if reader is not None else ZshHistoryReader(config.history_file)
        self.store = store if store is not None else SessionStore(config.build_file)

    def current(self) -> Optional[BuildSession]:
        """Return the open session, if any."""
        return self.store.load()

    def _require_open(self) -> BuildSession:
        session = self.store.load()
        if session is None:
            raise NoOpenSessionError()
        return session

    def open_build(self, script_name: str) -> BuildSession:
        """Start a build, marking the current end of the history log.

        Raises:
            BuildAlreadyOpenError: Another build is open
        """
        existing = self.store.load()
        if existing is not None:
            raise BuildAlreadyOpenError(existing.script_name)
        session = BuildSession(
            script_name=script_name,
            start_marker=self.reader.position_marker(),
        )
        self.store.save(session)
        logger.info("Opened build %s at %s", script_name, session.start_marker)
        return session

    def relative_position(self, session: BuildSession) -> int:
        """Count commands since the marker, excluding invocations of this tool.

        Uses the same counting base as extraction, so an ask recorded at
        this position lands between the same two commands in the script.
        """
        records = self.reader.records_after(session.start_marker)
        return len(filter_commands(records, self.config.command_names))

    def record_ask(self, template_lines: List[str], variable: str, prompt: str = "") -> AskEntry:
        """Append an ask to the open session at the current position.

        Raises:
            NoOpenSessionError: No build is open
        """
        session = self._require_open()
        entry = AskEntry(
            insertion_index=self.relative_position(session),
            template_lines=list(template_lines),
            variable=variable,
            prompt=prompt,
        )
        session.ask_entries.append(entry)
        self.store.save(session)
        logger.info("Recorded ask for %s at position %d", variable, entry.insertion_index)
        return entry

    def _extract(self, session: BuildSession) -> ScriptDraft:
        records = self.reader.records_after(session.start_marker)
        return extract_script(
            session.script_name,
            records,
            session.ask_entries,
            self.config.command_names,
        )

    def preview(self) -> ScriptDraft:
        """Return what closing the build would produce right now."""
        return self._extract(self._require_open())

    def close_build(self) -> ScriptDraft:
        """Finish the open build and return its script.

        A failure to read the history log propagates and leaves the
        session open so the user can retry. Once slicing succeeds the
        session is removed, whatever happens to the returned draft.

        Raises:
            NoOpenSessionError: No build is open
            HistoryLogUnreadable: The log cannot be read
            HistoryLogTruncated: The log shrank since the build started
        """
        session = self._require_open()
        draft = self._extract(session)
        session.status = SessionStatus.CLOSED
        self.store.clear()
        logger.info("Closed build %s with %d lines", session.script_name, len(draft.lines))
        return draft

    def reset(self) -> Optional[BuildSession]:
        """Discard the open build without producing a script.

        A corrupt state file is discarded too; there is nothing else a
        user could do with it.

        Returns:
            The discarded session, or None if the state file was corrupt

        Raises:
            NoOpenSessionError: No build is open
        """
        try:
            session = self._require_open()
        except SessionStateCorrupt:
            logger.warning("Discarding unreadable build state %s", self.store.path)
            self.store.clear()
            return None
        self.store.clear()
        logger.info("Reset build %s", session.script_name)
        return session
