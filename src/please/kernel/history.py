"""Shell history log reader.

Parses the zsh history file into ordered, continuation-joined records and
hands out position markers so a later read can return only what was
appended since.

zsh history format:
- Extended entries look like ``: <start>:<elapsed>;<command>``; plain
  entries are just ``<command>``.
- A newline inside a command is written as a backslash at the end of the
  physical line. The reader strips that backslash and rejoins the lines,
  so the record holds the command exactly as typed.
- Bytes that collide with zsh's internal tokens are "metafied": written as
  0x83 followed by the original byte XOR 0x20.
- Bytes that are not valid UTF-8 are kept as surrogate escapes, so a
  script written with the same error handler gets them back unchanged.
"""

import logging
import re
from pathlib import Path
from typing import List, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field

from please.errors import HistoryLogMissing, HistoryLogTruncated, HistoryLogUnreadable

logger = logging.getLogger(__name__)

ZSH_META = 0x83
_EXTENDED_ENTRY = re.compile(r"^: *(\d+):(\d+);", re.ASCII)


class HistoryRecord(BaseModel):
    """One logical command from the history log."""
    text: str
    timestamp: Optional[int] = None  # seconds since epoch, absent for plain entries
    duration: Optional[int] = None  # elapsed seconds, absent for plain entries

    model_config = ConfigDict(frozen=True)


class HistoryMarker(BaseModel):
    """Opaque position in the history log.

    Everything at or before the marker is excluded from later slices.
    ``record_count`` is the number of logical records seen at capture time
    and ``size`` is the byte length of the file; either shrinking means the
    log was rewritten and the marker no longer points anywhere meaningful.
    """
    record_count: int = Field(0, ge=0)
    size: int = Field(0, ge=0)

    model_config = ConfigDict(frozen=True)


class HistoryReader(Protocol):
    """Interface the session controller depends on.

    A new shell dialect is supported by implementing this protocol against
    its own log format.
    """

    def read_all(self) -> List[HistoryRecord]: ...

    def position_marker(self) -> HistoryMarker: ...

    def records_after(self, marker: HistoryMarker) -> List[HistoryRecord]: ...


def unmetafy(data: bytes) -> bytes:
    """Undo zsh's metafication of special bytes."""
    if ZSH_META not in data:
        return data
    out = bytearray()
    escaped = False
    for byte in data:
        if escaped:
            out.append(byte ^ 0x20)
            escaped = False
        elif byte == ZSH_META:
            escaped = True
        else:
            out.append(byte)
    return bytes(out)


def _join_continuations(lines: List[str]) -> List[str]:
    """Rejoin physical lines that end with a backslash into logical lines."""
    logical: List[str] = []
    pending: Optional[List[str]] = None
    for line in lines:
        if pending is None:
            pending = []
        if line.endswith("\\"):
            pending.append(line[:-1])
            continue
        pending.append(line)
        logical.append("\n".join(pending))
        pending = None
    if pending:
        # Last entry still being written; keep what is there.
        logical.append("\n".join(pending))
    return logical


def parse_entry(line: str) -> Optional[HistoryRecord]:
    """Parse one logical line into a record, or None for blank lines."""
    match = _EXTENDED_ENTRY.match(line)
    if match:
        text = line[match.end():]
        timestamp, duration = int(match.group(1)), int(match.group(2))
    else:
        text = line
        timestamp = duration = None
    if not text.strip():
        return None
    return HistoryRecord(text=text, timestamp=timestamp, duration=duration)


def parse_history(data: bytes) -> List[HistoryRecord]:
    """Parse raw history file bytes into records, preserving append order.

    Args:
        data: Raw contents of the history file

    Returns:
        List of HistoryRecord, oldest first
    """
    text = unmetafy(data).decode("utf-8", errors="surrogateescape")
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    records = []
    for logical in _join_continuations(lines):
        record = parse_entry(logical.rstrip("\r"))
        if record is not None:
            records.append(record)
    return records


class ZshHistoryReader:
    """HistoryReader for the zsh history file.

    Every call re-reads the file from scratch; the live shell keeps
    appending between invocations, so nothing is cached.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read_bytes(self) -> bytes:
        try:
            return self.path.read_bytes()
        except FileNotFoundError:
            raise HistoryLogMissing(f"history file {self.path} does not exist", path=self.path)
        except OSError as e:
            raise HistoryLogUnreadable(
                f"cannot read history file {self.path}: {e.strerror or e}", path=self.path
            ) from e

    def _load(self) -> bytes:
        try:
            return self._read_bytes()
        except HistoryLogMissing:
            logger.debug("History file %s missing, treating as empty", self.path)
            return b""

    def read_all(self) -> List[HistoryRecord]:
        return parse_history(self._load())

    def position_marker(self) -> HistoryMarker:
        data = self._load()
        marker = HistoryMarker(record_count=len(parse_history(data)), size=len(data))
        logger.debug("History marker at %d records (%d bytes)", marker.record_count, marker.size)
        return marker

    def records_after(self, marker: HistoryMarker) -> List[HistoryRecord]:
        """Return the records appended strictly after ``marker``.

        Raises:
            HistoryLogTruncated: The log is shorter than when the marker was taken
            HistoryLogUnreadable: The log exists but cannot be read
        """
        data = self._load()
        if len(data) < marker.size:
            raise HistoryLogTruncated(
                f"history file {self.path} shrank from {marker.size} to {len(data)} bytes "
                f"since the build started",
                path=self.path,
            )
        records = parse_history(data)
        if len(records) < marker.record_count:
            raise HistoryLogTruncated(
                f"history file {self.path} has {len(records)} entries, fewer than the "
                f"{marker.record_count} present when the build started",
                path=self.path,
            )
        return records[marker.record_count:]
