"""Atomic file writes and stable JSON serialization.

Session state and generated scripts are written with replace-on-write:
the content goes to a temp file in the same directory, is fsynced, and
then renamed over the destination. A crash leaves either the old file
or the complete new one, never a torn write. Text is encoded with
surrogateescape so commands that are not valid UTF-8 keep their bytes.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional


def canonical_dumps(obj: Any, indent: Optional[int] = 2) -> str:
    """
    Stable JSON serialization for persisted state.

    Rules:
    - Sorted keys
    - UTF-8 text (no ASCII escaping)
    - Fixed indentation so diffs of the state file stay readable

    Args:
        obj: JSON-compatible Python object
        indent: Indentation width, or None for compact separators

    Returns:
        JSON string without a trailing newline
    """
    if indent is None:
        return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return json.dumps(obj, sort_keys=True, indent=indent, ensure_ascii=False)


def write_text_atomic(path: Path, text: str, mode: Optional[int] = None) -> None:
    """Write text atomically via tempfile + fsync + os.replace().

    Args:
        path: Destination file
        text: Full file content
        mode: Optional permission bits applied before the rename
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", errors="surrogateescape") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        if mode is not None:
            os.chmod(tmp, mode)
        os.replace(tmp, path)
    except BaseException:
        try:
            Path(tmp).unlink()
        except OSError:
            pass
        raise


def write_json_atomic(path: Path, obj: Any) -> None:
    """Serialize obj with canonical_dumps and write it atomically."""
    write_text_atomic(path, canonical_dumps(obj) + "\n")
