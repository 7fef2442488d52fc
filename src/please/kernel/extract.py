"""Turn a history slice plus recorded asks into a script.

Pure functions: no file access, no clock. The controller feeds them the
records that follow the session marker.
"""

from typing import Iterable, List, Sequence

from pydantic import BaseModel

from please.kernel.history import HistoryRecord
from please.kernel.session import AskEntry

SHEBANG = "#!/bin/sh"
SCRIPT_HEADER = [SHEBANG, "set -e"]


class ScriptDraft(BaseModel):
    """Script produced by closing (or previewing) a build."""
    script_name: str
    lines: List[str]

    @property
    def body(self) -> str:
        """Command lines, one per line, each newline-terminated."""
        return "".join(f"{line}\n" for line in self.lines)

    def render(self) -> str:
        """Full file content: interpreter header followed by the body."""
        return "\n".join(SCRIPT_HEADER) + "\n" + self.body


def is_self_invocation(text: str, command_names: Iterable[str]) -> bool:
    """Check if a command line runs this tool.

    please build demo -> True
    please -> True
    pleased -> False
    """
    stripped = text.lstrip()
    for name in command_names:
        if stripped == name or stripped.startswith(name + " ") or stripped.startswith(name + "\t"):
            return True
    return False


def filter_commands(records: Sequence[HistoryRecord], command_names: Iterable[str]) -> List[str]:
    """Drop self-invocations and map the rest 1:1 to script lines."""
    names = list(command_names)
    return [r.text for r in records if not is_self_invocation(r.text, names)]


def splice_asks(lines: Sequence[str], ask_entries: Sequence[AskEntry]) -> List[str]:
    """Insert ask template lines at their recorded positions.

    An entry with insertion_index ``i`` goes right before ``lines[i]``.
    Entries sharing an index keep the order they were recorded in. An
    index past the end of ``lines`` appends at the end.
    """
    n = len(lines)
    # sorted() is stable, so ties keep recording order.
    pending = sorted(ask_entries, key=lambda entry: min(entry.insertion_index, n))
    result: List[str] = []
    cursor = 0
    for position in range(n + 1):
        while cursor < len(pending) and min(pending[cursor].insertion_index, n) == position:
            result.extend(pending[cursor].template_lines)
            cursor += 1
        if position < n:
            result.append(lines[position])
    return result


def extract_script(
    script_name: str,
    records: Sequence[HistoryRecord],
    ask_entries: Sequence[AskEntry],
    command_names: Iterable[str],
) -> ScriptDraft:
    """Build the draft for a session from the records after its marker."""
    lines = filter_commands(records, command_names)
    return ScriptDraft(script_name=script_name, lines=splice_asks(lines, ask_entries))
