"""Run stored scripts and open them in the user's editor."""

import logging
import os
import shlex
import subprocess
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from please.errors import ExecutableNotFound

logger = logging.getLogger(__name__)

DEFAULT_EDITOR = "vi"


def run_script(path: Path, shell: str = "sh", args: Sequence[str] = ()) -> int:
    """Execute a script with the given shell and wait for it.

    Returns:
        The script's exit status
    """
    cmd = [shell, str(path), *args]
    logger.debug("Running %s", cmd)
    try:
        return subprocess.run(cmd).returncode
    except FileNotFoundError as e:
        raise ExecutableNotFound(f"shell {shell!r} not found") from e


def resolve_editor(env: Optional[Mapping[str, str]] = None) -> List[str]:
    """Pick the editor command: $VISUAL, then $EDITOR, then vi."""
    if env is None:
        env = os.environ
    for var in ("VISUAL", "EDITOR"):
        value = env.get(var, "").strip()
        if value:
            return shlex.split(value)
    return [DEFAULT_EDITOR]


def edit_script(path: Path, env: Optional[Mapping[str, str]] = None) -> int:
    """Open a script in the editor and block until it exits."""
    cmd = resolve_editor(env) + [str(path)]
    logger.debug("Launching editor %s", cmd)
    try:
        return subprocess.run(cmd).returncode
    except FileNotFoundError as e:
        raise ExecutableNotFound(f"editor {cmd[0]!r} not found; set $VISUAL or $EDITOR") from e
