"""Path and runtime configuration for please.

All state (the open build and the saved scripts) lives under one base
directory. Resolution order for the base directory:

1. PLEASE_HOME environment variable
2. $XDG_STATE_HOME/please
3. ~/.local/state/please

The shell history file comes from HISTFILE, falling back to the zsh
default location. PLEASE_SHELL picks the interpreter used to run scripts
and ask expressions (default: sh).
"""

import logging
import os
from pathlib import Path
from typing import List, Mapping, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

HOME_ENV_VAR = "PLEASE_HOME"
SHELL_ENV_VAR = "PLEASE_SHELL"

# Command prefixes that invoke this tool; history lines starting with
# one of these never end up in a generated script.
DEFAULT_COMMAND_NAMES = ["please", "python -m please"]


class PleaseConfig(BaseModel):
    """Resolved locations and settings for one invocation."""
    home: Path
    scripts_dir: Path
    build_file: Path
    history_file: Path
    shell: str = "sh"
    command_names: List[str] = Field(default_factory=lambda: list(DEFAULT_COMMAND_NAMES))

    @classmethod
    def from_home(cls, home: Path, history_file: Path, **kwargs) -> "PleaseConfig":
        """Build a config with the standard layout under ``home``."""
        home = Path(home)
        return cls(
            home=home,
            scripts_dir=home / "scripts",
            build_file=home / "build.json",
            history_file=Path(history_file),
            **kwargs,
        )

    def ensure_dirs(self) -> None:
        """Create the state and scripts directories if missing."""
        self.home.mkdir(parents=True, exist_ok=True)
        self.scripts_dir.mkdir(parents=True, exist_ok=True)


def resolve_home(env: Mapping[str, str]) -> Path:
    if env_home := env.get(HOME_ENV_VAR):
        return Path(env_home).expanduser()
    if xdg_state := env.get("XDG_STATE_HOME"):
        return Path(xdg_state).expanduser() / "please"
    return Path.home() / ".local" / "state" / "please"


def resolve_history_path(env: Mapping[str, str]) -> Path:
    """Locate the interactive shell's history file.

    Only the zsh history format is supported, so anything other than an
    explicit HISTFILE resolves to ~/.zsh_history.
    """
    if histfile := env.get("HISTFILE"):
        return Path(histfile).expanduser()
    shell = env.get("SHELL", "")
    if shell and not shell.endswith("zsh"):
        logger.debug("SHELL=%s is not zsh; reading ~/.zsh_history anyway", shell)
    return Path.home() / ".zsh_history"


def load_config(env: Optional[Mapping[str, str]] = None) -> PleaseConfig:
    """Resolve configuration from environment variables.

    Args:
        env: Environment mapping (defaults to os.environ)

    Returns:
        PleaseConfig with directories not yet created
    """
    if env is None:
        env = os.environ
    return PleaseConfig.from_home(
        resolve_home(env),
        resolve_history_path(env),
        shell=env.get(SHELL_ENV_VAR) or "sh",
    )
