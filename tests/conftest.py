"""Pytest configuration for tests.

Every test gets an isolated state directory and history file under
tmp_path; nothing touches the real ~/.local/state or ~/.zsh_history.
"""

import sys
from pathlib import Path
from typing import Optional

import pytest

from please.config import PleaseConfig


class FakeHistory:
    """Appends entries to a history file the way zsh does."""

    def __init__(self, path: Path):
        self.path = path
        self.clock = 1_700_000_000

    def append(self, command: str, timestamp: Optional[int] = None, extended: bool = True) -> None:
        if timestamp is None:
            self.clock += 1
            timestamp = self.clock
        body = command.replace("\n", "\\\n")
        line = f": {timestamp}:0;{body}\n" if extended else f"{body}\n"
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(line)

    def extend(self, *commands: str) -> None:
        for command in commands:
            self.append(command)


@pytest.fixture
def config(tmp_path: Path) -> PleaseConfig:
    cfg = PleaseConfig.from_home(tmp_path / "state", tmp_path / "zsh_history")
    cfg.ensure_dirs()
    return cfg


@pytest.fixture
def history(config: PleaseConfig) -> FakeHistory:
    return FakeHistory(config.history_file)


@pytest.fixture
def cli_env(monkeypatch, config: PleaseConfig):
    """Point the CLI's environment-driven config at the test directories."""
    monkeypatch.setenv("PLEASE_HOME", str(config.home))
    monkeypatch.setenv("HISTFILE", str(config.history_file))
    monkeypatch.delenv("PLEASE_SHELL", raising=False)
    monkeypatch.delenv("PLEASE_LOG_LEVEL", raising=False)
    return config


@pytest.fixture
def run_cli(monkeypatch, cli_env):
    """Invoke please.cli.main() with argv, returning the exit code."""
    from please import cli

    def _run(*args: str) -> int:
        monkeypatch.setattr(sys, "argv", ["please", *args])
        with pytest.raises(SystemExit) as excinfo:
            cli.main()
        return excinfo.value.code

    return _run
