"""Tests for script execution and editor resolution."""

import os
import shutil

import pytest

from please.errors import PleaseError
from please.runner import edit_script, resolve_editor, run_script


def test_resolve_editor_prefers_visual():
    assert resolve_editor({"VISUAL": "code --wait", "EDITOR": "nano"}) == ["code", "--wait"]


def test_resolve_editor_falls_back_to_editor_then_vi():
    assert resolve_editor({"EDITOR": "nano"}) == ["nano"]
    assert resolve_editor({"VISUAL": "  ", "EDITOR": ""}) == ["vi"]
    assert resolve_editor({}) == ["vi"]


@pytest.mark.skipif(shutil.which("sh") is None, reason="needs sh")
def test_run_script_returns_exit_status(tmp_path):
    script = tmp_path / "s.sh"
    script.write_text('test "$1" = ok\n')
    assert run_script(script, args=["ok"]) == 0
    assert run_script(script, args=["nope"]) == 1


def test_run_script_missing_shell(tmp_path):
    with pytest.raises(PleaseError):
        run_script(tmp_path / "s.sh", shell="definitely-not-a-shell-xyz")


@pytest.mark.skipif(shutil.which("true") is None, reason="needs true")
def test_edit_script_runs_editor(tmp_path):
    assert edit_script(tmp_path / "s.sh", env={"EDITOR": "true"}) == 0


def test_edit_script_missing_editor(tmp_path):
    with pytest.raises(PleaseError):
        edit_script(tmp_path / "s.sh", env={"EDITOR": "definitely-not-an-editor-xyz"})
