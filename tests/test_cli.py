"""CLI tests, including the full build / ask / close flow."""

import shutil

import pytest

needs_sh = pytest.mark.skipif(shutil.which("sh") is None, reason="needs sh")


@needs_sh
def test_end_to_end_build_with_ask(run_cli, history, cli_env, capfd):
    history.append("please build demo")
    assert run_cli("build", "demo") == 0
    history.append("echo hi")

    history.append("please ask Name?")
    assert run_cli("ask", "Name?", "--var", "NAME", "--expr", 'echo "hi $NAME"', "--value", "world") == 0
    assert "hi world" in capfd.readouterr().out

    history.append("echo done")
    history.append("please build")
    assert run_cli("build") == 0

    script = (cli_env.scripts_dir / "demo.sh").read_text(encoding="utf-8")
    assert script == (
        "#!/bin/sh\n"
        "set -e\n"
        "echo hi\n"
        'read -p "Name? " NAME\n'
        'echo "hi $NAME"\n'
        "echo done\n"
    )
    assert not cli_env.build_file.exists()


def test_build_twice_fails(run_cli, capsys):
    assert run_cli("build", "demo") == 0
    assert run_cli("build", "other") == 1
    err = capsys.readouterr().err
    assert err.startswith("Error: already building script `demo`")
    assert "Traceback" not in err


def test_close_without_build(run_cli, capsys):
    assert run_cli("build") == 1
    assert "no build in progress" in capsys.readouterr().err


def test_ask_without_build(run_cli, capsys):
    assert run_cli("ask", "Name?", "--var", "X", "--expr", "true", "--value", "1") == 1
    assert "only works inside a build" in capsys.readouterr().err


def test_ask_invalid_variable(run_cli, capsys):
    run_cli("build", "demo")
    assert run_cli("ask", "Go?", "--var", "9lives", "--expr", "true", "--value", "1") == 1
    assert "invalid variable name" in capsys.readouterr().err


def test_build_existing_name_needs_force(run_cli, cli_env, capsys):
    (cli_env.scripts_dir / "demo.sh").write_text("echo old\n")
    assert run_cli("build", "demo") == 1
    assert "already exists" in capsys.readouterr().err
    assert run_cli("build", "demo", "--force") == 0


def test_current_shows_draft(run_cli, history, capsys):
    run_cli("build", "demo")
    history.extend("echo one", "please current")
    assert run_cli("current") == 0
    out = capsys.readouterr().out
    assert "echo one\n" in out
    assert "please current" not in out


def test_reset(run_cli, cli_env, capsys):
    run_cli("build", "demo")
    assert run_cli("reset") == 0
    assert "Discarded `demo`" in capsys.readouterr().out
    assert not cli_env.build_file.exists()


def test_list_and_delete(run_cli, cli_env, capsys):
    assert run_cli("list") == 0
    assert "don't have any scripts" in capsys.readouterr().out

    (cli_env.scripts_dir / "foo.sh").write_text("echo foo\n")
    assert run_cli("list") == 0
    assert "\tfoo" in capsys.readouterr().out

    assert run_cli("delete", "foo") == 0
    assert not (cli_env.scripts_dir / "foo.sh").exists()
    assert run_cli("delete", "foo") == 1
    assert "does not exist" in capsys.readouterr().err


@needs_sh
def test_run_and_bare_name(run_cli, cli_env):
    (cli_env.scripts_dir / "ok.sh").write_text("exit 0\n")
    (cli_env.scripts_dir / "bad.sh").write_text("exit 4\n")
    assert run_cli("run", "ok") == 0
    assert run_cli("ok") == 0
    assert run_cli("bad") == 4


def test_run_missing_script(run_cli, capsys):
    assert run_cli("nothing-here") == 1
    assert "script `nothing-here` does not exist" in capsys.readouterr().err


def test_no_command_prints_help(run_cli, capsys):
    assert run_cli() == 1
    assert "usage: please" in capsys.readouterr().out


def test_truncated_history_reported(run_cli, history, cli_env, capsys):
    history.extend("a", "b")
    run_cli("build", "demo")
    cli_env.history_file.write_text("", encoding="utf-8")
    assert run_cli("build") == 1
    assert "shrank" in capsys.readouterr().err
    assert cli_env.build_file.exists()


def test_non_utf8_state_reported_and_resettable(run_cli, cli_env, capsys):
    cli_env.build_file.write_bytes(b"\xff\xfe garbage")
    assert run_cli("build") == 1
    err = capsys.readouterr().err
    assert err.startswith("Error: build state")
    assert "Traceback" not in err

    assert run_cli("reset") == 0
    assert not cli_env.build_file.exists()
    assert run_cli("build", "demo") == 0


def test_non_utf8_command_saved_verbatim(run_cli, cli_env):
    run_cli("build", "demo")
    with open(cli_env.history_file, "ab") as f:
        f.write(b": 1700000100:0;echo caf\xe9\n")
    assert run_cli("build") == 0
    assert (cli_env.scripts_dir / "demo.sh").read_bytes().endswith(b"echo caf\xe9\n")


def test_current_with_non_utf8_command(run_cli, cli_env, capsys):
    run_cli("build", "demo")
    with open(cli_env.history_file, "ab") as f:
        f.write(b": 1700000100:0;echo caf\xe9\n")
    assert run_cli("current") == 0
    assert "echo caf�\n" in capsys.readouterr().out


@pytest.mark.parametrize("args", [
    ["--quiet", "build", "demo"],
    ["build", "demo", "--quiet"],
])
def test_quiet_before_or_after_command(run_cli, capsys, args):
    assert run_cli(*args) == 0
    assert capsys.readouterr().out == ""


@needs_sh
def test_global_flag_with_bare_name(run_cli, cli_env, capsys):
    (cli_env.scripts_dir / "ok.sh").write_text("exit 0\n")
    assert run_cli("--quiet", "ok") == 0
    assert capsys.readouterr().out == ""
