"""Public API for please.

High-level functions used by the CLI. Each call loads configuration,
reads persisted state fresh, and returns a structured result. Only ask talks to the console,
through its injectable input and output functions.
"""

from pathlib import Path
from typing import List, Optional, Sequence

from pydantic import BaseModel

from please.ask import AskHandler, AskOutcome, InputFn, OutputFn
from please.config import PleaseConfig, load_config
from please.errors import ScriptAlreadyExistsError, ScriptNotFoundError
from please.kernel.controller import SessionController
from please.kernel.extract import ScriptDraft
from please.kernel.session import BuildSession
from please.runner import edit_script, run_script
from please.store import ScriptStore, normalize_name


class BuildResult(BaseModel):
    """Result of finishing a build."""
    script_name: str
    path: Path
    draft: ScriptDraft


def _setup(config: Optional[PleaseConfig]) -> PleaseConfig:
    config = config or load_config()
    config.ensure_dirs()
    return config


def start_build(name: str, force: bool = False, config: Optional[PleaseConfig] = None) -> BuildSession:
    """Open a build session for a new script.

    Raises:
        InvalidScriptName: The name is not usable as a script file name
        ScriptAlreadyExistsError: A script with this name exists and force is False
        BuildAlreadyOpenError: Another build is open
    """
    config = _setup(config)
    name = normalize_name(name)
    if not force and ScriptStore(config.scripts_dir).exists(name):
        raise ScriptAlreadyExistsError(name)
    return SessionController(config).open_build(name)


def finish_build(config: Optional[PleaseConfig] = None) -> BuildResult:
    """Close the open build and save its script.

    The name was checked when the build started; a script created under
    the same name in the meantime is replaced.
    """
    config = _setup(config)
    draft = SessionController(config).close_build()
    path = ScriptStore(config.scripts_dir).save(draft.script_name, draft.render(), overwrite=True)
    return BuildResult(script_name=draft.script_name, path=path, draft=draft)


def preview_build(config: Optional[PleaseConfig] = None) -> ScriptDraft:
    """Return the script the open build would produce right now."""
    return SessionController(_setup(config)).preview()


def current_build(config: Optional[PleaseConfig] = None) -> Optional[BuildSession]:
    return SessionController(_setup(config)).current()


def reset_build(config: Optional[PleaseConfig] = None) -> Optional[BuildSession]:
    """Discard the open build."""
    return SessionController(_setup(config)).reset()


def ask(
    prompt: str,
    variable: Optional[str] = None,
    expression: Optional[str] = None,
    value: Optional[str] = None,
    input_fn: InputFn = input,
    output: OutputFn = print,
    config: Optional[PleaseConfig] = None,
) -> AskOutcome:
    """Record an ask on the open build and run it once."""
    controller = SessionController(_setup(config))
    handler = AskHandler(controller, input_fn=input_fn, output=output)
    return handler.run(prompt, variable=variable, expression=expression, value=value)


def list_scripts(config: Optional[PleaseConfig] = None) -> List[str]:
    return ScriptStore(_setup(config).scripts_dir).list()


def run(name: str, args: Sequence[str] = (), config: Optional[PleaseConfig] = None) -> int:
    """Run a stored script and return its exit status.

    Raises:
        ScriptNotFoundError: No script with this name
    """
    config = _setup(config)
    store = ScriptStore(config.scripts_dir)
    if not store.exists(name):
        raise ScriptNotFoundError(normalize_name(name))
    return run_script(store.path(name), shell=config.shell, args=args)


def edit(name: str, config: Optional[PleaseConfig] = None) -> int:
    """Open a stored script in the user's editor."""
    store = ScriptStore(_setup(config).scripts_dir)
    if not store.exists(name):
        raise ScriptNotFoundError(normalize_name(name))
    return edit_script(store.path(name))


def delete(name: str, config: Optional[PleaseConfig] = None) -> None:
    ScriptStore(_setup(config).scripts_dir).delete(name)
