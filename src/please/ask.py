"""Interactive ask step.

An ask records two script lines (a ``read -p`` prompt binding a variable,
then an expression using it) and immediately runs the expression once
with a concrete value so the user sees its effect.

The interaction is a linear state machine:

    idle -> prompting_name -> prompting_expression -> prompting_value -> executing -> idle

The template is recorded before the expression runs; a failing
expression is reported but does not undo the recording.
"""

import logging
import os
import re
import subprocess
from enum import Enum
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from pydantic import BaseModel

from please.errors import AskCancelled, InvalidVariableName, NoOpenSessionError
from please.kernel.controller import SessionController
from please.kernel.session import AskEntry

logger = logging.getLogger(__name__)

VARIABLE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
MAX_NAME_ATTEMPTS = 3
COMMAND_NOT_FOUND = 127

InputFn = Callable[[str], str]
OutputFn = Callable[[str], None]
RunFn = Callable[[Sequence[str], Mapping[str, str]], int]


class AskState(str, Enum):
    IDLE = "idle"
    PROMPTING_NAME = "prompting_name"
    PROMPTING_EXPRESSION = "prompting_expression"
    PROMPTING_VALUE = "prompting_value"
    EXECUTING = "executing"


class AskOutcome(BaseModel):
    """What one ask recorded and how the live run went."""
    entry: AskEntry
    exit_code: Optional[int] = None  # None when there was no expression to run


def is_valid_variable_name(name: str) -> bool:
    return bool(VARIABLE_NAME.match(name))


def quote_prompt(prompt: str) -> str:
    """Escape text for use inside a double-quoted shell string."""
    return re.sub(r'(["\\$`])', r"\\\1", prompt)


def build_template(prompt: str, variable: str, expression: str) -> List[str]:
    """Script lines recorded for an ask.

    build_template("Name?", "NAME", 'echo "hi $NAME"')
    -> ['read -p "Name? " NAME', 'echo "hi $NAME"']
    """
    prompt = prompt.strip()
    read_line = f'read -p "{quote_prompt(prompt)} " {variable}' if prompt else f"read {variable}"
    lines = [read_line]
    if expression:
        lines.append(expression)
    return lines


def _run_subprocess(cmd: Sequence[str], env: Mapping[str, str]) -> int:
    return subprocess.run(list(cmd), env=dict(env)).returncode


class AskHandler:
    """Collects one ask interactively and records it on the open build."""

    def __init__(
        self,
        controller: SessionController,
        input_fn: InputFn = input,
        output: OutputFn = print,
        runner: Optional[RunFn] = None,
        shell: Optional[str] = None,
        env: Optional[Mapping[str, str]] = None,
    ):
        self.controller = controller
        self.input_fn = input_fn
        self.output = output
        self.runner = runner or _run_subprocess
        self.shell = shell or controller.config.shell
        self.env = env
        self.state = AskState.IDLE

    def _read(self, message: str) -> str:
        self.output(message)
        try:
            return self.input_fn("").strip()
        except EOFError:
            raise AskCancelled("ask cancelled: no input")

    def _prompt_name(self, variable: Optional[str]) -> str:
        self.state = AskState.PROMPTING_NAME
        if variable is not None:
            if not is_valid_variable_name(variable):
                raise InvalidVariableName(variable)
            return variable
        name = ""
        for _ in range(MAX_NAME_ATTEMPTS):
            name = self._read("Please enter variable name:")
            if is_valid_variable_name(name):
                return name
            self.output(f"`{name}` is not a valid variable name, try again.")
        raise InvalidVariableName(name)

    def _prompt_expression(self, name: str, expression: Optional[str]) -> str:
        self.state = AskState.PROMPTING_EXPRESSION
        if expression is not None:
            return expression.strip()
        return self._read(f"Please enter the expression for the variable `{name}`:")

    def _prompt_value(self, name: str, value: Optional[str]) -> str:
        self.state = AskState.PROMPTING_VALUE
        if value is not None:
            return value
        return self._read(f"Please enter the value for the variable `{name}`:")

    def _execute(self, name: str, expression: str, value: str) -> int:
        self.state = AskState.EXECUTING
        env: Dict[str, str] = dict(os.environ if self.env is None else self.env)
        env[name] = value
        try:
            exit_code = self.runner([self.shell, "-c", expression], env)
        except FileNotFoundError:
            logger.warning("Shell %s not found, ask expression not run", self.shell)
            exit_code = COMMAND_NOT_FOUND
        if exit_code != 0:
            logger.info("Ask expression exited with status %d", exit_code)
        return exit_code

    def run(
        self,
        prompt: str,
        variable: Optional[str] = None,
        expression: Optional[str] = None,
        value: Optional[str] = None,
    ) -> AskOutcome:
        """Run one ask against the open build.

        Args:
            prompt: Text shown by the recorded ``read -p`` line
            variable: Variable name; prompted for when None
            expression: Command using the variable; prompted for when None
            value: Value used for this run only; prompted for when None

        Raises:
            NoOpenSessionError: No build is open
            InvalidVariableName: The variable name is not a shell identifier
        """
        if self.controller.current() is None:
            raise NoOpenSessionError("`please ask` only works inside a build; start one with `please build <name>`")
        try:
            name = self._prompt_name(variable)
            expression = self._prompt_expression(name, expression)
            value = self._prompt_value(name, value) if expression else ""

            template = build_template(prompt, name, expression)
            entry = self.controller.record_ask(template, variable=name, prompt=prompt)

            exit_code = self._execute(name, expression, value) if expression else None
        finally:
            self.state = AskState.IDLE
        return AskOutcome(entry=entry, exit_code=exit_code)
