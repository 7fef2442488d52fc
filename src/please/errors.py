"""Exception taxonomy for please.

Every failure the CLI reports is a PleaseError subclass. The CLI prints
``Error: <message>`` and exits 1; nothing here is retried automatically.
"""

from typing import Optional

from please.codes import ErrorCode


class PleaseError(Exception):
    """Base class for all errors surfaced to the user."""

    code: ErrorCode = ErrorCode.UNEXPECTED

    def __init__(self, message: str, code: Optional[ErrorCode] = None):
        super().__init__(message)
        if code is not None:
            self.code = code


class BuildAlreadyOpenError(PleaseError):
    """A build session is already open; it must be closed first."""

    code = ErrorCode.BUILD_ALREADY_OPEN

    def __init__(self, script_name: str):
        self.script_name = script_name
        super().__init__(
            f"already building script `{script_name}`; run `please build` to finish it "
            f"or `please reset` to discard it"
        )


# Name used in the session lifecycle docs.
AlreadyOpenError = BuildAlreadyOpenError


class NoOpenSessionError(PleaseError):
    code = ErrorCode.NO_OPEN_SESSION

    def __init__(self, message: str = "no build in progress; start one with `please build <name>`"):
        super().__init__(message)


class SessionStateCorrupt(PleaseError):
    code = ErrorCode.SESSION_STATE_CORRUPT


class InvalidVariableName(PleaseError):
    code = ErrorCode.INVALID_VARIABLE_NAME

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"invalid variable name {name!r}: use letters, digits and underscores, "
            f"not starting with a digit"
        )


class AskCancelled(PleaseError):
    code = ErrorCode.ASK_CANCELLED


class ExecutableNotFound(PleaseError):
    """The shell or editor to launch is not on PATH."""

    code = ErrorCode.EXECUTABLE_NOT_FOUND


class HistoryLogError(PleaseError):
    """Base class for shell history log failures."""

    def __init__(self, message: str, path=None):
        self.path = path
        super().__init__(message)


class HistoryLogMissing(HistoryLogError):
    """The history file does not exist yet. Readers treat this as empty history."""

    code = ErrorCode.HISTORY_LOG_MISSING


class HistoryLogUnreadable(HistoryLogError):
    code = ErrorCode.HISTORY_LOG_UNREADABLE


class HistoryLogTruncated(HistoryLogError):
    """The log shrank below a previously captured marker."""

    code = ErrorCode.HISTORY_LOG_TRUNCATED


class ScriptStoreError(PleaseError):
    code = ErrorCode.SCRIPT_STORE_IO


class InvalidScriptName(ScriptStoreError):
    code = ErrorCode.INVALID_SCRIPT_NAME


class ScriptNotFoundError(ScriptStoreError):
    code = ErrorCode.SCRIPT_NOT_FOUND

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"script `{name}` does not exist")


class ScriptAlreadyExistsError(ScriptStoreError):
    code = ErrorCode.SCRIPT_ALREADY_EXISTS

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"script `{name}` already exists; pass --force to replace it or pick another name"
        )
