"""please: record interactive shell sessions into reusable scripts."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("please-scripts")
except PackageNotFoundError:
    __version__ = "dev"

# Public API exports
from please.codes import ErrorCode
from please.errors import (
    AlreadyOpenError,
    BuildAlreadyOpenError,
    HistoryLogTruncated,
    HistoryLogUnreadable,
    InvalidVariableName,
    NoOpenSessionError,
    PleaseError,
)
from please.kernel.extract import ScriptDraft

__all__ = [
    "__version__",
    "ErrorCode",
    "PleaseError",
    "AlreadyOpenError",
    "BuildAlreadyOpenError",
    "NoOpenSessionError",
    "InvalidVariableName",
    "HistoryLogUnreadable",
    "HistoryLogTruncated",
    "ScriptDraft",
]
