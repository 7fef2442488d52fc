"""Error code constants for please.

These constants prevent stringly-typed error codes and let callers
branch on a failure without matching message text.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Error codes carried by every PleaseError."""

    # Build session lifecycle
    BUILD_ALREADY_OPEN = "BUILD_ALREADY_OPEN"
    NO_OPEN_SESSION = "NO_OPEN_SESSION"
    SESSION_STATE_CORRUPT = "SESSION_STATE_CORRUPT"

    # Ask input validation
    INVALID_VARIABLE_NAME = "INVALID_VARIABLE_NAME"
    ASK_CANCELLED = "ASK_CANCELLED"

    # Shell history log
    HISTORY_LOG_MISSING = "HISTORY_LOG_MISSING"  # recovered as empty history
    HISTORY_LOG_UNREADABLE = "HISTORY_LOG_UNREADABLE"
    HISTORY_LOG_TRUNCATED = "HISTORY_LOG_TRUNCATED"

    # Script store
    INVALID_SCRIPT_NAME = "INVALID_SCRIPT_NAME"
    SCRIPT_NOT_FOUND = "SCRIPT_NOT_FOUND"
    SCRIPT_ALREADY_EXISTS = "SCRIPT_ALREADY_EXISTS"
    SCRIPT_STORE_IO = "SCRIPT_STORE_IO"

    # External programs (shell, editor)
    EXECUTABLE_NOT_FOUND = "EXECUTABLE_NOT_FOUND"

    # Anything without a more specific code
    UNEXPECTED = "UNEXPECTED"
