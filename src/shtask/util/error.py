"""Error formatting utilities.

Turns the exceptions raised by executors and actions into readable reports.
"""

import json
import traceback
from typing import Any

from ..errors import ActionTimeoutError, ShellError, SkipError, SpawnError


def format_error(error: Any, options: Any = None) -> str | None:
    """Format known shtask errors into user-friendly messages.

    Returns None if the error type is not recognized, allowing
    fallback to format_unknown_error. ``options`` is forwarded to
    ``format_shell_result`` for ``ShellError``.
    """
    if isinstance(error, ShellError):
        from ..format import format_shell_result

        return format_shell_result(error.result, options)
    if isinstance(error, SpawnError):
        return f"Could not start shell \"{error.shell}\": {error.reason}"
    if isinstance(error, ActionTimeoutError):
        if error.label and error.timeout_seconds is not None:
            return f"Action \"{error.label}\" timed out after {error.timeout_seconds}s"
        return "Action timed out"
    if isinstance(error, SkipError):
        return f"Skipped: {error}"
    return None


def format_unknown_error(error: Any) -> str:
    """Format any error into a string representation.

    Handles Exception objects, serializable objects, and primitives.
    """
    if isinstance(error, BaseException):
        if error.__traceback__:
            return ''.join(traceback.format_exception(type(error), error, error.__traceback__))
        return f"{error.__class__.__name__}: {str(error)}"

    if isinstance(error, (dict, list)):
        try:
            return json.dumps(error, indent=2)
        except (TypeError, ValueError):
            return "Unexpected error (unserializable)"

    return str(error)
