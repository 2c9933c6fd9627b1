"""Exception taxonomy shared by the executor and the action supervisor."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .shell.executor import ShellResult, ShellResultBinary


class ShtaskError(Exception):
    """Base class for errors raised by shtask itself."""


class ExecutionError(ShtaskError):
    """Raised when talking to the shell subprocess fails at the I/O level."""

    def __init__(self, message: str, *, shell: str | None = None):
        self.shell = shell
        super().__init__(message)


class SpawnError(ExecutionError):
    """Raised when the shell binary cannot be started."""

    def __init__(self, shell: str, reason: str):
        self.reason = reason
        super().__init__(f"failed to spawn shell {shell!r}: {reason}", shell=shell)


class ShellError(ShtaskError):
    """A command exited with a non-zero code.

    Raised explicitly by ``raise_on_failure`` (and therefore ``sh_action``),
    never by the executor. Carries the full result for later formatting.
    """

    def __init__(self, result: "ShellResult | ShellResultBinary"):
        self.result = result
        super().__init__(f"{result.cmd} exited with code {result.code}")


class ActionTimeoutError(ShtaskError, TimeoutError):
    """Raised by ``action`` when the work outlives its timeout."""

    def __init__(self, label: str | None = None, timeout_seconds: float | None = None):
        self.label = label
        self.timeout_seconds = timeout_seconds
        super().__init__("action timed out")


class SkipError(Exception):
    """Raised from inside an action to mark it as skipped."""

    def __init__(self, reason: str | None = None):
        self.reason = reason
        super().__init__(reason or "action is skipped")
