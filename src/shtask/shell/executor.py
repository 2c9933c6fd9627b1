"""Executor: runs a compiled command line and packages the result."""

from __future__ import annotations

import os
import time
from dataclasses import dataclass
from typing import Optional

from ..core.config import ShellOptions
from ..util.log import Log
from .process import ProcessRunner, SubprocessRunner

log = Log.create({"service": "shell.executor"})


@dataclass(frozen=True)
class ShellResultBinary:
    """Result of a shell command execution (raw binary form)."""

    code: int
    stdout: bytes
    stderr: bytes
    cmd: str
    elapsed_seconds: float

    @property
    def success(self) -> bool:
        return self.code == 0

    @property
    def elapsed_milliseconds(self) -> int:
        return int(self.elapsed_seconds * 1000)


@dataclass(frozen=True)
class ShellResult:
    """Result of a shell command execution with decoded output."""

    code: int
    stdout: str
    stderr: str
    cmd: str
    elapsed_seconds: float
    trimmed: bool = False

    @property
    def success(self) -> bool:
        return self.code == 0

    @property
    def elapsed_milliseconds(self) -> int:
        return int(self.elapsed_seconds * 1000)


def default_runner(options: ShellOptions) -> ProcessRunner:
    return SubprocessRunner(kill_after_seconds=options.kill_after_seconds)


async def execute_binary(
    cmd: str,
    options: Optional[ShellOptions] = None,
    runner: Optional[ProcessRunner] = None,
) -> ShellResultBinary:
    """Run ``cmd`` through the configured shell and capture raw output.

    A non-zero exit code is reported in the result, not raised. Failure to
    start the shell raises ``SpawnError``.
    """
    options = options or ShellOptions()
    runner = runner or default_runner(options)
    env = dict(os.environ) if options.env is None else options.env

    log.debug("executing command", {"shell": options.shell, "cmd": cmd})
    t0 = time.monotonic()
    output = await runner.run(cmd, options.shell, options.shell_args, env, options.stdin_bytes())
    elapsed = time.monotonic() - t0
    log.debug("command finished", {"cmd": cmd, "code": output.exit_code, "elapsed": round(elapsed, 3)})

    return ShellResultBinary(
        code=output.exit_code,
        stdout=output.stdout,
        stderr=output.stderr,
        cmd=cmd,
        elapsed_seconds=elapsed,
    )


def decode_result(result: ShellResultBinary, trim: bool = True) -> ShellResult:
    """Decode a binary result as UTF-8, optionally stripping surrounding whitespace."""
    stdout = result.stdout.decode("utf-8", errors="replace")
    stderr = result.stderr.decode("utf-8", errors="replace")
    if trim:
        stdout = stdout.strip()
        stderr = stderr.strip()
    return ShellResult(
        code=result.code,
        stdout=stdout,
        stderr=stderr,
        cmd=result.cmd,
        elapsed_seconds=result.elapsed_seconds,
        trimmed=trim,
    )


async def execute(
    cmd: str,
    options: Optional[ShellOptions] = None,
    runner: Optional[ProcessRunner] = None,
) -> ShellResult:
    """Text variant of ``execute_binary``."""
    options = options or ShellOptions()
    result = await execute_binary(cmd, options, runner)
    return decode_result(result, options.trim)
