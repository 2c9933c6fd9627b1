"""Subprocess plumbing behind the executor.

``ProcessRunner`` is the seam between command execution and the operating
system; ``SubprocessRunner`` implements it with asyncio subprocesses.
"""

import asyncio
import os
import signal
from dataclasses import dataclass
from typing import Mapping, Optional, Protocol, Sequence

from ..errors import ExecutionError, SpawnError
from ..util.log import Log

log = Log.create({"service": "shell.process"})


@dataclass(frozen=True)
class ProcessOutput:
    """Raw outcome of one shell process."""

    exit_code: int
    stdout: bytes
    stderr: bytes


class ProcessRunner(Protocol):
    """Runs one command line through a shell and captures its output."""

    async def run(
        self,
        command_line: str,
        shell: str,
        shell_args: Sequence[str],
        env: Mapping[str, str],
        stdin: Optional[bytes],
    ) -> ProcessOutput: ...


class SubprocessRunner:
    """asyncio-backed runner.

    Each shell runs in its own session. When the awaiting task is cancelled
    its process group receives SIGTERM. If the shell is still alive
    ``kill_after_seconds`` later the group receives SIGKILL. With
    ``kill_after_seconds=None`` termination is only requested.
    """

    def __init__(self, kill_after_seconds: Optional[float] = 5.0):
        self.kill_after_seconds = kill_after_seconds

    async def run(
        self,
        command_line: str,
        shell: str,
        shell_args: Sequence[str],
        env: Mapping[str, str],
        stdin: Optional[bytes],
    ) -> ProcessOutput:
        try:
            proc = await asyncio.create_subprocess_exec(
                shell, *shell_args, command_line,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=dict(env),
                start_new_session=True,
            )
        except OSError as e:
            log.error("failed to spawn shell", {"shell": shell, "error": e})
            raise SpawnError(shell, e.strerror or str(e)) from e

        log.debug("spawned shell", {"shell": shell, "pid": proc.pid})
        try:
            # communicate(None) leaves the pipe open before 3.12; an empty
            # payload still goes through the write-then-close path.
            stdout, stderr = await proc.communicate(stdin if stdin is not None else b"")
        except asyncio.CancelledError:
            await self._terminate(proc)
            raise
        except OSError as e:
            log.error("shell i/o failed", {"shell": shell, "pid": proc.pid, "error": e})
            await self._terminate(proc)
            raise ExecutionError(f"i/o with shell {shell!r} failed: {e}", shell=shell) from e

        return ProcessOutput(exit_code=proc.returncode, stdout=stdout, stderr=stderr)

    async def _terminate(self, proc: asyncio.subprocess.Process) -> None:
        if proc.returncode is not None:
            return
        log.info("terminating shell", {"pid": proc.pid})
        try:
            os.killpg(proc.pid, signal.SIGTERM)
        except ProcessLookupError:
            return
        if self.kill_after_seconds is None:
            return
        try:
            await asyncio.wait_for(proc.wait(), timeout=self.kill_after_seconds)
        except asyncio.TimeoutError:
            log.warn("shell ignored SIGTERM, killing", {"pid": proc.pid})
            try:
                os.killpg(proc.pid, signal.SIGKILL)
            except ProcessLookupError:
                return
            await proc.wait()
