"""Supervised actions: labelled, timeout-bounded steps with progress reporting.

``action`` groups long-running work into meaningful steps::

    await action("Build image", lambda: sh_action("docker build -t {} .", tag))

* Raising marks the action as failed, logs the error and re-raises it.
  ``sh_action`` raises ``ShellError`` on non-zero exit codes so a failed
  command prints its formatted result.
* Raising ``SkipError`` marks the action as skipped; nothing is re-raised.
* Work that outlives ``ActionConfig.timeout_seconds`` is cancelled and
  ``ActionTimeoutError`` is raised.

Cancellation is best effort. On timeout the work's task is cancelled,
which makes a pending shell call terminate its subprocess, and the
supervisor waits up to ``cancel_grace_seconds`` for the task to settle.
Work that suppresses ``CancelledError`` keeps running in the background
after the timeout has been reported.

Progress output is written to a shared console and is not coordinated
between concurrent actions; run them one at a time for readable output.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar, Union

from rich.console import Console
from rich.text import Text

from .core.config import ActionConfig
from .errors import ActionTimeoutError, ShellError, SkipError
from .format import render_shell_result
from .shell.executor import ShellResult, ShellResultBinary
from .shell.tag import TagFunction, sh
from .util.error import format_unknown_error
from .util.log import Log

log = Log.create({"service": "action"})

T = TypeVar("T")
R = TypeVar("R", ShellResult, ShellResultBinary)

Work = Callable[[], Awaitable[T]]


@dataclass(frozen=True)
class Succeeded(Generic[T]):
    value: T


@dataclass(frozen=True)
class Skipped:
    reason: Optional[str] = None


@dataclass(frozen=True)
class TimedOut:
    timeout_seconds: Optional[float] = None


@dataclass(frozen=True)
class Failed:
    error: BaseException


Outcome = Union[Succeeded[T], Skipped, TimedOut, Failed]


def raise_on_failure(result: R) -> R:
    """Pass successful results through, raise ``ShellError`` otherwise."""
    if result.code != 0:
        raise ShellError(result)
    return result


sh_action: TagFunction[ShellResult] = sh.map(raise_on_failure)
"""Shell tag function that raises ``ShellError`` on non-zero exit codes."""


class _Progress:
    """Writes ``label... STATUS [elapsed]`` lines when verbose."""

    def __init__(self, label: str, config: ActionConfig, console: Optional[Console]):
        self.label = label
        self.config = config
        self.console = console or Console(highlight=False, soft_wrap=True)
        self.t0 = time.monotonic()

    def start(self) -> None:
        if self.config.verbose:
            self.console.print(Text(f"{self.label}... "), end="")

    def finish(self, tag: str, style: str) -> None:
        if not self.config.verbose:
            return
        elapsed = time.monotonic() - self.t0
        line = Text()
        line.append(tag, style=style if self.config.colors else None)
        line.append(f" [{elapsed:.1f}s]")
        self.console.print(line)

    def detail(self, text: Text) -> None:
        if self.config.verbose:
            self.console.print(text)

    def elapsed(self) -> float:
        return round(time.monotonic() - self.t0, 3)


def _consume_result(task: "asyncio.Future[Any]") -> None:
    if not task.cancelled():
        task.exception()


async def _race(work: Work[T], timeout: Optional[float], grace: float) -> Outcome[T]:
    task = asyncio.ensure_future(work())
    try:
        done, _ = await asyncio.wait({task}, timeout=timeout)
    except asyncio.CancelledError:
        task.cancel()
        raise

    if task not in done:
        task.cancel()
        task.add_done_callback(_consume_result)
        await asyncio.wait({task}, timeout=grace)
        return TimedOut(timeout)

    if task.cancelled():
        raise asyncio.CancelledError()
    error = task.exception()
    if error is None:
        return Succeeded(task.result())
    if isinstance(error, SkipError):
        return Skipped(error.reason)
    if not isinstance(error, Exception):
        raise error
    return Failed(error)


async def run_action(
    label: str,
    work: Work[T],
    config: Optional[ActionConfig] = None,
    console: Optional[Console] = None,
) -> Outcome[T]:
    """Run ``work`` as a supervised action and return its outcome.

    Work failures are reported in the returned outcome, never raised.
    Cancellation of the caller cancels the work and propagates.
    """
    config = config or ActionConfig()
    progress = _Progress(label, config, console)
    progress.start()
    log.info("action started", {"label": label, "timeout": config.timeout_seconds})

    outcome = await _race(work, config.timeout_seconds, config.cancel_grace_seconds)

    if isinstance(outcome, Succeeded):
        progress.finish("OK", "green")
        log.info("action succeeded", {"label": label, "elapsed": progress.elapsed()})
    elif isinstance(outcome, Skipped):
        progress.finish("SKIPPED", "yellow")
        log.info("action skipped", {"label": label, "reason": outcome.reason, "elapsed": progress.elapsed()})
    elif isinstance(outcome, TimedOut):
        progress.finish("TIMEOUT", "red")
        log.warn("action timed out", {"label": label, "elapsed": progress.elapsed()})
    else:
        progress.finish("ERROR", "red")
        log.error("action failed", {"label": label, "error": outcome.error, "elapsed": progress.elapsed()})
        if isinstance(outcome.error, ShellError):
            options = config.format_options.model_copy(
                update={"colors": config.colors and config.format_options.colors}
            )
            progress.detail(render_shell_result(outcome.error.result, options))
        else:
            log.debug("action failure details", {"label": label, "trace": format_unknown_error(outcome.error)})
    return outcome


async def action(
    label: str,
    work: Work[T],
    config: Optional[ActionConfig] = None,
    console: Optional[Console] = None,
) -> Optional[T]:
    """Run ``work`` as a supervised action.

    Returns the work's value, or None when it was skipped. Raises
    ``ActionTimeoutError`` on timeout and re-raises any other failure
    unchanged.
    """
    config = config or ActionConfig()
    outcome = await run_action(label, work, config, console)
    if isinstance(outcome, Succeeded):
        return outcome.value
    if isinstance(outcome, Skipped):
        return None
    if isinstance(outcome, TimedOut):
        raise ActionTimeoutError(label, outcome.timeout_seconds)
    raise outcome.error
