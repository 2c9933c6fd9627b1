"""Spinner printer for shell tag functions.

Shows ``⇒ <cmd>`` with a spinner while the command runs, then the
formatted result on the same line. The printer keeps one display state,
so it is not concurrency aware: running several wrapped commands at once
garbles the terminal.
"""

from __future__ import annotations

import time
from typing import Optional, TypeVar

from rich.console import Console
from rich.status import Status
from rich.text import Text

from .core.config import FormatOptions
from .format import make_control_characters_visible, render_shell_result
from .shell.executor import ShellResult, ShellResultBinary
from .shell.tag import TagFunction, Transform

R = TypeVar("R", ShellResult, ShellResultBinary)


class SpinnerPrinter:
    """Display state shared by every call of one wrapped tag function."""

    def __init__(self, options: Optional[FormatOptions] = None, console: Optional[Console] = None):
        self.options = options or FormatOptions()
        self.console = console or Console(highlight=False, soft_wrap=True, no_color=not self.options.colors)
        self._status: Optional[Status] = None
        self._cmd = ""
        self._t0 = 0.0

    def _style(self, style: str) -> Optional[str]:
        return style if self.options.colors else None

    def _prompt(self) -> Text:
        text = Text("⇒ ", style=self._style("bold bright_white"))
        text.append(make_control_characters_visible(self._cmd))
        return text

    @property
    def spinning(self) -> bool:
        return self._status is not None

    def start(self, cmd: str) -> str:
        self.stop()
        self._cmd = cmd
        self._t0 = time.monotonic()
        self._status = Status(self._prompt(), console=self.console, spinner="line")
        self._status.start()
        return cmd

    def stop(self) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None

    def report(self, result: R) -> R:
        self.stop()
        line = self._prompt()
        line.append(" ")
        line.append(render_shell_result(result, self.options.model_copy(update={"omit_cmd": True})))
        self.console.print(line)
        return result

    def finalize(self) -> None:
        if not self.spinning:
            return
        self.stop()
        elapsed = time.monotonic() - self._t0
        line = self._prompt()
        line.append(" ")
        line.append("✘", style=self._style("red"))
        line.append(f" [{elapsed:.3f}s] ")
        line.append("(EXCEPTION)", style=self._style("bright_red"))
        self.console.print(line)


def wrap_with_spinner_printer(
    tag: TagFunction[R],
    options: Optional[FormatOptions] = None,
    console: Optional[Console] = None,
) -> TagFunction[R]:
    """Wrap ``tag`` so each call shows a spinner and prints its result."""
    printer = SpinnerPrinter(options, console)
    return tag.map(Transform(pre=printer.start, post=printer.report, finalize=printer.finalize))
