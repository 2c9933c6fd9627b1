"""Human-friendly rendering of shell results."""

from __future__ import annotations

import io
from typing import Optional, Union

from rich.console import Console
from rich.text import Text

from .core.config import FormatOptions
from .hexdump import hex_dump
from .shell.executor import ShellResult, ShellResultBinary

AnyShellResult = Union[ShellResult, ShellResultBinary]

GREEN = "green"
RED = "red"
BRIGHT_RED = "bright_red"
GRAY = "bright_black"

_VISIBLE_CONTROL_CHARACTERS = str.maketrans({"\n": "␊", "\t": "␉", "\r": "␍"})


def make_control_characters_visible(value: str) -> str:
    """Replace newline, tab and carriage return with their visible symbols."""
    return value.translate(_VISIBLE_CONTROL_CHARACTERS)


def _plural(n: int) -> str:
    return "s" if n > 1 else ""


def _seconds(milliseconds: int) -> str:
    return f"{milliseconds / 1000:.3f}".rstrip("0").rstrip(".")


def _output_to_string(value: Union[str, bytes], max_bytes: Optional[int]) -> str:
    if isinstance(value, str):
        return value
    return hex_dump(value, max_bytes)


def _output_status(value: Union[str, bytes], trimmed: bool, max_bytes: Optional[int]) -> str:
    props: list[str] = []
    if isinstance(value, str):
        lines = value.count("\n") + 1
        props.append("utf-8" + (" (trimmed)" if trimmed else ""))
        props.append(f"{lines} line{_plural(lines)}")
        props.append(f"{len(value)} character{_plural(len(value))}")
    else:
        props.append("binary")
        props.append(f"{len(value)} byte{_plural(len(value))}")
        if max_bytes is not None and len(value) > max_bytes:
            props.append(f"{max_bytes} bytes printed")
    return " | ".join(props)


def render_shell_result(result: AnyShellResult, options: Optional[FormatOptions] = None) -> Text:
    """Build the report for ``result`` as styled rich text."""
    opts = options or FormatOptions()
    max_bytes = opts.byte_limit()
    trimmed = getattr(result, "trimmed", False)
    cmd = "" if opts.omit_cmd else make_control_characters_visible(result.cmd)
    elapsed_suffix = f" [{_seconds(result.elapsed_milliseconds)}s]"

    text = Text()
    out = err = ""
    if result.code == 0:
        if opts.verbose:
            out = _output_to_string(result.stdout, max_bytes)
            err = _output_to_string(result.stderr, max_bytes)
        prefix = opts.success_prefix
        if prefix and cmd:
            prefix += " "
        text.append(f"{prefix}{cmd}", style=GREEN if opts.colors else None)
        text.append(elapsed_suffix)
    else:
        if not opts.suppress_output:
            out = _output_to_string(result.stdout, max_bytes)
            err = _output_to_string(result.stderr, max_bytes)
        prefix = opts.error_prefix
        if prefix and cmd:
            prefix += " "
        text.append(f"{prefix}{cmd}", style=RED if opts.colors else None)
        text.append(elapsed_suffix)
        text.append(f" ({result.code})", style=BRIGHT_RED if opts.colors else None)
    if out or err:
        text.append(":")

    for name, body, raw in (("STDOUT", out, result.stdout), ("STDERR", err, result.stderr)):
        if not body:
            continue
        if opts.annotate:
            text.append("\n")
            text.append(f"[ {name} | {_output_status(raw, trimmed, max_bytes)} ]", style=GRAY if opts.colors else None)
        text.append("\n")
        text.append(body)
    return text


def format_shell_result(result: AnyShellResult, options: Optional[FormatOptions] = None) -> str:
    """Format a shell result as a string, with ANSI colors when enabled."""
    opts = options or FormatOptions()
    text = render_shell_result(result, opts)
    if not opts.colors:
        return text.plain
    console = Console(
        file=io.StringIO(),
        force_terminal=True,
        color_system="standard",
        highlight=False,
        soft_wrap=True,
    )
    with console.capture() as capture:
        console.print(text, end="")
    return capture.get()


def print_shell_result(
    result: AnyShellResult,
    options: Optional[FormatOptions] = None,
    console: Optional[Console] = None,
) -> None:
    """Print a formatted shell result."""
    opts = options or FormatOptions()
    console = console or Console(highlight=False, soft_wrap=True, no_color=not opts.colors)
    console.print(render_shell_result(result, opts))
