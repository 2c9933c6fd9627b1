"""shtask - safe shell command templates, composable executors and supervised actions.

Example:
    from shtask import action, sh, sh_action

    result = await sh("git log -n {} --format={}", 5, "%h %s")
    await action("Run tests", lambda: sh_action("pytest {}", ["-q", "tests"]))
"""

__version__ = "0.1.0"

_SHELL = (
    "ProcessRunner",
    "ShellResult",
    "ShellResultBinary",
    "SubprocessRunner",
    "TagFunction",
    "Template",
    "Transform",
    "compile_command",
    "execute",
    "execute_binary",
    "quote",
    "quote_string",
    "sh",
    "sh_opt",
    "sh_opt_bin",
)
_ACTION = (
    "Failed",
    "Outcome",
    "Skipped",
    "Succeeded",
    "TimedOut",
    "action",
    "raise_on_failure",
    "run_action",
    "sh_action",
)
_ERRORS = (
    "ActionTimeoutError",
    "ExecutionError",
    "ShellError",
    "ShtaskError",
    "SkipError",
    "SpawnError",
)
_FORMAT = (
    "format_shell_result",
    "make_control_characters_visible",
    "print_shell_result",
    "render_shell_result",
)


# Lazy imports keep `import shtask` cheap for callers that only quote.
def __getattr__(name: str):
    """Lazy import module components."""
    if name in _SHELL:
        from . import shell
        return getattr(shell, name)
    if name in _ACTION:
        from . import supervisor
        return getattr(supervisor, name)
    if name in _ERRORS:
        from . import errors
        return getattr(errors, name)
    if name in _FORMAT:
        from . import format
        return getattr(format, name)
    if name in ("ActionConfig", "FormatOptions", "ShellOptions"):
        from . import core
        return getattr(core, name)
    if name == "hex_dump":
        from .hexdump import hex_dump
        return hex_dump
    if name == "wrap_with_spinner_printer":
        from .spinner import wrap_with_spinner_printer
        return wrap_with_spinner_printer
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "__version__",
    *_SHELL,
    *_ACTION,
    *_ERRORS,
    *_FORMAT,
    "ActionConfig",
    "FormatOptions",
    "ShellOptions",
    "hex_dump",
    "wrap_with_spinner_printer",
]
