"""CLI entry point for shtask.

``shtask quote`` prints shell-safe words, ``shtask run`` compiles a
command template and runs it as a supervised action.
"""

import asyncio
from typing import List, Optional

import typer
from rich.console import Console

from .. import __version__
from ..core.config import ActionConfig, ShellOptions
from ..errors import ActionTimeoutError, ExecutionError, ShellError
from ..shell.quote import quote_string
from ..shell.tag import sh_opt
from ..shell.template import Template
from ..spinner import wrap_with_spinner_printer
from ..supervisor import action, raise_on_failure
from ..util.error import format_error
from ..util.log import Log

app = typer.Typer(
    name="shtask",
    help="Quote and run shell commands as supervised actions",
    no_args_is_help=True,
    add_completion=False,
)

console = Console(highlight=False, soft_wrap=True)
err_console = Console(stderr=True, highlight=False, soft_wrap=True)

TIMEOUT_EXIT_CODE = 124


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        console.print(f"shtask {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """Quote and run shell commands as supervised actions."""
    Log.configure_from_env()


@app.command()
def quote(
    words: List[str] = typer.Argument(..., help="Words to quote"),
):
    """Print WORDS quoted for the shell, separated by spaces."""
    typer.echo(" ".join(quote_string(word) for word in words))


@app.command()
def run(
    template: str = typer.Argument(..., help="Command template; {} fields are filled with ARGS"),
    args: Optional[List[str]] = typer.Argument(None, help="Values for the template fields"),
    label: Optional[str] = typer.Option(None, "--label", "-l", help="Action label (defaults to the command)"),
    timeout: Optional[float] = typer.Option(None, "--timeout", "-t", help="Timeout in seconds"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress progress output"),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colors"),
    spinner: bool = typer.Option(False, "--spinner", help="Show a spinner instead of action progress"),
    shell: Optional[str] = typer.Option(None, "--shell", help="Shell binary (default /bin/bash)"),
):
    """Compile TEMPLATE with ARGS and run it as an action."""
    try:
        cmd = Template.parse(template, args or []).compile()
    except (IndexError, KeyError, ValueError) as e:
        err_console.print(f"Invalid template: {e}")
        raise typer.Exit(2)

    overrides: dict = {}
    if timeout is not None:
        overrides["timeout_seconds"] = timeout
    if quiet or spinner:
        overrides["verbosity"] = "quiet"
    if no_color:
        overrides["colors"] = False
    config = ActionConfig.from_env(**overrides)

    options = ShellOptions(shell=shell) if shell else ShellOptions()
    tag = sh_opt(options).map(raise_on_failure)
    if spinner:
        tag = wrap_with_spinner_printer(
            tag,
            config.format_options.model_copy(update={"colors": config.colors}),
            console=console,
        )

    try:
        asyncio.run(action(label or cmd, lambda: tag.run(cmd), config, console=console))
    except ShellError as e:
        raise typer.Exit(e.result.code)
    except ActionTimeoutError as e:
        if quiet:
            err_console.print(format_error(e))
        raise typer.Exit(TIMEOUT_EXIT_CODE)
    except ExecutionError as e:
        err_console.print(format_error(e) or str(e))
        raise typer.Exit(1)
