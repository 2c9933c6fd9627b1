"""Shell command quoting and execution.

Example:
    from shtask.shell import sh, quote

    # Quote arguments into a command line
    quote("ls -l {}", "$foo")  # "ls -l '$foo'"

    # Execute a command
    result = await sh("ls -l {}", path)
    if result.success:
        print(result.stdout)

    # Derive an executor that returns stdout only
    sh_out = sh.map(lambda r: r.stdout)
"""

from .executor import ShellResult, ShellResultBinary, decode_result, execute, execute_binary
from .process import ProcessOutput, ProcessRunner, SubprocessRunner
from .quote import coerce_argument, quote_string
from .tag import TagFunction, Transform, sh, sh_opt, sh_opt_bin
from .template import Template, compile_command, quote

__all__ = [
    "ProcessOutput",
    "ProcessRunner",
    "ShellResult",
    "ShellResultBinary",
    "SubprocessRunner",
    "TagFunction",
    "Template",
    "Transform",
    "coerce_argument",
    "compile_command",
    "decode_result",
    "execute",
    "execute_binary",
    "quote",
    "quote_string",
    "sh",
    "sh_opt",
    "sh_opt_bin",
]
