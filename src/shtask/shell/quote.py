"""Shell quoting of single arguments."""

import os
import re
from typing import Union

ScalarArgument = Union[str, int, float, bool, "os.PathLike[str]"]

SAFE_SHELL_CHARS = re.compile(r"[A-Za-z0-9,:=_./-]+")
SINGLE_QUOTE_RUN = re.compile(r"'+")


def quote_string(s: str) -> str:
    """Quote a string so that it's safe to use as a shell command argument.

    Tokens made only of letters, digits and ``,:=_./-`` are returned as is.
    Everything else is wrapped in single quotes; runs of single quotes are
    moved into double-quoted spans since they cannot be escaped inside a
    single-quoted one.

    >>> quote_string("a b")
    "'a b'"
    >>> quote_string("'single'")
    '"\\'"\\'single\\'"\\'"'
    """
    if s == "":
        return "''"
    if SAFE_SHELL_CHARS.fullmatch(s):
        return s
    s = "'" + SINGLE_QUOTE_RUN.sub(lambda m: "'\"" + m.group(0) + "\"'", s) + "'"
    if s.startswith("''"):
        s = s[2:]
    if s.endswith("''"):
        s = s[:-2]
    return s


def coerce_argument(value: ScalarArgument) -> str:
    """Convert a scalar argument to the text of one shell word.

    Integral floats below 1e21 are written without a fractional part, so
    ``1.0`` becomes ``1`` and ``1e20`` its full digit string.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, os.PathLike):
        return os.fspath(value)
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return str(value)


def quote_argument(value: ScalarArgument) -> str:
    return quote_string(coerce_argument(value))
