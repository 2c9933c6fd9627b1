"""Command template compiler.

Python has no tagged template literals, so a command template is one of:

* a ``str.format``-style string whose ``{}``, ``{0}`` or ``{name}`` fields
  are filled from call arguments (``{{`` and ``}}`` are literal braces,
  so ``${HOME}`` is written ``${{HOME}}``);
* a t-string (``string.templatelib.Template``) whose interpolations are
  the arguments;
* a ``Template`` holding literal fragments and their values explicitly.

Every interpolated value is quoted with ``quote_string``. A list or tuple
expands to its quoted elements joined by single spaces.
"""

from __future__ import annotations

import string
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence, Union

from .quote import ScalarArgument, quote_argument

Argument = Union[ScalarArgument, Sequence[ScalarArgument]]

_formatter = string.Formatter()


@dataclass(frozen=True)
class Template:
    """Literal fragments with one gap between each pair of them."""

    pieces: tuple[str, ...]
    values: tuple[Any, ...] = field(default=())

    def __post_init__(self) -> None:
        if len(self.pieces) != len(self.values) + 1:
            raise ValueError(
                f"template has {len(self.pieces)} fragments but {len(self.values)} values; "
                "expected exactly one value per gap"
            )

    @classmethod
    def parse(cls, text: str, args: Sequence[Any] = (), kwargs: Mapping[str, Any] | None = None) -> "Template":
        """Split a format-style string into fragments and resolve its fields."""
        kwargs = kwargs or {}
        pieces: list[str] = []
        values: list[Any] = []
        literal = ""
        auto_index = 0
        numbering: str | None = None
        used_positional: set[int] = set()
        used_keywords: set[str] = set()

        for literal_text, field_name, format_spec, conversion in _formatter.parse(text):
            literal += literal_text
            if field_name is None:
                continue
            if format_spec or conversion:
                raise ValueError(f"format specs and conversions are not supported: {{{field_name}}}")
            if field_name == "":
                if numbering == "manual":
                    raise ValueError("cannot switch from manual field specification to automatic field numbering")
                numbering = "auto"
                index = auto_index
                auto_index += 1
                value = _positional(args, index)
                used_positional.add(index)
            elif field_name.isdigit():
                if numbering == "auto":
                    raise ValueError("cannot switch from automatic field numbering to manual field specification")
                numbering = "manual"
                index = int(field_name)
                value = _positional(args, index)
                used_positional.add(index)
            elif field_name.isidentifier():
                if field_name not in kwargs:
                    raise KeyError(field_name)
                value = kwargs[field_name]
                used_keywords.add(field_name)
            else:
                raise ValueError(f"unsupported template field: {{{field_name}}}")
            pieces.append(literal)
            values.append(value)
            literal = ""

        pieces.append(literal)

        unused = len(args) - len(used_positional)
        if unused > 0:
            raise ValueError(f"{unused} positional argument(s) not used by the template")
        extra = set(kwargs) - used_keywords
        if extra:
            raise ValueError(f"keyword argument(s) not used by the template: {', '.join(sorted(extra))}")
        return cls(tuple(pieces), tuple(values))

    @classmethod
    def coerce(cls, template: Any, args: Sequence[Any] = (), kwargs: Mapping[str, Any] | None = None) -> "Template":
        """Build a Template from any supported template form."""
        if isinstance(template, Template):
            _reject_arguments(args, kwargs)
            return template
        if isinstance(template, str):
            return cls.parse(template, args, kwargs)
        strings = getattr(template, "strings", None)
        interpolations = getattr(template, "interpolations", None)
        if strings is not None and interpolations is not None:
            _reject_arguments(args, kwargs)
            return cls(tuple(strings), tuple(i.value for i in interpolations))
        raise TypeError(f"unsupported command template type: {type(template).__name__}")

    def compile(self) -> str:
        return compile_command(self.pieces, self.values)


def _positional(args: Sequence[Any], index: int) -> Any:
    if index >= len(args):
        raise IndexError(f"template field {index} has no matching argument")
    return args[index]


def _reject_arguments(args: Sequence[Any], kwargs: Mapping[str, Any] | None) -> None:
    if args or kwargs:
        raise TypeError("arguments are only accepted together with a format string template")


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def compile_command(pieces: Sequence[str], values: Sequence[Argument]) -> str:
    """Interleave literal fragments with quoted values.

    An empty sequence contributes nothing and swallows one neighbouring
    space (from the next fragment first, else from what was built so far),
    so ``"a {} b"`` with ``[]`` compiles to ``"a b"``.
    """
    if len(pieces) != len(values) + 1:
        raise ValueError(
            f"template has {len(pieces)} fragments but {len(values)} values; "
            "expected exactly one value per gap"
        )
    result = pieces[0]
    for value, following in zip(values, pieces[1:]):
        if _is_sequence(value):
            if value:
                result += " ".join(quote_argument(v) for v in value)
            elif following.startswith(" "):
                following = following[1:]
            elif result.endswith(" "):
                result = result[:-1]
        else:
            result += quote_argument(value)
        result += following
    return result


def quote(template: Any, *args: Argument, **kwargs: Argument) -> str:
    """Compile a command template into a shell-safe command line.

    >>> quote("ls -l {} {}", "$foo", 31337)
    "ls -l '$foo' 31337"
    >>> quote("command {}", [5, True, "-v", "this is a sentence"])
    "command 5 true -v 'this is a sentence'"
    """
    return Template.coerce(template, args, kwargs).compile()
