"""Composable shell tag functions.

A ``TagFunction`` compiles a command template, runs it and returns a
result. ``map`` derives a new tag function that adds a stage around the
existing ones::

    sh_out = sh.map(lambda result: result.stdout)
    print(await sh_out("ls -l {}", path))

Stages attached with ``map`` run in this order for a chain built as
``base.map(a).map(b)``: ``b.pre``, ``a.pre``, execution, ``a.post``,
``b.post``, then ``a.finalize`` and ``b.finalize``. Finalizers always run,
once each, even when compiling the template, a stage or the execution
raises.
"""

from __future__ import annotations

import inspect
from contextlib import AsyncExitStack
from dataclasses import dataclass
from typing import (
    Any,
    Awaitable,
    Callable,
    Generic,
    Literal,
    Optional,
    Tuple,
    TypeVar,
    Union,
    overload,
)

from ..core.config import ShellOptions
from .executor import ShellResult, ShellResultBinary, decode_result, execute_binary
from .process import ProcessRunner
from .template import Template

T = TypeVar("T")
U = TypeVar("U")

Finalizer = Callable[[], Any]
Execute = Callable[[str], Awaitable[T]]


@dataclass(frozen=True)
class Transform(Generic[T, U]):
    """One layer of a tag function chain.

    ``pre`` rewrites the compiled command, ``post`` maps the result (and may
    change its type), ``finalize`` is a zero-argument cleanup hook. Any of
    them may return an awaitable.
    """

    post: Callable[[T], Union[U, Awaitable[U]]]
    pre: Optional[Callable[[str], Union[str, Awaitable[str]]]] = None
    finalize: Optional[Finalizer] = None


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


async def _finalize(fn: Finalizer) -> None:
    await _resolve(fn())


class TagFunction(Generic[T]):
    """An immutable chain node: the execute coroutine plus accumulated finalizers."""

    __slots__ = ("_execute", "_finalizers")

    def __init__(self, execute: Execute[T], finalizers: Tuple[Finalizer, ...] = ()):
        self._execute = execute
        self._finalizers = tuple(finalizers)

    @property
    def finalizers(self) -> Tuple[Finalizer, ...]:
        return self._finalizers

    async def __call__(self, template: Any, *args: Any, **kwargs: Any) -> T:
        return await self._invoke(lambda: Template.coerce(template, args, kwargs).compile())

    async def run(self, cmd: str) -> T:
        """Run an already compiled command line through the chain."""
        return await self._invoke(lambda: cmd)

    async def _invoke(self, compile_cmd: Callable[[], str]) -> T:
        async with AsyncExitStack() as stack:
            # The stack unwinds last-in first-out; push in reverse so
            # finalizers run in attach order.
            for fn in reversed(self._finalizers):
                stack.push_async_callback(_finalize, fn)
            return await self._execute(compile_cmd())

    def map(self, transform: Union[Transform[T, U], Callable[[T], Any]]) -> "TagFunction[U]":
        """Return a new tag function with ``transform`` wrapped around this one."""
        if not isinstance(transform, Transform):
            transform = Transform(post=transform)
        inner = self._execute

        async def execute(cmd: str) -> U:
            if transform.pre is not None:
                cmd = await _resolve(transform.pre(cmd))
            result = await inner(cmd)
            return await _resolve(transform.post(result))

        finalizers = self._finalizers
        if transform.finalize is not None:
            finalizers = finalizers + (transform.finalize,)
        return TagFunction(execute, finalizers)


@overload
def sh_opt(
    options: Optional[ShellOptions] = ...,
    mode: Literal["text"] = ...,
    runner: Optional[ProcessRunner] = ...,
) -> TagFunction[ShellResult]: ...


@overload
def sh_opt(
    options: Optional[ShellOptions],
    mode: Literal["binary"],
    runner: Optional[ProcessRunner] = ...,
) -> TagFunction[ShellResultBinary]: ...


def sh_opt(
    options: Optional[ShellOptions] = None,
    mode: Literal["text", "binary"] = "text",
    runner: Optional[ProcessRunner] = None,
) -> TagFunction[Any]:
    """Create a shell executing tag function.

    ``mode="binary"`` keeps stdout/stderr as bytes; the default decodes
    them as UTF-8 and trims them unless ``options.trim`` is false.
    """
    options = options or ShellOptions()
    if mode not in ("text", "binary"):
        raise ValueError(f"invalid mode: {mode!r}")

    async def run_binary(cmd: str) -> ShellResultBinary:
        return await execute_binary(cmd, options, runner)

    if mode == "binary":
        return TagFunction(run_binary)

    async def run_text(cmd: str) -> ShellResult:
        return decode_result(await run_binary(cmd), options.trim)

    return TagFunction(run_text)


def sh_opt_bin(
    options: Optional[ShellOptions] = None,
    runner: Optional[ProcessRunner] = None,
) -> TagFunction[ShellResultBinary]:
    return sh_opt(options, "binary", runner)


sh: TagFunction[ShellResult] = sh_opt()
"""Default shell tag function: ``/bin/bash -c``, inherited env, trimmed text output.

``await sh("config set name {}", "John Smith")`` runs
``config set name 'John Smith'``.
"""
