from __future__ import annotations

import pytest

from shtask.errors import SpawnError
from shtask.shell.executor import ShellResult
from shtask.shell.tag import TagFunction, Transform, sh, sh_opt, sh_opt_bin
from shtask.core.config import ShellOptions


def recording_base(events: list[str]) -> TagFunction[str]:
    async def execute(cmd: str) -> str:
        events.append(f"exec:{cmd}")
        return cmd

    return TagFunction(execute)


def layer(events: list[str], name: str, *, fail_post: bool = False) -> Transform:
    def pre(cmd: str) -> str:
        events.append(f"pre{name}")
        return f"{cmd}+{name}"

    def post(value):
        events.append(f"post{name}")
        if fail_post:
            raise RuntimeError(f"post{name} failed")
        return f"{value}|{name}"

    def finalize() -> None:
        events.append(f"fin{name}")

    return Transform(post=post, pre=pre, finalize=finalize)


@pytest.mark.anyio
async def test_chain_runs_stages_in_order() -> None:
    events: list[str] = []
    tag = recording_base(events).map(layer(events, "1")).map(layer(events, "2")).map(layer(events, "3"))

    result = await tag("echo {}", "hi there")

    assert events == [
        "pre3",
        "pre2",
        "pre1",
        "exec:echo 'hi there'+3+2+1",
        "post1",
        "post2",
        "post3",
        "fin1",
        "fin2",
        "fin3",
    ]
    assert result == "echo 'hi there'+3+2+1|1|2|3"


@pytest.mark.anyio
async def test_finalizers_run_once_when_post_raises() -> None:
    events: list[str] = []
    tag = recording_base(events).map(layer(events, "1", fail_post=True)).map(layer(events, "2"))

    with pytest.raises(RuntimeError, match="post1 failed"):
        await tag("true")

    assert events.count("fin1") == 1
    assert events.count("fin2") == 1
    assert "post2" not in events
    assert events[-2:] == ["fin1", "fin2"]


@pytest.mark.anyio
async def test_finalizers_run_when_execution_fails() -> None:
    events: list[str] = []

    async def execute(cmd: str) -> str:
        raise SpawnError("/bin/missing", "No such file or directory")

    tag = TagFunction(execute).map(layer(events, "1"))

    with pytest.raises(SpawnError):
        await tag("true")
    assert events == ["pre1", "fin1"]


@pytest.mark.anyio
async def test_finalizers_run_when_template_does_not_compile() -> None:
    events: list[str] = []
    tag = recording_base(events).map(layer(events, "1")).map(layer(events, "2"))

    with pytest.raises(IndexError):
        await tag("echo {} {}", "only-one")
    assert events == ["fin1", "fin2"]


@pytest.mark.anyio
async def test_failing_finalizer_does_not_skip_the_others() -> None:
    events: list[str] = []

    def broken() -> None:
        events.append("broken")
        raise ValueError("cleanup failed")

    tag = (
        recording_base(events)
        .map(Transform(post=lambda v: v, finalize=broken))
        .map(layer(events, "2"))
    )

    with pytest.raises(ValueError, match="cleanup failed"):
        await tag("true")
    assert events[-2:] == ["broken", "fin2"]


@pytest.mark.anyio
async def test_map_does_not_mutate_receiver() -> None:
    events: list[str] = []
    base = recording_base(events)
    first = base.map(layer(events, "A"))
    second = base.map(layer(events, "B"))

    assert base.finalizers == ()
    assert len(first.finalizers) == 1
    assert len(second.finalizers) == 1
    assert first.finalizers[0] is not second.finalizers[0]

    events.clear()
    await second("true")
    assert "preA" not in events
    assert "finA" not in events

    events.clear()
    assert await base("true") == "true"
    assert events == ["exec:true"]


@pytest.mark.anyio
async def test_bare_callable_is_used_as_post_and_may_change_type() -> None:
    events: list[str] = []
    lengths = recording_base(events).map(len)
    assert await lengths("abc") == 3


@pytest.mark.anyio
async def test_async_stages_are_awaited() -> None:
    events: list[str] = []

    async def pre(cmd: str) -> str:
        return cmd.upper()

    async def post(value: str) -> str:
        return value + "!"

    async def finalize() -> None:
        events.append("async-fin")

    tag = recording_base(events).map(Transform(post=post, pre=pre, finalize=finalize))
    assert await tag("echo") == "ECHO!"
    assert events[-1] == "async-fin"


@pytest.mark.anyio
async def test_run_skips_template_compilation() -> None:
    events: list[str] = []
    tag = recording_base(events)
    assert await tag.run("echo {} 'raw'") == "echo {} 'raw'"


@pytest.mark.anyio
async def test_sh_executes_compiled_template() -> None:
    result = await sh("printf '%s|' {}", ["a b", "c"])
    assert isinstance(result, ShellResult)
    assert result.stdout == "a b|c|"
    assert result.cmd == "printf '%s|' 'a b' c"


@pytest.mark.anyio
async def test_sh_map_to_stdout() -> None:
    sh_out = sh.map(lambda r: r.stdout)
    assert await sh_out("echo {}", "$HOME") == "$HOME"


@pytest.mark.anyio
async def test_sh_opt_modes() -> None:
    untrimmed = sh_opt(ShellOptions(trim=False))
    assert (await untrimmed("echo hi")).stdout == "hi\n"

    binary = sh_opt_bin()
    assert (await binary("echo hi")).stdout == b"hi\n"

    with pytest.raises(ValueError):
        sh_opt(None, "hex")  # type: ignore[arg-type]
