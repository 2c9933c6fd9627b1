from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path

import pytest

from shtask.util.log import Log, LogFormat, LogLevel


@pytest.fixture(autouse=True)
def reset_log() -> Iterator[None]:
    Log.reset()
    yield
    Log.reset()


def test_log_is_silent_by_default(capsys) -> None:  # type: ignore[no-untyped-def]
    Log.create({"service": "test.silent"}).error("nobody hears this")
    assert capsys.readouterr().err == ""


def test_log_writes_console_and_file(tmp_path: Path, capsys) -> None:  # type: ignore[no-untyped-def]
    path = tmp_path / "logs" / "shtask.log"
    Log.configure(level=LogLevel.INFO, format=LogFormat.KV, console=True, file_path=path)

    log = Log.create({"service": "test.log"})
    log.info("hello", {"value": 7})
    log.debug("hidden")
    Log.close()

    stderr = capsys.readouterr().err
    text = path.read_text(encoding="utf-8")

    assert "msg=hello" in stderr
    assert "service=test.log" in stderr
    assert "value=7" in text
    assert "hidden" not in text
    assert Log.file() == str(path)


def test_log_supports_json_format(tmp_path: Path) -> None:
    path = tmp_path / "shtask.log"
    Log.configure(format=LogFormat.JSON, file_path=path)

    log = Log.create({"service": "test.json"})
    log.warn("hello world", {"meta": {"k": "v"}, "error": ValueError("bad")})
    Log.close()

    payload = json.loads(path.read_text(encoding="utf-8").strip())

    assert payload["level"] == "warn"
    assert payload["msg"] == "hello world"
    assert payload["service"] == "test.json"
    assert payload["meta"] == {"k": "v"}
    assert payload["error"] == "bad"


def test_log_configure_from_env(tmp_path: Path, capsys) -> None:  # type: ignore[no-untyped-def]
    Log.configure_from_env({"SHTASK_LOG_LEVEL": "debug", "SHTASK_LOG_FORMAT": "pretty"})
    Log.create({"service": "test.env"}).debug("spawned shell", {"pid": 12})

    err = capsys.readouterr().err
    assert "DEBUG spawned shell (service=test.env pid=12)" in err

    path = tmp_path / "env.log"
    Log.configure_from_env({"SHTASK_LOG_FILE": str(path)})
    assert Log.file() == str(path)


def test_log_level_and_format_parsing() -> None:
    assert LogLevel.parse("warning") is LogLevel.WARN
    assert LogLevel.parse(None) is LogLevel.INFO
    assert LogFormat.parse("JSON") is LogFormat.JSON
    with pytest.raises(ValueError):
        LogLevel.parse("loud")
    with pytest.raises(ValueError):
        LogFormat.parse("xml")


def test_log_create_caches_by_service() -> None:
    first = Log.create({"service": "test.cache"})
    assert Log.create({"service": "test.cache"}) is first
    assert Log.create() is not Log.create()
    assert not hasattr(first, "tag")
    assert not hasattr(first, "clone")
