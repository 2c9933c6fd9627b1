from __future__ import annotations

import pytest
from pydantic import ValidationError

from shtask.core.config import ActionConfig, FormatOptions, ShellOptions


def test_shell_options_defaults() -> None:
    options = ShellOptions()
    assert options.shell == "/bin/bash"
    assert options.shell_args == ("-c",)
    assert options.trim is True
    assert options.env is None
    assert options.stdin is None
    assert options.stdin_bytes() is None
    assert options.kill_after_seconds == 5.0


def test_shell_options_are_immutable() -> None:
    options = ShellOptions()
    with pytest.raises(ValidationError):
        options.shell = "/bin/sh"  # type: ignore[misc]


def test_shell_options_encode_stdin() -> None:
    assert ShellOptions(stdin="héllo").stdin_bytes() == "héllo".encode("utf-8")
    assert ShellOptions(stdin=b"\x00raw").stdin_bytes() == b"\x00raw"


def test_unknown_fields_are_rejected() -> None:
    with pytest.raises(ValidationError):
        ShellOptions(shel="/bin/sh")  # type: ignore[call-arg]


def test_action_config_defaults() -> None:
    config = ActionConfig()
    assert config.timeout_seconds == 120
    assert config.verbosity == "verbose"
    assert config.verbose is True
    assert config.colors is True
    assert config.format_options.success_prefix == ""
    assert config.format_options.error_prefix == ""


def test_action_config_validation() -> None:
    with pytest.raises(ValidationError):
        ActionConfig(timeout_seconds=0)
    with pytest.raises(ValidationError):
        ActionConfig(verbosity="loud")  # type: ignore[arg-type]
    assert ActionConfig(timeout_seconds=None).timeout_seconds is None


def test_action_config_from_env() -> None:
    config = ActionConfig.from_env(
        {"SHTASK_TIMEOUT_SECONDS": "2.5", "SHTASK_VERBOSITY": "Quiet", "NO_COLOR": "1"}
    )
    assert config.timeout_seconds == 2.5
    assert config.verbosity == "quiet"
    assert config.colors is False
    assert config.format_options.colors is False

    assert ActionConfig.from_env({"SHTASK_TIMEOUT_SECONDS": "none"}).timeout_seconds is None
    assert ActionConfig.from_env({}, timeout_seconds=3).timeout_seconds == 3

    with pytest.raises(ValidationError):
        ActionConfig.from_env({"SHTASK_TIMEOUT_SECONDS": "soon"})


def test_format_options_defaults() -> None:
    options = FormatOptions()
    assert options.byte_limit() == 320
    assert options.success_prefix == "✔"
    assert options.error_prefix == "✘"
    assert FormatOptions(max_bytes="unlimited").byte_limit() is None
