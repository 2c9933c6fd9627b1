"""Configuration models — explicit, immutable option values passed to each call."""

from __future__ import annotations

import os
from typing import Dict, Literal, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, NonNegativeFloat, PositiveFloat, field_validator


class ShellOptions(BaseModel):
    """Shell executor configuration.

    ``env=None`` inherits the process environment at call time.
    ``kill_after_seconds`` is the grace period between SIGTERM and SIGKILL
    when the awaiting task is cancelled; ``None`` never escalates to SIGKILL.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    shell: str = "/bin/bash"
    shell_args: Tuple[str, ...] = ("-c",)
    trim: bool = True
    env: Optional[Dict[str, str]] = None
    stdin: Optional[Union[str, bytes]] = None
    kill_after_seconds: Optional[NonNegativeFloat] = 5.0

    def stdin_bytes(self) -> bytes | None:
        if self.stdin is None:
            return None
        if isinstance(self.stdin, str):
            return self.stdin.encode("utf-8")
        return self.stdin


class FormatOptions(BaseModel):
    """Options for rendering a shell result."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    verbose: bool = False
    suppress_output: bool = False
    max_bytes: Union[int, Literal["unlimited"]] = 320
    annotate: bool = True
    colors: bool = True
    omit_cmd: bool = False
    success_prefix: str = "✔"
    error_prefix: str = "✘"

    @field_validator("max_bytes")
    @classmethod
    def _clamp_max_bytes(cls, value: Union[int, str]) -> Union[int, str]:
        if isinstance(value, int):
            return max(0, value)
        return value

    def byte_limit(self) -> int | None:
        """Binary preview limit, or None when unlimited."""
        if self.max_bytes == "unlimited":
            return None
        return self.max_bytes


Verbosity = Literal["verbose", "quiet"]


class ActionConfig(BaseModel):
    """Action supervisor configuration."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    timeout_seconds: Optional[PositiveFloat] = 120
    cancel_grace_seconds: NonNegativeFloat = 5
    verbosity: Verbosity = "verbose"
    colors: bool = True
    format_options: FormatOptions = Field(
        default_factory=lambda: FormatOptions(success_prefix="", error_prefix="")
    )

    @property
    def verbose(self) -> bool:
        return self.verbosity == "verbose"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "ActionConfig":
        """Build a config from SHTASK_TIMEOUT_SECONDS, SHTASK_VERBOSITY and NO_COLOR.

        Explicit keyword overrides win over the environment.
        """
        env = os.environ if environ is None else environ
        values: dict = {}
        timeout = env.get("SHTASK_TIMEOUT_SECONDS")
        if timeout:
            values["timeout_seconds"] = None if timeout.strip().lower() == "none" else timeout
        verbosity = env.get("SHTASK_VERBOSITY")
        if verbosity:
            values["verbosity"] = verbosity.strip().lower()
        if env.get("NO_COLOR"):
            values["colors"] = False
            values["format_options"] = FormatOptions(
                success_prefix="", error_prefix="", colors=False
            )
        values.update(overrides)
        return cls.model_validate(values)
