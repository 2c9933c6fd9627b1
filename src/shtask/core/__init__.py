"""Core configuration for shtask."""

from .config import ActionConfig, FormatOptions, ShellOptions

__all__ = ["ActionConfig", "FormatOptions", "ShellOptions"]
