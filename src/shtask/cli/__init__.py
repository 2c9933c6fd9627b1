"""Command line interface for shtask."""

from .main import app

__all__ = ["app"]
