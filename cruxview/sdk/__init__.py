"""Programmatic entry points for headless loads."""

from .run import LoadRunResult, load_from_config

__all__ = ["LoadRunResult", "load_from_config"]
