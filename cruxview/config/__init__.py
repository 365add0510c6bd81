"""Configuration loading utilities for cruxview."""

from .schema import (
    ViewerConfig,
    load_config,
)

__all__ = ["ViewerConfig", "load_config"]
