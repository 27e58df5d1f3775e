"""Ambient infrastructure: configuration and logging."""

from foldline.core.config import AccumulatorSettings, load_settings
from foldline.core.logging import configure_logging, get_logger

__all__ = [
    "AccumulatorSettings",
    "configure_logging",
    "get_logger",
    "load_settings",
]
