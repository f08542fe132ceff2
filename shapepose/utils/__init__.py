"""Shared helpers for the shapepose package."""

from .logging import configure_logging, get_logger, resolve_level

__all__ = ["configure_logging", "get_logger", "resolve_level"]
