"""Utility exports."""

from .logging import JsonFormatter, PlainFormatter, configure_logging, get_logger

__all__ = [
    "JsonFormatter",
    "PlainFormatter",
    "configure_logging",
    "get_logger",
]
