"""Utility components for marker controls."""

from marker_controls.utils.logging import setup_logging, get_logger

__all__ = [
    "setup_logging",
    "get_logger",
]
