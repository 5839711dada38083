"""Utility functions for git-preview-flow.

This package provides utility modules:
- logging: Logging configuration and logger creation
"""

from .logging import setup_logging, get_logger, ColoredFormatter, SecretFilter

__all__ = [
    "setup_logging",
    "get_logger",
    "ColoredFormatter",
    "SecretFilter",
]
