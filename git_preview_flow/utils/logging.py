"""Logging setup for git-preview-flow"""
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

from git_preview_flow.constants import DATA_DIR_NAME, LOG_FILE_NAME

PACKAGE_PREFIXES = ("git_preview_flow.", "services.")

DETAILED_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
SHORT_FORMAT = "[%(name)s] %(message)s"
DATE_FORMAT = "%H:%M:%S"


class ColoredFormatter(logging.Formatter):
    """Formatter that colours the level name when writing to a terminal."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, fmt=None, datefmt=None, use_color: Optional[bool] = None):
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = sys.stderr.isatty() if use_color is None else use_color

    def format(self, record):
        color = self.LEVEL_COLORS.get(record.levelno)
        if self.use_color and color:
            # Copy so other handlers see the plain level name
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


class SecretFilter(logging.Filter):
    """Replaces known secrets (access tokens) in log messages with ***."""

    def __init__(self, secrets: Iterable[Optional[str]] = ()):
        super().__init__()
        self.secrets = [s for s in secrets if s]

    def filter(self, record):
        if self.secrets:
            message = record.getMessage()
            for secret in self.secrets:
                message = message.replace(secret, "***")
            record.msg, record.args = message, None
        return True


def _console_handler(level: int, debug: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    if debug:
        handler.setFormatter(ColoredFormatter(DETAILED_FORMAT, DATE_FORMAT))
    else:
        handler.setFormatter(ColoredFormatter(SHORT_FORMAT))
    return handler


def _file_handler(log_dir: Path) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_dir / LOG_FILE_NAME, mode="w")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(DETAILED_FORMAT, "%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(
    verbose: bool = False,
    debug: bool = False,
    log_dir: Optional[Path] = None,
    secrets: Iterable[Optional[str]] = (),
) -> None:
    """
    Configure the root logger.

    Args:
        verbose: Show INFO messages on stderr
        debug: Show DEBUG messages and also write them to ``log_dir``
        log_dir: Directory for the debug log file (default ~/.git-preview-flow)
        secrets: Strings scrubbed from every log message
    """
    level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    handlers = [_console_handler(level, debug)]
    if debug:
        handlers.append(_file_handler(log_dir or Path.home() / DATA_DIR_NAME))

    secret_filter = SecretFilter(secrets)
    for handler in handlers:
        handler.addFilter(secret_filter)
        root_logger.addHandler(handler)

    # GitPython logs every command it runs at DEBUG
    logging.getLogger("git").setLevel(logging.INFO if debug else logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name`` with the package prefix removed (``services.workflow`` -> ``workflow``)."""
    for prefix in PACKAGE_PREFIXES:
        if name.startswith(prefix):
            name = name[len(prefix):]
    return logging.getLogger(name)
