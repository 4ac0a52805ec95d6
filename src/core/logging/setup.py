"""Root logger configuration for scripts, the CLI and tests.

Applications embedding the SDK normally configure logging themselves and
only need the formatters.
"""

import io
import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from core.logging.formatters import ConsoleFormatter, JSONFormatter

DEFAULT_LOG_DIR = Path("logs")

# HTTP client loggers held at WARNING
NOISY_LOGGERS = ["aiohttp", "aiohttp.access", "aiohttp.client", "asyncio", "urllib3"]

PLAIN_FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"


def get_log_file_path(log_dir: Path, name: str) -> Path:
    return log_dir / f"{name}.log"


def _console_handler(level: int) -> logging.Handler:
    stream = sys.stdout
    if sys.platform == "win32":
        stream = io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8", errors="replace")
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.setFormatter(ConsoleFormatter())
    return handler


def _file_handler(
    path: Path, level: int, json_format: bool, when: str, interval: int, backup_count: int
) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(
        path, when=when, interval=interval, backupCount=backup_count, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter() if json_format else logging.Formatter(PLAIN_FILE_FORMAT))
    return handler


def setup_logging(
    name: str = "sso_client",
    log_dir: Path | None = None,
    json_format: bool = True,
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    rotation_when: str = "midnight",
    rotation_interval: int = 1,
    backup_count: int = 7,
    suppress_noisy: bool = True,
    log_to_stdout: bool = True,
) -> logging.Logger:
    """
    Replace the root logger's handlers with a console handler and, unless
    ``log_to_stdout`` is set, a rotating file handler under ``log_dir``.

    Args:
        name: Logger returned to the caller and log file prefix
        log_dir: Directory for the log file (default: ./logs)
        json_format: JSON lines in the file instead of plain text
        console_level: Console handler threshold
        file_level: File handler threshold
        rotation_when: TimedRotatingFileHandler ``when`` ('midnight', 'H', 'M')
        rotation_interval: Rotation interval
        backup_count: Rotated files to keep
        suppress_noisy: Hold NOISY_LOGGERS at WARNING
        log_to_stdout: Console only, no file handler

    Returns:
        The logger called ``name``
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.handlers.clear()
    root.addHandler(_console_handler(console_level))

    if not log_to_stdout:
        path = get_log_file_path(log_dir or DEFAULT_LOG_DIR, name)
        root.addHandler(
            _file_handler(path, file_level, json_format, rotation_when, rotation_interval, backup_count)
        )

    if suppress_noisy:
        for noisy in NOISY_LOGGERS:
            logging.getLogger(noisy).setLevel(logging.WARNING)

    logger = logging.getLogger(name)
    logger.debug("Logging initialized", extra={"log_to_stdout": log_to_stdout})
    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
