"""Logging configuration for the health crawler."""

import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Libraries that log every request or event loop detail at INFO/DEBUG
NOISY_LOGGERS = ('httpx', 'httpcore', 'asyncio', 'playwright')


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    format_string: Optional[str] = None,
    noisy_loggers: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """Configure logging for a crawl run.

    Console logs go to stderr so that ``crawl --output json`` leaves stdout
    with nothing but the report.

    Args:
        level: Log level name, case-insensitive (unknown names fall back to INFO)
        log_file: Optional file that receives the same records as the console
        format_string: Optional custom format string
        noisy_loggers: Third-party loggers capped at WARNING
    """
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    handlers = [console]

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(level=numeric_level, handlers=handlers, force=True)

    for name in noisy_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)
