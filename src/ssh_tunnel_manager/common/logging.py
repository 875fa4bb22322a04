"""Structured logging for the tunnel manager.

The terminal UI owns stdout and stderr while it runs, so records normally go
to a file or nowhere at all.
"""

import logging
import sys
from pathlib import Path

import structlog
from structlog.typing import Processor

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers that are chatty at DEBUG while the event loop runs.
QUIET_LOGGERS = ("asyncio",)


def _shared_processors() -> list[Processor]:
    return [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def _file_handler(log_file: str | Path, level: int) -> logging.Handler:
    path = Path(log_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return handler


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    log_file: str | Path | None = None,
    console: bool = False,
) -> None:
    """Configure structlog on top of the standard library root logger.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Render events as JSON instead of key=value text
        log_file: File to append records to; parent directories are created
        console: Also write records to stderr (only useful outside the UI)
    """
    log_level = getattr(logging, level.upper())

    root_logger = logging.getLogger()
    root_logger.handlers = []
    root_logger.setLevel(log_level)

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(console_handler)

    if log_file:
        root_logger.addHandler(_file_handler(log_file, log_level))

    if not root_logger.handlers:
        root_logger.addHandler(logging.NullHandler())

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    processors = _shared_processors()
    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=console))

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger named after the calling module."""
    return structlog.get_logger(name)  # type: ignore[no-any-return]
