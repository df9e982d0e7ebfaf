"""
Logging configuration using Loguru.

Modules call ``logger.info(msg, extra={"address": ..., "operation": ...})``;
Loguru files those keyword fields under ``record["extra"]["extra"]``. The
console format surfaces the note address and operation when present, the
JSON file sink keeps every field.
"""

import sys
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from zettelkb.config import LoggingConfig

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan>"
)


def _console_format(record) -> str:
    fields = record["extra"].get("extra")
    scope = ""
    if isinstance(fields, dict):
        if "operation" in fields:
            scope += " <magenta>{extra[extra][operation]}</magenta>"
        if "address" in fields:
            scope += " <yellow>@{extra[extra][address]}</yellow>"
    return CONSOLE_FORMAT + scope + " - <level>{message}</level>\n{exception}"


def setup_logging(
    level: str = "INFO",
    log_to_file: bool = False,
    log_dir: str = "logs",
    file_rotation: str = "10 MB",
    file_retention: str = "7 days",
    compression: str = "zip",
    serialize: bool = True,
) -> None:
    """Configure Loguru with a console sink and an optional rotating JSON file sink."""
    logger.remove()

    logger.add(sys.stderr, level=level, format=_console_format, colorize=True)

    if log_to_file:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        # One file per day, JSON lines so address/operation stay queryable
        logger.add(
            log_path / "zettelkb_{time:YYYY-MM-DD}.log",
            level=level,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            rotation=file_rotation,
            retention=file_retention,
            compression=compression,
            serialize=serialize,
            enqueue=True,
        )


def setup_logging_from_config(config: "LoggingConfig") -> None:
    """Apply a LoggingConfig section."""
    setup_logging(**config.model_dump())


def get_logger(name: str):
    """Get a logger instance for a module."""
    return logger.bind(module=name)
