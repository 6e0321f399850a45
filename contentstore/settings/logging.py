"""Logging setup for the CLI and embedding applications.

Statements sent to DuckDB are logged at DEBUG with ``sql`` bound in the
record's extra; they are noisy even at DEBUG, so sinks hide them unless
asked for.
"""

import sys
from pathlib import Path

from loguru import logger

from contentstore.settings import LOG_LEVEL

CONSOLE_FORMAT = "<cyan>{time:HH:mm:ss}</cyan> {level.icon} <level>{message}</level>"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} {level: <7} {name}:{line} {message}"


def sql_filter(show_sql: bool):
    def accept(record) -> bool:
        return show_sql or not record["extra"].get("sql")

    return accept


def setup_logging(level: str = LOG_LEVEL, log_dir: Path | None = None, sql: bool = False, sink=sys.stderr):
    """Route contentstore logs to ``sink`` and, with ``log_dir``, a daily file.

    The file always records DEBUG, SQL included when ``sql`` is set.
    """
    logger.remove()
    logger.add(sink, format=CONSOLE_FORMAT, level=level.upper(), filter=sql_filter(sql))

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        path = log_dir / "contentstore_{time:YYYY-MM-DD}.log"
        logger.add(path, format=FILE_FORMAT, level="DEBUG", filter=sql_filter(sql), rotation="00:00", retention=7)
        logger.debug("Log file: {}", path)

    return logger