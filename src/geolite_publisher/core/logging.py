"""Loguru logging configuration for publish runs.

Human-readable lines go to stderr. Records bound with ``json_output=True``
(the per-edition outcomes) are serialized as JSON: to stderr by default, or
to ``geolite-publisher.jsonl`` beside the rotating text log when a
``log_dir`` is given.
"""

import sys
from pathlib import Path

from loguru import logger

_CONSOLE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level:<8} | {message}"
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {name}:{function}:{line} | {message}"

LOG_FILENAME = "geolite-publisher.log"
JSON_LOG_FILENAME = "geolite-publisher.jsonl"


def _is_json_record(record: dict) -> bool:
    return bool(record["extra"].get("json_output", False))


def setup_logging(log_level: str = "INFO", log_dir: str | None = None) -> None:
    """Replace Loguru's default sink with the publisher's sinks.

    Args:
        log_level: Minimum log level to emit (case-insensitive).
        log_dir: Optional directory for log files. When set, a text log
            rotated every 24 hours (kept 7 days) and a JSON lines file of
            edition outcomes are written there.
    """
    level = log_level.upper()
    logger.remove()
    logger.add(sys.stderr, level=level, format=_CONSOLE_FORMAT)

    if not log_dir:
        logger.add(sys.stderr, level=level, serialize=True, filter=_is_json_record)
        return

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_path / LOG_FILENAME,
        level=level,
        format=_FILE_FORMAT,
        rotation="24h",
        retention="7 days",
    )
    logger.add(log_path / JSON_LOG_FILENAME, level=level, serialize=True, filter=_is_json_record)
