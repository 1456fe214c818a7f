"""Loguru setup for autoservice.

Console logs are human-readable on stderr by default; build tools that collect
structured logs can switch to Pino-style NDJSON. Stdout is left to command
output (manifest listings, tables).

Usage:
    from autoservice.utils.logging import logger
    logger.info("Message")
    logger.debug("Debug message")  # Only shows if AUTOSERVICE_LOG_LEVEL=DEBUG

Environment Variables:
    AUTOSERVICE_LOG_LEVEL: DEBUG|INFO|WARNING|ERROR (default: INFO)
    AUTOSERVICE_LOG_JSON: 0|1 (default: 0, human-readable)
    AUTOSERVICE_LOG_FILE: path to an NDJSON log file (optional)
    AUTOSERVICE_REQUEST_ID: build id attached to every JSON record
"""

import json
import os
import sys
import uuid

from loguru import logger

from .constants import ENV_LOG_FILE, ENV_LOG_JSON, ENV_LOG_LEVEL, ENV_REQUEST_ID

PINO_LEVELS = {
    "TRACE": 10,
    "DEBUG": 20,
    "INFO": 30,
    "SUCCESS": 30,
    "WARNING": 40,
    "ERROR": 50,
    "CRITICAL": 60,
}

_HUMAN_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}:{function}:{line}</cyan> - "
    "<level>{message}</level>"
)

_build_id = os.environ.get(ENV_REQUEST_ID) or str(uuid.uuid4())
_handler_ids: list[int] = []


def _to_pino(record) -> str:
    """One loguru record as a Pino NDJSON line."""
    entry = {
        "level": PINO_LEVELS.get(record["level"].name, 30),
        "time": int(record["time"].timestamp() * 1000),
        "msg": record["message"],
        "pid": record["process"].id,
        "request_id": _build_id,
    }
    entry.update(record["extra"])

    exception = record["exception"]
    if exception:
        entry["err"] = {
            "type": exception.type.__name__ if exception.type else "Error",
            "message": str(exception.value) if exception.value else "",
        }
    return json.dumps(entry, default=str)


def _stderr_json_sink(message):
    # Never call logger.* inside a sink
    sys.stderr.write(_to_pino(message.record) + "\n")
    sys.stderr.flush()


def configure_logging(
    level: str | None = None,
    json_mode: bool | None = None,
    log_file: str | None = None,
) -> None:
    """(Re)install the autoservice sinks.

    Arguments left as None fall back to the AUTOSERVICE_LOG_* environment
    variables. Only sinks installed here are replaced; handlers added by
    callers (test capture, embedding build tools) stay in place.
    """
    level = (level or os.environ.get(ENV_LOG_LEVEL, "INFO")).upper()
    if json_mode is None:
        json_mode = os.environ.get(ENV_LOG_JSON, "0") == "1"
    log_file = log_file or os.environ.get(ENV_LOG_FILE)

    while _handler_ids:
        logger.remove(_handler_ids.pop())

    if json_mode:
        _handler_ids.append(logger.add(_stderr_json_sink, level=level, colorize=False))
    else:
        _handler_ids.append(
            logger.add(sys.stderr, level=level, format=_HUMAN_FORMAT, colorize=None)
        )

    if log_file:
        def _file_sink(message):
            with open(log_file, "a", encoding="utf-8") as f:
                f.write(_to_pino(message.record) + "\n")

        # File always captures everything
        _handler_ids.append(logger.add(_file_sink, level="DEBUG"))


def get_request_id() -> str:
    """Build id shared by every record of this process."""
    return _build_id


logger.remove()
logger.level("DEBUG", color="<blue>")
logger.level("INFO", color="<white>")
logger.level("WARNING", color="<yellow>")
logger.level("ERROR", color="<red>")
logger.level("CRITICAL", color="<red><bold>")
configure_logging()


__all__ = [
    "logger",
    "configure_logging",
    "get_request_id",
]
