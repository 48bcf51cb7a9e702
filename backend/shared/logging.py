"""Structured logging for the scout CLI.

Events are rendered by structlog and written through stdlib logging to
stderr, leaving stdout to the lobby tables. A run can also keep a log file.

Environment variables:
- LOG_FORMAT: "json" for one JSON object per line, "console" or unset for
  human-readable lines (coloured when stderr is a terminal).
- LOG_LEVEL: "DEBUG", "INFO", "WARNING" (default), "ERROR", or "CRITICAL".
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from collections.abc import MutableMapping
    from typing import Any

LOG_FILE_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"
DEFAULT_LOG_LEVEL = "WARNING"

_LOG_FORMATS = {"json", "console", ""}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

# Noisy below WARNING: slow-callback reports from the event loop.
_QUIET_LOGGERS = ("asyncio",)


def _serialize_enums(
    _logger: object,
    _method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Log enum members (phases, diff policies) by value."""
    for key, value in event_dict.items():
        if isinstance(value, Enum):
            event_dict[key] = value.value
    return event_dict


def configure_structlog() -> None:
    """Route structlog events through stdlib logging.

    Rendering happens in the handlers' ProcessorFormatter, so exception
    info is formatted once per handler rather than here.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            _serialize_enums,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def _is_test() -> bool:
    return "pytest" in sys.modules


def _json_requested() -> bool:
    log_format = os.environ.get("LOG_FORMAT", "").lower()
    if log_format not in _LOG_FORMATS:
        msg = f"Invalid LOG_FORMAT={log_format!r}. Must be 'json', 'console', or unset."
        raise ValueError(msg)
    return log_format == "json"


def _level_from_env() -> int:
    name = os.environ.get("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
    if name not in _LOG_LEVELS:
        msg = f"Invalid LOG_LEVEL={name!r}. Must be one of {', '.join(sorted(_LOG_LEVELS))}."
        raise ValueError(msg)
    return getattr(logging, name)


def _formatter(*, json_mode: bool, colors: bool) -> logging.Formatter:
    if json_mode:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=colors)
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
    )


def _open_log_file(log_dir: Path | str) -> Path:
    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    return directory / f"{datetime.now(tz=UTC).strftime(LOG_FILE_TIMESTAMP_FORMAT)}.log"


def setup_logging(
    log_dir: Path | str | None = None,
    level: int | None = None,
) -> Path | None:
    """Configure logging for a scout run.

    The level comes from `level`, else LOG_LEVEL (default WARNING, so a
    normal run prints tables and diagnostics only). With `log_dir` a
    timestamped file is also written there and its path returned. Under
    pytest no file is created.
    """
    json_mode = _json_requested()
    if level is None:
        level = _level_from_env()

    configure_structlog()

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(_formatter(json_mode=json_mode, colors=sys.stderr.isatty()))
    root.addHandler(stderr_handler)

    if log_dir is None or _is_test():
        return None

    file_path = _open_log_file(log_dir)
    file_handler = logging.FileHandler(file_path)
    file_handler.setFormatter(_formatter(json_mode=json_mode, colors=False))
    root.addHandler(file_handler)
    return file_path
