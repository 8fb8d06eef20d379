"""Logging setup for arbor.

Shell output owns stdout, so log records go to stderr and, when asked, to a
file. The default level is WARNING; debug events only appear when a level
is requested with `--log-level` or ARBOR_LOG_LEVEL.

Modules log through `logging.getLogger(__name__)` and phrase debug events as
`event_name: key=value, ...`, e.g. `chdir: from=/, to=/content`.

Environment Variables:
    ARBOR_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL
    ARBOR_LOG_FORMAT: "text" or "json"
    ARBOR_LOG_FILE: Also write records to this file
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime
from typing import Any, Literal

LogFormat = Literal["text", "json"]

DEFAULT_LEVEL = "WARNING"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_TEXT_FORMATS = {
    True: "%(asctime)s.%(msecs)03d %(levelname)-8s %(name)s: %(message)s",
    False: "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
}

# Attributes of a bare record plus those Formatter.format() adds; anything
# else arrived through `extra=`
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.NOTSET, "", 0, "", None, None))
) | {"message", "asctime"}

_configured = False


class JsonFormatter(logging.Formatter):
    """One JSON object per record.

    Keys: timestamp, level, logger, message, plus `exception` when the
    record carries exc_info and `extra` for fields passed via `extra=`.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        extra = {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS}
        if extra:
            payload["extra"] = extra
        return json.dumps(payload, default=str)


def _resolve_level(level: str) -> int:
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")
    return numeric


def _make_formatter(format: str, include_ms: bool) -> logging.Formatter:
    if format == "json":
        return JsonFormatter()
    if format != "text":
        raise ValueError(f"Unknown log format: {format} (expected text or json)")
    return logging.Formatter(_TEXT_FORMATS[include_ms], datefmt=DATE_FORMAT)


def configure_logging(
    level: str | None = None,
    format: LogFormat | None = None,
    file_path: str | None = None,
    include_ms: bool = True,
    force: bool = False,
) -> None:
    """Install handlers on the root logger.

    Only the first call takes effect unless force is set. Arguments win
    over the ARBOR_LOG_* variables, which win over the defaults.

    Args:
        level: Level name; default ARBOR_LOG_LEVEL, then WARNING.
        format: "text" or "json"; default ARBOR_LOG_FORMAT, then text.
        file_path: Extra log file; default ARBOR_LOG_FILE.
        include_ms: Milliseconds in text timestamps.
        force: Replace an earlier configuration.

    Raises:
        ValueError: On an unknown level or format name.
    """
    global _configured
    if _configured and not force:
        return

    numeric_level = _resolve_level(level or os.environ.get("ARBOR_LOG_LEVEL", DEFAULT_LEVEL))
    formatter = _make_formatter(format or os.environ.get("ARBOR_LOG_FORMAT", "text"), include_ms)
    file_path = file_path or os.environ.get("ARBOR_LOG_FILE")

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if file_path:
        handlers.append(logging.FileHandler(file_path, encoding="utf-8"))

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(numeric_level)

    _configured = True
