"""Structured logging helpers."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

_ROOT_LOGGER = "doodlesolve"
_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_FORMATS = ("json", "text")


class JsonFormatter(logging.Formatter):
    """Renders one record per line as a JSON object.

    Fields passed as `extra={"extra": {...}}` are merged into the top level.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        fields = getattr(record, "extra", None)
        if isinstance(fields, dict):
            payload.update(fields)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=str)


def configure_logging(level: Optional[str] = None, settings: Optional[Mapping[str, Any]] = None) -> None:
    """Installs a single stream handler on the root logger.

    Args:
        level: Explicit level, e.g. from the CLI; wins over `settings["level"]`.
        settings: The `logging` section of the app config (`level`, `format`).

    Raises:
        ValueError: On an unknown level or format.
    """
    settings = settings or {}
    resolved_level = str(level or settings.get("level") or "INFO").upper()
    log_format = str(settings.get("format") or "json").lower()
    if log_format not in LOG_FORMATS:
        raise ValueError("Unknown log format '{}'; expected one of {}".format(log_format, ", ".join(LOG_FORMATS)))

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter() if log_format == "json" else logging.Formatter(_TEXT_FORMAT))

    root = logging.getLogger()
    root.setLevel(resolved_level)
    root.handlers = [handler]


def get_logger(name: str) -> logging.Logger:
    if name == _ROOT_LOGGER or name.startswith(_ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger("{}.{}".format(_ROOT_LOGGER, name))
