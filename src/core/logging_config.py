"""Project logging.

- logs go to stdout (cron/Docker friendly)
- `log_format=json` emits one JSON object per line; a `payload` dict passed
  through `extra=` is kept as a structured field
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

from core.config import AppSettings

PROJECT_LOGGER = "jellyfin-cleaner"


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        extra_payload = getattr(record, "payload", None)
        if isinstance(extra_payload, dict):
            payload["payload"] = extra_payload
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _build_formatter(log_format: str) -> logging.Formatter:
    if log_format.lower() == "json":
        return JsonFormatter()
    return logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def setup_logging(settings: AppSettings | None = None) -> None:
    """Attach one stdout handler to the root logger.

    Without settings (the configuration could not be loaded) the level and
    format are read from `JELLYFIN_CLEANER_LOG_LEVEL` / `JELLYFIN_CLEANER_LOG_FORMAT`.
    """

    if settings is None:
        log_level = os.environ.get("JELLYFIN_CLEANER_LOG_LEVEL", "INFO")
        log_format = os.environ.get("JELLYFIN_CLEANER_LOG_FORMAT", "text")
    else:
        log_level = settings.log_level or "INFO"
        log_format = settings.log_format or "text"

    root = logging.getLogger()
    level = getattr(logging, log_level.upper(), logging.INFO)
    root.setLevel(level)

    # Do not stack handlers on repeated calls
    if root.handlers:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(_build_formatter(log_format))
    root.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))


def get_project_logger(name: str = PROJECT_LOGGER) -> logging.Logger:
    return logging.getLogger(name)
