from __future__ import annotations

import json
import logging

from core.config import AppSettings
from core.logging_config import JsonFormatter, setup_logging


def _fresh_root(monkeypatch) -> logging.Logger:
    root = logging.getLogger()
    monkeypatch.setattr(root, "handlers", [])
    monkeypatch.setattr(root, "level", root.level)
    return root


def test_json_formatter_keeps_payload():
    record = logging.LogRecord("jellyfin-cleaner", logging.ERROR, __file__, 1, "Cleanup aborted: %s", ("boom",), None)
    record.payload = {"code": "authentication"}

    data = json.loads(JsonFormatter().format(record))

    assert data["level"] == "ERROR"
    assert data["msg"] == "Cleanup aborted: boom"
    assert data["payload"] == {"code": "authentication"}


def test_setup_logging_uses_settings(monkeypatch):
    root = _fresh_root(monkeypatch)

    setup_logging(AppSettings(log_level="debug", log_format="json"))

    [handler] = root.handlers
    assert isinstance(handler.formatter, JsonFormatter)
    assert root.level == logging.DEBUG


def test_setup_logging_without_settings_reads_environment(monkeypatch):
    root = _fresh_root(monkeypatch)
    monkeypatch.setenv("JELLYFIN_CLEANER_LOG_FORMAT", "json")
    monkeypatch.setenv("JELLYFIN_CLEANER_LOG_LEVEL", "warning")

    setup_logging()
    setup_logging()

    [handler] = root.handlers
    assert isinstance(handler.formatter, JsonFormatter)
    assert root.level == logging.WARNING
