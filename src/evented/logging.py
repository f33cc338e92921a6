"""Structured JSON logging helpers for evented."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from logging import Logger
from typing import Dict

_LOGGER_NAME = "evented"


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        payload = {
            "ts": ts,
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if hasattr(record, "event"):
            payload["event"] = getattr(record, "event")
        if hasattr(record, "payload"):
            payload["payload"] = getattr(record, "payload")
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=repr)


def _make_formatter(json_logs: bool) -> logging.Formatter:
    if json_logs:
        return _JsonFormatter()
    return logging.Formatter("%(levelname)s %(name)s: %(message)s")


def get_logger(name: str | None = None) -> Logger:
    """Return a module level logger configured for structured JSON output."""

    from .config import get_settings

    logger_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    logger = logging.getLogger(logger_name)
    if not logger.handlers:
        settings = get_settings()
        handler = logging.StreamHandler()
        handler.setFormatter(_make_formatter(settings.json_logs))
        logger.addHandler(handler)
        logger.setLevel(getattr(logging, settings.log_level, logging.WARNING))
    return logger


def apply_settings(logger: Logger, log_level: str, json_logs: bool) -> None:
    """Re-level ``logger`` and swap its formatter after a settings change."""

    logger.setLevel(getattr(logging, log_level, logging.WARNING))
    for handler in logger.handlers:
        handler.setFormatter(_make_formatter(json_logs))


def log_event(
    logger: Logger, event: str, payload: Dict[str, object] | None = None
) -> None:
    """Log an event payload in a consistent JSON format."""

    payload = payload or {}
    extra = {"event": event, "payload": payload}
    logger.info(f"event={event}", extra=extra)
