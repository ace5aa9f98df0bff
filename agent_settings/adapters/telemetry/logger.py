"""Telemetry adapter that forwards events to the standard logging module."""

from __future__ import annotations

import logging
from typing import Any

_LEVELS = {
    "settings_key_dropped": logging.WARNING,
    "settings_resolution_failed": logging.ERROR,
}


class LoggingTelemetry:
    def __init__(self, logger_name: str = "agent_settings.telemetry") -> None:
        self._logger = logging.getLogger(logger_name)

    def log(self, event: str, **fields: Any) -> None:
        level = _LEVELS.get(event, logging.DEBUG)
        # LogRecord reserves some attribute names, keep fields namespaced
        self._logger.log(level, event, extra={"event": event, "fields": fields})
