"""Telemetry sink that records custom events as structured log lines."""

from __future__ import annotations

import json
from logging import INFO, getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

    from casenotes.domain.ports.events import Telemetry

TELEMETRY_LOGGER = "casenotes.telemetry"


class LoggingTelemetry:
    def __init__(self, logger_name: str = TELEMETRY_LOGGER, *, level: int = INFO) -> None:
        self._log = getLogger(logger_name)
        self._level = level

    def track_event(self, name: str, properties: Mapping[str, str]) -> None:
        self._log.log(self._level, "%s %s", name, json.dumps(dict(properties), sort_keys=True))


if TYPE_CHECKING:
    _telemetry_check: Telemetry = LoggingTelemetry()
