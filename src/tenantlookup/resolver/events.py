from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Protocol

logger = logging.getLogger(__name__)
events_logger = logging.getLogger("tenantlookup.events")


@dataclass(frozen=True)
class LookupEvent:
    """One resolution call, described without the identifier itself."""

    timestamp: datetime
    input_kind: str
    mode: str | None
    outcome: str
    stage: str | None
    duration_ms: int

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data


class EventSink(Protocol):
    """Receives lookup events."""

    def emit(self, event: LookupEvent) -> None:
        """Record one event."""
        raise NotImplementedError


class LoggingEventSink:
    """Writes each event as one JSON line on the ``tenantlookup.events`` logger."""

    def __init__(self, target: logging.Logger | None = None, level: int = logging.INFO):
        self._logger = target or events_logger
        self._level = level

    def emit(self, event: LookupEvent) -> None:
        self._logger.log(self._level, json.dumps(event.to_dict(), sort_keys=True))


def emit_quietly(sink: EventSink | None, event: LookupEvent) -> None:
    """Send ``event`` to ``sink``; a failing sink only produces a warning."""
    if sink is None:
        return
    try:
        sink.emit(event)
    except Exception as exc:  # events are fire-and-forget
        logger.warning("Dropping lookup event: %s", exc)
