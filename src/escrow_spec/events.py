"""Event sinks notified after an operation commits."""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

from .types import Event, EventName

logger = logging.getLogger(__name__)


class EventSink(Protocol):
    def emit(self, name: EventName, fields: dict[str, Any]) -> None:
        ...


class RecordingEventSink:
    """Keeps every event in memory, in emission order."""

    def __init__(self) -> None:
        self.events: list[Event] = []

    def emit(self, name: EventName, fields: dict[str, Any]) -> None:
        self.events.append(Event(name=name, fields=dict(fields)))

    def names(self) -> list[str]:
        return [e.name.value for e in self.events]

    def last(self, name: Optional[EventName] = None) -> Event:
        for event in reversed(self.events):
            if name is None or event.name == name:
                return event
        raise LookupError(f"no event {name.value if name else ''} recorded")

    def clear(self) -> None:
        self.events.clear()


class LoggingEventSink:
    def __init__(self, level: int = logging.INFO) -> None:
        self.level = level

    def emit(self, name: EventName, fields: dict[str, Any]) -> None:
        rendered = " ".join(f"{k}={_render(v)}" for k, v in fields.items())
        logger.log(self.level, "%s %s", name.value, rendered)


def _render(value: Any) -> str:
    if isinstance(value, bytes):
        return value.hex()
    return str(value)
