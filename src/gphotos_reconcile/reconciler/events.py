"""Structured events emitted by the reconciler.

Components never log through a global; they receive an EventSink. The default
sink forwards to the standard logging tree with the event fields attached as
``extra_fields`` so the JSON formatter writes them out as columns.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol


@dataclass(frozen=True)
class ReconcileEvent:
    """One structured event.

    Attributes:
        name: Machine-readable event name (e.g. "rename_rolled_back")
        level: logging level number
        message: Human-readable message
        fields: Structured payload
    """
    name: str
    level: int
    message: str
    fields: Dict[str, Any] = field(default_factory=dict)


class EventSink(Protocol):
    """Anything accepting structured events."""

    def emit(self, event: ReconcileEvent) -> None:
        ...


class LoggingEventSink:
    """Forward events to a logger."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or logging.getLogger("gphotos_reconcile.reconciler")

    def emit(self, event: ReconcileEvent) -> None:
        fields = {"event": event.name, **event.fields}
        self.logger.log(
            event.level,
            f"{event.message}: {event.fields!r}" if event.fields else event.message,
            extra={"extra_fields": fields},
        )


class RecordingEventSink:
    """Keep events in memory; used by tests and dry inspections."""

    def __init__(self) -> None:
        self.events: List[ReconcileEvent] = []

    def emit(self, event: ReconcileEvent) -> None:
        self.events.append(event)

    def names(self) -> List[str]:
        return [e.name for e in self.events]

    def of(self, name: str) -> List[ReconcileEvent]:
        return [e for e in self.events if e.name == name]


def emit(sink: Optional[EventSink], name: str, level: int, message: str, **fields: Any) -> None:
    """Build and emit an event; a None sink falls back to logging."""
    (sink or _DEFAULT_SINK).emit(ReconcileEvent(name=name, level=level, message=message, fields=fields))


_DEFAULT_SINK = LoggingEventSink()
