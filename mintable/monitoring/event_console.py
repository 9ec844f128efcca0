"""Console logger for ledger events."""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from mintable.ledger.events import Event, EventType


class EventConsoleLogger:
    """Emit selected ledger events to stdout via structlog."""

    def __init__(self, include: Iterable[EventType] | None = None) -> None:
        self.include = set(include or {EventType.TRANSFER, EventType.APPROVAL})
        self.log = structlog.get_logger("ledger_events")

    def handle_event(self, event: Event) -> None:
        if event.event_type not in self.include:
            return
        self.log.info(
            "ledger_event",
            event_type=event.event_type.value,
            sequence_num=event.sequence_num,
            payload=event.payload,
            metadata=event.metadata,
        )
