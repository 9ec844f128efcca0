"""Event bus that appends to the ledger before dispatching."""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable, Sequence

import structlog

from mintable.ledger.events import Event, EventRecord, EventType
from mintable.ledger.store import EventLedger

EventHandler = Callable[[Event], None]


class EventBus:
    """Persist emitted records and notify subscribers.

    Dispatch is synchronous: by the time an event reaches the bus the ledger
    call that produced it has already committed, so a failing handler is
    logged and skipped rather than propagated.
    """

    def __init__(self, ledger: EventLedger) -> None:
        self.ledger = ledger
        self._handlers: dict[EventType, list[EventHandler]] = defaultdict(list)
        self._log = structlog.get_logger(__name__)

    def register(self, event_type: EventType, handler: EventHandler) -> None:
        """Register a handler for a specific event type."""
        self._handlers[event_type].append(handler)

    def register_all(self, handler: EventHandler) -> None:
        for event_type in EventType:
            self.register(event_type, handler)

    def publish(self, record: EventRecord, metadata: dict[str, Any] | None = None) -> Event:
        """Append the record and dispatch the stored event to handlers."""
        return self.publish_many([record], metadata)[0]

    def publish_many(
        self,
        records: Sequence[EventRecord],
        metadata: dict[str, Any] | None = None,
    ) -> list[Event]:
        """Persist all records in one batch, then dispatch them in order.

        Handlers only see events once the whole batch is stored.
        """
        events = self.ledger.append_many(records, metadata)
        for event in events:
            self._dispatch(event)
        return events

    def _dispatch(self, event: Event) -> None:
        for handler in self._handlers.get(event.event_type, []):
            try:
                handler(event)
            except Exception:
                self._log.exception(
                    "event_handler_failed",
                    event_id=event.event_id,
                    event_type=event.event_type.value,
                    handler=getattr(handler, "__name__", repr(handler)),
                )
