"""Dispatcher that hosts a token ledger and routes caller-identified calls."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable

import structlog

from mintable.ledger.amounts import DEFAULT_BALANCE_BITS
from mintable.ledger.bus import EventBus
from mintable.ledger.errors import LedgerError, UnknownOperation
from mintable.ledger.events import AccountId, Event, EventRecord
from mintable.ledger.state import StateManager
from mintable.ledger.token import MintableToken
from mintable.monitoring.metrics import Metrics

log = structlog.get_logger(__name__)

WRITE_OPERATIONS = ("mint", "burn", "transfer", "approve", "transfer_from")


@dataclass(frozen=True)
class CallResult:
    ok: bool
    operation: str
    output: Any = None
    events: list[Event] = field(default_factory=list)
    error: str | None = None
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "operation": self.operation,
            "output": self.output,
            "events": [event.to_dict() for event in self.events],
            "error": self.error,
            "message": self.message,
        }


class LedgerHost:
    """Serialize calls into a single token ledger and publish what they emit.

    Calls run one at a time under a lock. A rejected call surfaces as a
    ``CallResult`` with ``ok=False``; the token guarantees nothing changed.
    If the store cannot take an accepted call's events, the token state is
    restored and the storage error propagates.
    """

    def __init__(
        self,
        token: MintableToken,
        bus: EventBus | None = None,
        metrics: Metrics | None = None,
    ) -> None:
        self.token = token
        self.bus = bus
        self.metrics = metrics
        self._lock = threading.Lock()

    @classmethod
    def create(
        cls,
        name: str,
        caller: AccountId,
        bus: EventBus | None = None,
        metrics: Metrics | None = None,
        balance_bits: int = DEFAULT_BALANCE_BITS,
    ) -> "LedgerHost":
        """Construct a new ledger and publish its genesis event."""
        if bus is not None and not bus.ledger.is_empty():
            raise LedgerError(f"event ledger at {bus.ledger.ledger_path} already holds a token")
        token = MintableToken(name, caller, balance_bits=balance_bits)
        host = cls(token, bus=bus, metrics=metrics)
        host._publish(token.drain_events(), {"genesis": True, "name": name})
        log.info("ledger_created", name=name, minter=caller)
        return host

    @classmethod
    def open(
        cls,
        bus: EventBus,
        metrics: Metrics | None = None,
        balance_bits: int = DEFAULT_BALANCE_BITS,
    ) -> "LedgerHost":
        """Rebuild the ledger from the bus's event store."""
        state = StateManager(balance_bits).rebuild(bus.ledger.iter_events())
        token = MintableToken.from_state(state, balance_bits=balance_bits)
        host = cls(token, bus=bus, metrics=metrics)
        if metrics is not None:
            metrics.update_token(token)
        return host

    def call(self, caller: AccountId, operation: str, **arguments: Any) -> CallResult:
        """Invoke one write operation as ``caller``."""
        with self._lock:
            snapshot = self.token.state.copy()
            try:
                method = self._resolve(operation)
                output = method(caller, **arguments)
            except LedgerError as exc:
                log.info(
                    "ledger_call_rejected",
                    operation=operation,
                    caller=caller,
                    error=exc.code,
                    reason=exc.message,
                )
                self._record(operation, "rejected")
                return CallResult(
                    ok=False,
                    operation=operation,
                    error=exc.code,
                    message=exc.message,
                )
            records = self.token.drain_events()
            try:
                events = self._publish(records, {"caller": caller})
            except Exception:
                # Nothing reached the store, so memory goes back to match it.
                self.token.state = snapshot
                log.exception(
                    "ledger_call_not_persisted",
                    operation=operation,
                    caller=caller,
                    events=len(records),
                )
                self._record(operation, "failed")
                raise
            log.info(
                "ledger_call_ok",
                operation=operation,
                caller=caller,
                events=len(events),
            )
            self._record(operation, "ok")
            return CallResult(ok=True, operation=operation, output=output, events=events)

    def _resolve(self, operation: str) -> Callable[..., Any]:
        if operation not in WRITE_OPERATIONS:
            raise UnknownOperation(f"unknown operation {operation!r}")
        return getattr(self.token, operation)

    def _publish(self, records: list[EventRecord], metadata: dict[str, Any]) -> list[Event]:
        if self.bus is None:
            return []
        return self.bus.publish_many(records, metadata)

    def _record(self, operation: str, outcome: str) -> None:
        if self.metrics is None:
            return
        self.metrics.record_call(operation, outcome)
        self.metrics.update_token(self.token)
