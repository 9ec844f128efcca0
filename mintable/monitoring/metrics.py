"""Prometheus metrics definitions."""

from __future__ import annotations

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, start_http_server

from mintable.ledger.events import Event
from mintable.ledger.token import MintableToken


class Metrics:
    """Expose ledger metrics for monitoring."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or REGISTRY
        self.ledger_calls_total = Counter(
            "ledger_calls_total",
            "Ledger write calls by operation and outcome",
            ["operation", "outcome"],
            registry=self.registry,
        )
        self.events_published_total = Counter(
            "events_published_total",
            "Ledger events published by type",
            ["event_type"],
            registry=self.registry,
        )
        # Gauges are floats; supplies past 2**53 lose precision here only.
        self.token_total_supply = Gauge(
            "token_total_supply", "Current total supply", registry=self.registry
        )
        self.token_accounts = Gauge(
            "token_accounts", "Accounts with a balance entry", registry=self.registry
        )
        self.last_event_sequence = Gauge(
            "last_event_sequence", "Last published event sequence number", registry=self.registry
        )

    def start(self, port: int) -> None:
        start_http_server(port, registry=self.registry)

    def record_call(self, operation: str, outcome: str) -> None:
        self.ledger_calls_total.labels(operation=operation, outcome=outcome).inc()

    def handle_event(self, event: Event) -> None:
        self.events_published_total.labels(event_type=event.event_type.value).inc()
        self.last_event_sequence.set(event.sequence_num)

    def update_token(self, token: MintableToken) -> None:
        self.token_total_supply.set(token.total_supply())
        self.token_accounts.set(len(token.state.balances))
