"""Runtime entry point: open the ledger and serve the HTTP API."""

from __future__ import annotations

import argparse
import sys

import structlog
import uvicorn

from mintable.api.operator import create_app
from mintable.config.settings import Settings, load_settings
from mintable.host import LedgerHost
from mintable.ledger import EventBus, EventLedger
from mintable.monitoring import EventConsoleLogger, Metrics, configure_logging

log = structlog.get_logger(__name__)


def build_host(settings: Settings, metrics: Metrics | None = None) -> LedgerHost:
    """Open the configured ledger, creating it first when the store is empty."""
    ledger = EventLedger(settings.storage.ledger_path)
    bus = EventBus(ledger)
    bus.register_all(EventConsoleLogger().handle_event)
    if metrics is not None:
        bus.register_all(metrics.handle_event)

    bits = settings.token.balance_bits
    if ledger.is_empty():
        errors = settings.validate_for_init()
        if errors:
            raise SystemExit("cannot create ledger: " + ", ".join(errors))
        return LedgerHost.create(
            settings.token.name,
            settings.token.minter,
            bus=bus,
            metrics=metrics,
            balance_bits=bits,
        )
    return LedgerHost.open(bus, metrics=metrics, balance_bits=bits)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Serve the mintable token ledger.")
    parser.add_argument("--config", default=None, help="Path to config.yaml")
    args = parser.parse_args(argv)

    settings = load_settings(args.config)
    configure_logging(
        settings.monitoring.log_level,
        settings.storage.logs_path,
        settings.monitoring,
    )

    metrics = Metrics() if settings.monitoring.metrics_enabled else None
    host = build_host(settings, metrics)
    if metrics is not None:
        metrics.start(settings.monitoring.metrics_port)
        log.info("metrics_server_started", port=settings.monitoring.metrics_port)

    log.info(
        "ledger_ready",
        name=host.token.name(),
        minter=host.token.minter(),
        total_supply=str(host.token.total_supply()),
    )
    uvicorn.run(
        create_app(host),
        host=settings.monitoring.api_host,
        port=settings.monitoring.api_port,
        log_config=None,
    )


if __name__ == "__main__":
    sys.exit(main())
