"""Monitoring utilities."""

from mintable.monitoring.logging import configure_logging
from mintable.monitoring.metrics import Metrics
from mintable.monitoring.event_console import EventConsoleLogger

__all__ = [
    "configure_logging",
    "Metrics",
    "EventConsoleLogger",
]
