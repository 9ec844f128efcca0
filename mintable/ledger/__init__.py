"""Token ledger core, events and sourcing."""

from mintable.ledger.bus import EventBus
from mintable.ledger.errors import (
    ArithmeticOverflow,
    InsufficientAllowance,
    InsufficientBalance,
    InvalidAmount,
    LedgerError,
    ReplayError,
    Unauthorized,
    UnknownOperation,
)
from mintable.ledger.events import ApprovalRecord, Event, EventType, TransferRecord
from mintable.ledger.state import StateManager, TokenState
from mintable.ledger.store import EventLedger
from mintable.ledger.token import MintableToken

__all__ = [
    "ApprovalRecord",
    "ArithmeticOverflow",
    "Event",
    "EventBus",
    "EventLedger",
    "EventType",
    "InsufficientAllowance",
    "InsufficientBalance",
    "InvalidAmount",
    "LedgerError",
    "MintableToken",
    "ReplayError",
    "StateManager",
    "TokenState",
    "TransferRecord",
    "Unauthorized",
    "UnknownOperation",
]
