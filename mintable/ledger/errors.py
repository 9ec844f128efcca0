"""Typed failures raised by ledger operations."""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for every rejected ledger call.

    A raised ``LedgerError`` guarantees that no state was mutated by the call.
    """

    code = "LedgerError"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code)
        self.message = message or self.code


class Unauthorized(LedgerError):
    """Caller is not allowed to perform the operation (non-minter mint)."""

    code = "Unauthorized"


class InsufficientBalance(LedgerError):
    """Source balance is lower than the requested value."""

    code = "InsufficientBalance"


class InsufficientAllowance(LedgerError):
    """Spender's remaining allowance is lower than the requested value."""

    code = "InsufficientAllowance"


class ArithmeticOverflow(LedgerError):
    """An addition would exceed the balance range."""

    code = "ArithmeticOverflow"


class InvalidAmount(LedgerError, ValueError):
    """Value is not an integer inside the balance range."""

    code = "InvalidAmount"


class UnknownOperation(LedgerError):
    code = "UnknownOperation"


class ReplayError(LedgerError):
    """Stored event stream cannot be replayed into a consistent ledger."""

    code = "ReplayError"
