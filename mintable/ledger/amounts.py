"""Checked unsigned arithmetic for token balances.

Balances are plain Python ints bounded to a fixed unsigned width. Nothing in
this module wraps or saturates: every out-of-range result raises before the
caller gets a chance to store it.
"""

from __future__ import annotations

from mintable.ledger.errors import ArithmeticOverflow, InsufficientBalance, InvalidAmount, LedgerError

DEFAULT_BALANCE_BITS = 128


def max_balance(bits: int = DEFAULT_BALANCE_BITS) -> int:
    """Largest representable balance for an unsigned integer of ``bits`` width."""
    if bits <= 0:
        raise ValueError("balance width must be positive")
    return (1 << bits) - 1


def require_amount(value: object, limit: int) -> int:
    """Return ``value`` if it is an integer in ``[0, limit]``, else raise InvalidAmount."""
    # bool is an int subclass; True is not an amount.
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmount(f"amount must be an integer, got {type(value).__name__}")
    if value < 0:
        raise InvalidAmount(f"amount must be non-negative, got {value}")
    if value > limit:
        raise InvalidAmount(f"amount {value} exceeds balance range")
    return value


def checked_add(a: int, b: int, limit: int) -> int:
    total = a + b
    if total > limit:
        raise ArithmeticOverflow(f"{a} + {b} exceeds balance range")
    return total


def checked_sub(
    a: int,
    b: int,
    error: type[LedgerError] = InsufficientBalance,
    message: str | None = None,
) -> int:
    """Subtract ``b`` from ``a``; raise ``error`` instead of going negative."""
    if b > a:
        raise error(message or f"{b} exceeds available {a}")
    return a - b
