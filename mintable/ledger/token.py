"""Mintable and burnable fungible token ledger.

Only the minter fixed at construction may mint; any account may burn its own
balance, transfer it, or approve a spender to move part of it with
``transfer_from``.

Every write operation follows the same shape: validate and compute the new
values, then commit them and record the emitted events. A raised
:class:`~mintable.ledger.errors.LedgerError` therefore always means nothing
changed, including the event outbox.
"""

from __future__ import annotations

from mintable.ledger.amounts import (
    DEFAULT_BALANCE_BITS,
    checked_add,
    checked_sub,
    max_balance,
    require_amount,
)
from mintable.ledger.errors import InsufficientAllowance, InsufficientBalance, Unauthorized
from mintable.ledger.events import AccountId, ApprovalRecord, EventRecord, TransferRecord
from mintable.ledger.state import TokenState


class MintableToken:
    """Single-asset ledger with a fixed minter and ERC-20 style allowances."""

    def __init__(
        self,
        name: str,
        caller: AccountId,
        balance_bits: int = DEFAULT_BALANCE_BITS,
    ) -> None:
        self.max_balance = max_balance(balance_bits)
        self.state = TokenState(name=name, minter=caller, balances={caller: 0})
        self.emitted: list[EventRecord] = []
        # Genesis marker: a zero-value mint to the creator. Replay keys off it.
        self._emit(TransferRecord(None, caller, 0))

    @classmethod
    def from_state(
        cls,
        state: TokenState,
        balance_bits: int = DEFAULT_BALANCE_BITS,
    ) -> "MintableToken":
        """Wrap an already-built state (e.g. from replay) without emitting genesis."""
        token = cls.__new__(cls)
        token.max_balance = max_balance(balance_bits)
        token.state = state
        token.emitted = []
        return token

    # Read

    def name(self) -> str:
        return self.state.name

    def minter(self) -> AccountId:
        return self.state.minter

    def total_supply(self) -> int:
        return self.state.total_supply

    def balance_of(self, owner: AccountId) -> int:
        return self.state.balance_of(owner)

    def allowance(self, owner: AccountId, spender: AccountId) -> int:
        return self.state.allowance(owner, spender)

    def drain_events(self) -> list[EventRecord]:
        """Return and clear the records emitted since the last drain."""
        events, self.emitted = self.emitted, []
        return events

    # Write

    def mint(self, caller: AccountId, to: AccountId, value: int) -> bool:
        if caller != self.state.minter:
            raise Unauthorized(f"{caller} is not the minter")
        value = require_amount(value, self.max_balance)
        new_balance = checked_add(self.balance_of(to), value, self.max_balance)
        new_supply = checked_add(self.state.total_supply, value, self.max_balance)

        self.state.balances[to] = new_balance
        self.state.total_supply = new_supply
        self._emit(TransferRecord(None, to, value))
        return True

    def burn(self, caller: AccountId, value: int) -> bool:
        value = require_amount(value, self.max_balance)
        new_balance = checked_sub(
            self.balance_of(caller), value, message="not enough balance to burn"
        )

        self.state.balances[caller] = new_balance
        # Supply covers every balance, so this cannot go negative.
        self.state.total_supply -= value
        self._emit(TransferRecord(caller, None, value))
        return True

    def transfer(self, caller: AccountId, to: AccountId, value: int) -> bool:
        value = require_amount(value, self.max_balance)
        changes = self._plan_transfer(caller, to, value)

        self.state.balances.update(changes)
        self._emit(TransferRecord(caller, to, value))
        return True

    def approve(self, caller: AccountId, spender: AccountId, value: int) -> bool:
        value = require_amount(value, self.max_balance)

        self.state.allowances[(caller, spender)] = value
        self._emit(ApprovalRecord(caller, spender, value))
        return True

    def transfer_from(
        self,
        caller: AccountId,
        from_: AccountId,
        to: AccountId,
        value: int,
    ) -> bool:
        """Move ``value`` from ``from_`` to ``to`` against the caller's allowance.

        The balance check is evaluated before the allowance check, but both run
        before anything is written.
        """
        value = require_amount(value, self.max_balance)
        changes = self._plan_transfer(from_, to, value)
        remaining = checked_sub(
            self.allowance(from_, caller),
            value,
            error=InsufficientAllowance,
            message="not enough allowance to transfer",
        )

        self.state.balances.update(changes)
        self.state.allowances[(from_, caller)] = remaining
        self._emit(
            TransferRecord(from_, to, value),
            ApprovalRecord(from_, caller, remaining),
        )
        return True

    def _plan_transfer(self, from_: AccountId, to: AccountId, value: int) -> dict[AccountId, int]:
        """Return the balance entries a transfer would write, without writing them."""
        from_balance = self.balance_of(from_)
        if from_balance < value:
            raise InsufficientBalance("not enough balance to transfer")
        if from_ == to:
            return {from_: from_balance}
        return {
            from_: from_balance - value,
            to: checked_add(self.balance_of(to), value, self.max_balance),
        }

    def _emit(self, *records: EventRecord) -> None:
        self.emitted.extend(records)
