"""Token state and reconstruction from the event ledger."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable

import structlog

from mintable.ledger.amounts import DEFAULT_BALANCE_BITS, checked_add, checked_sub, max_balance
from mintable.ledger.errors import LedgerError, ReplayError
from mintable.ledger.events import AccountId, ApprovalRecord, Event, EventType, TransferRecord


AllowanceKey = tuple[AccountId, AccountId]


@dataclass
class TokenState:
    name: str
    minter: AccountId
    total_supply: int = 0
    balances: dict[AccountId, int] = field(default_factory=dict)
    allowances: dict[AllowanceKey, int] = field(default_factory=dict)
    last_event_sequence: int = 0

    def balance_of(self, owner: AccountId) -> int:
        return self.balances.get(owner, 0)

    def allowance(self, owner: AccountId, spender: AccountId) -> int:
        return self.allowances.get((owner, spender), 0)

    def copy(self) -> "TokenState":
        return replace(self, balances=dict(self.balances), allowances=dict(self.allowances))

    def invariant_violations(self, limit: int | None = None) -> list[str]:
        """Return the list of broken ledger invariants (empty when consistent)."""
        violations: list[str] = []
        held = sum(self.balances.values())
        if held != self.total_supply:
            violations.append(f"total_supply {self.total_supply} != sum of balances {held}")
        for owner, balance in self.balances.items():
            if balance < 0:
                violations.append(f"negative balance for {owner}: {balance}")
            elif limit is not None and balance > limit:
                violations.append(f"balance for {owner} exceeds range: {balance}")
        for (owner, spender), value in self.allowances.items():
            if value < 0:
                violations.append(f"negative allowance {owner}->{spender}: {value}")
        if limit is not None and self.total_supply > limit:
            violations.append(f"total_supply exceeds range: {self.total_supply}")
        return violations


class StateManager:
    """Rebuilds token state by replaying Transfer and Approval events.

    The first event must be the genesis ``Transfer`` (no sender, zero value)
    written when the ledger was created; its recipient is the minter and its
    metadata carries the token name.
    """

    def __init__(self, balance_bits: int = DEFAULT_BALANCE_BITS) -> None:
        self.limit = max_balance(balance_bits)
        self.state: TokenState | None = None
        self._log = structlog.get_logger(__name__)

    def rebuild(self, events: Iterable[Event]) -> TokenState:
        self.state = None
        for event in events:
            self.apply_event(event)
        if self.state is None:
            raise ReplayError("event ledger is empty; no genesis event")
        violations = self.state.invariant_violations(self.limit)
        if violations:
            raise ReplayError("; ".join(violations))
        self._log.info(
            "token_state_rebuilt",
            name=self.state.name,
            total_supply=str(self.state.total_supply),
            accounts=len(self.state.balances),
            last_event_sequence=self.state.last_event_sequence,
        )
        return self.state

    def apply_event(self, event: Event) -> None:
        if self.state is None:
            self.state = self._genesis(event)
            return
        self.state.last_event_sequence = max(self.state.last_event_sequence, event.sequence_num)
        handler = {
            EventType.TRANSFER: self._handle_transfer,
            EventType.APPROVAL: self._handle_approval,
        }.get(event.event_type)
        if handler is None:
            return
        try:
            handler(event.record())
        except LedgerError as exc:
            raise ReplayError(f"event {event.sequence_num}: {exc.message}") from exc

    def _genesis(self, event: Event) -> TokenState:
        if event.event_type != EventType.TRANSFER or not event.metadata.get("genesis"):
            raise ReplayError(f"event {event.sequence_num} is not a genesis event")
        record = event.record()
        if record.from_account is not None or record.to_account is None or record.value != 0:
            raise ReplayError("genesis event must be a zero-value mint to the minter")
        return TokenState(
            name=str(event.metadata.get("name", "")),
            minter=record.to_account,
            balances={record.to_account: 0},
            last_event_sequence=event.sequence_num,
        )

    def _handle_transfer(self, record: TransferRecord) -> None:
        state = self.state
        value = record.value
        if record.from_account is not None:
            source = state.balance_of(record.from_account)
            state.balances[record.from_account] = checked_sub(source, value)
        else:
            state.total_supply = checked_add(state.total_supply, value, self.limit)
        if record.to_account is not None:
            target = state.balance_of(record.to_account)
            state.balances[record.to_account] = checked_add(target, value, self.limit)
        else:
            state.total_supply = checked_sub(state.total_supply, value)

    def _handle_approval(self, record: ApprovalRecord) -> None:
        self.state.allowances[(record.owner, record.spender)] = record.value
