"""Event definitions and serialization helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Union
from uuid import uuid4


AccountId = str


class EventType(str, Enum):
    """All supported event types."""

    TRANSFER = "Transfer"
    APPROVAL = "Approval"


def utc_now() -> datetime:
    """Return a timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


def format_timestamp(ts: datetime) -> str:
    """Format timestamp as ISO-8601 with Z suffix."""
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class TransferRecord:
    """Value moved between accounts.

    ``from_account`` is ``None`` for a mint and ``to_account`` is ``None`` for a burn.
    """

    from_account: AccountId | None
    to_account: AccountId | None
    value: int

    event_type = EventType.TRANSFER

    @property
    def topics(self) -> tuple[Any, ...]:
        return (self.from_account, self.to_account, self.value)

    def to_payload(self) -> dict[str, Any]:
        # Amounts travel as decimal strings so 128-bit values survive JSON.
        return {
            "from": self.from_account,
            "to": self.to_account,
            "value": str(self.value),
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "TransferRecord":
        return cls(
            from_account=payload.get("from"),
            to_account=payload.get("to"),
            value=int(payload["value"]),
        )


@dataclass(frozen=True)
class ApprovalRecord:
    """Owner set the amount a spender may move on its behalf."""

    owner: AccountId
    spender: AccountId
    value: int

    event_type = EventType.APPROVAL

    @property
    def topics(self) -> tuple[Any, ...]:
        return (self.owner, self.spender, self.value)

    def to_payload(self) -> dict[str, Any]:
        return {
            "owner": self.owner,
            "spender": self.spender,
            "value": str(self.value),
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ApprovalRecord":
        return cls(
            owner=payload["owner"],
            spender=payload["spender"],
            value=int(payload["value"]),
        )


EventRecord = Union[TransferRecord, ApprovalRecord]

_RECORD_TYPES: dict[EventType, type] = {
    EventType.TRANSFER: TransferRecord,
    EventType.APPROVAL: ApprovalRecord,
}


@dataclass(frozen=True)
class Event:
    """Immutable envelope for a persisted event."""

    event_id: str
    event_type: EventType
    timestamp: datetime
    sequence_num: int
    payload: dict[str, Any]
    metadata: dict[str, Any] = field(default_factory=dict)

    def record(self) -> EventRecord:
        """Decode the payload back into the record the ledger emitted."""
        return _RECORD_TYPES[self.event_type].from_payload(self.payload)

    def to_dict(self) -> dict[str, Any]:
        """Serialize event to a JSON-compatible dict."""
        return {
            "event_id": self.event_id,
            "event_type": self.event_type.value,
            "timestamp": format_timestamp(self.timestamp),
            "sequence_num": self.sequence_num,
            "payload": self.payload,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Event":
        """Deserialize event from a dict."""
        ts = datetime.fromisoformat(data["timestamp"].replace("Z", "+00:00"))
        return cls(
            event_id=data["event_id"],
            event_type=EventType(data["event_type"]),
            timestamp=ts,
            sequence_num=int(data["sequence_num"]),
            payload=data.get("payload", {}),
            metadata=data.get("metadata", {}),
        )


def new_event(
    record: EventRecord,
    sequence_num: int,
    metadata: dict[str, Any] | None = None,
) -> Event:
    """Wrap a ledger record in a new envelope with a fresh UUID."""
    return Event(
        event_id=str(uuid4()),
        event_type=record.event_type,
        timestamp=utc_now(),
        sequence_num=sequence_num,
        payload=record.to_payload(),
        metadata=metadata or {},
    )
