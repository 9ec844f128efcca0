"""Append-only event ledger backing token persistence."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Iterable, Sequence

import orjson

from mintable.ledger.events import Event, EventRecord, new_event


class EventLedger:
    """Append-only JSONL event store with sequence tracking."""

    def __init__(self, ledger_path: str | Path) -> None:
        self.ledger_path = Path(ledger_path)
        self.ledger_path.mkdir(parents=True, exist_ok=True)
        self.events_file = self.ledger_path / "events.jsonl"
        self.sequence_file = self.ledger_path / "sequence.txt"
        self._sequence = self._load_sequence()

    def _load_sequence(self) -> int:
        if self.sequence_file.exists():
            try:
                seq = int(self.sequence_file.read_text().strip())
            except ValueError:
                seq = 0
            # The sequence file is written after the event lines; trust the larger value.
            if self.events_file.exists():
                seq = max(seq, self._read_last_sequence())
            return seq
        if not self.events_file.exists():
            return 0
        return self._read_last_sequence()

    def _read_last_sequence(self) -> int:
        try:
            with open(self.events_file, "rb") as handle:
                handle.seek(0, os.SEEK_END)
                size = handle.tell()
                if size == 0:
                    return 0
                offset = min(size, 4096)
                handle.seek(-offset, os.SEEK_END)
                chunk = handle.read(offset)
            lines = chunk.splitlines()
            if not lines:
                return 0
            last = orjson.loads(lines[-1])
            return int(last.get("sequence_num", 0))
        except OSError:
            return 0

    def _persist_sequence(self) -> None:
        self.sequence_file.write_text(str(self._sequence))

    def last_sequence(self) -> int:
        """Return the last known sequence number."""
        return self._sequence

    def is_empty(self) -> bool:
        return not self.events_file.exists() or self.events_file.stat().st_size == 0

    def append(self, record: EventRecord, metadata: dict[str, Any] | None = None) -> Event:
        """Wrap a ledger record in an envelope, append it, and return it."""
        return self.append_many([record], metadata)[0]

    def append_many(
        self,
        records: Sequence[EventRecord],
        metadata: dict[str, Any] | None = None,
    ) -> list[Event]:
        """Wrap records in consecutive envelopes and append them as one batch."""
        events = [
            new_event(record, self._sequence + offset, dict(metadata or {}))
            for offset, record in enumerate(records, start=1)
        ]
        self.append_events(events)
        return events

    def append_events(self, events: Sequence[Event]) -> None:
        """Append existing events with a single write.

        The sequence only advances once the write succeeded, so a failed batch
        leaves both the file and the counter where they were.
        """
        if not events:
            return
        payload = b"".join(orjson.dumps(event.to_dict()) + b"\n" for event in events)
        with open(self.events_file, "ab") as handle:
            handle.write(payload)
        self._sequence = max(self._sequence, events[-1].sequence_num)
        self._persist_sequence()

    def iter_events(self) -> Iterable[Event]:
        """Iterate all events from the ledger."""
        if not self.events_file.exists():
            return iter(())

        def _iter() -> Iterable[Event]:
            with open(self.events_file, "rb") as handle:
                for line in handle:
                    if not line.strip():
                        continue
                    yield Event.from_dict(orjson.loads(line))

        return _iter()

    def iter_events_tail(self, limit: int) -> Iterable[Event]:
        """Iterate the last N events without loading the full ledger."""
        if limit <= 0 or not self.events_file.exists():
            return iter(())
        chunk_size = 4096
        file_size = self.events_file.stat().st_size
        if file_size == 0:
            return iter(())

        def _iter_tail() -> Iterable[Event]:
            buffer = b""
            read_bytes = 0
            with open(self.events_file, "rb") as handle:
                while read_bytes < file_size:
                    read_size = min(chunk_size, file_size - read_bytes)
                    handle.seek(-(read_bytes + read_size), os.SEEK_END)
                    buffer = handle.read(read_size) + buffer
                    read_bytes += read_size
                    if len(buffer.splitlines()) >= limit + 1:
                        break
            lines = [line for line in buffer.splitlines() if line.strip()]
            # When the scan stopped mid-file the first line may be partial.
            for line in lines[-limit:]:
                yield Event.from_dict(orjson.loads(line))

        return _iter_tail()

    def load_all(self) -> list[Event]:
        """Load all events into memory."""
        return list(self.iter_events())
