from __future__ import annotations

from mintable.ledger import ApprovalRecord, Event, EventBus, EventType, TransferRecord


def test_publish_appends_then_dispatches(bus: EventBus) -> None:
    seen: list[Event] = []
    bus.register(EventType.TRANSFER, seen.append)

    event = bus.publish(TransferRecord(None, "m", 5), {"caller": "m"})
    bus.publish(ApprovalRecord("m", "s", 1))

    assert seen == [event]
    assert bus.ledger.load_all()[0].event_id == event.event_id
    assert bus.ledger.last_sequence() == 2


def test_register_all_receives_every_type(bus: EventBus) -> None:
    seen: list[EventType] = []
    bus.register_all(lambda event: seen.append(event.event_type))

    bus.publish(TransferRecord("a", "b", 1))
    bus.publish(ApprovalRecord("a", "s", 1))

    assert seen == [EventType.TRANSFER, EventType.APPROVAL]


def test_failing_handler_does_not_block_others(bus: EventBus) -> None:
    seen: list[Event] = []

    def broken(event: Event) -> None:
        raise RuntimeError("boom")

    bus.register(EventType.APPROVAL, broken)
    bus.register(EventType.APPROVAL, seen.append)

    event = bus.publish(ApprovalRecord("a", "s", 3))

    assert seen == [event]
    assert len(bus.ledger.load_all()) == 1
