"""Tests for EventBus."""

from datetime import datetime, timezone

import pytest

from orchestration.bus import InMemoryEventBus
from orchestration.events import Event, EventMetadata


def _event(name: str = "fanout.started", payload: dict | None = None) -> Event:
    metadata = EventMetadata(
        execution_id="exec-test-123",
        transaction_id=8,
        timestamp=datetime.now(timezone.utc),
    )
    return Event(name=name, payload=payload or {"store_count": 2}, metadata=metadata)


@pytest.mark.asyncio
async def test_event_bus_subscribe_and_publish():
    """Test subscribing and publishing events."""
    bus = InMemoryEventBus()

    events_received: list[Event] = []

    async def handler(event: Event) -> None:
        events_received.append(event)

    bus.subscribe("fanout.started", handler)

    await bus.publish(_event())

    assert len(events_received) == 1
    assert events_received[0].name == "fanout.started"
    assert events_received[0].payload == {"store_count": 2}
    assert events_received[0].metadata.execution_id == "exec-test-123"
    assert events_received[0].metadata.transaction_id == 8


@pytest.mark.asyncio
async def test_event_bus_multiple_handlers():
    """Test multiple handlers for the same event."""
    bus = InMemoryEventBus()

    events_1: list[Event] = []
    events_2: list[Event] = []

    async def handler1(event: Event) -> None:
        events_1.append(event)

    async def handler2(event: Event) -> None:
        events_2.append(event)

    bus.subscribe("store_order.finished", handler1)
    bus.subscribe("store_order.finished", handler2)

    await bus.publish(_event("store_order.finished", {"store_domain": "a.myshopify.com"}))

    assert len(events_1) == 1
    assert len(events_2) == 1


@pytest.mark.asyncio
async def test_event_bus_only_matching_handlers():
    """Handlers of other event names are not called."""
    bus = InMemoryEventBus()
    finished: list[Event] = []

    async def handler(event: Event) -> None:
        finished.append(event)

    bus.subscribe("fanout.finished", handler)

    await bus.publish(_event("fanout.started"))

    assert finished == []


@pytest.mark.asyncio
async def test_event_bus_no_handlers():
    """Test publishing event with no handlers."""
    bus = InMemoryEventBus()

    # Should not raise an error
    await bus.publish(_event())


@pytest.mark.asyncio
async def test_event_bus_failing_handler_does_not_stop_others():
    """A handler error is logged, later handlers still run."""
    bus = InMemoryEventBus()
    received: list[Event] = []

    async def broken(event: Event) -> None:
        raise RuntimeError("observer down")

    async def handler(event: Event) -> None:
        received.append(event)

    bus.subscribe("fanout.finished", broken)
    bus.subscribe("fanout.finished", handler)

    await bus.publish(_event("fanout.finished"))

    assert len(received) == 1
