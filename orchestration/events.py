"""Orchestration events - Event, EventMetadata."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class EventMetadata:
    """Metadata for an event."""

    execution_id: str
    transaction_id: int
    timestamp: datetime


@dataclass
class Event:
    """Something that happened during a fan-out run.

    Names: `fanout.started`, `store_order.finished`, `fanout.finished`.
    """

    name: str
    payload: dict[str, object]
    metadata: EventMetadata
