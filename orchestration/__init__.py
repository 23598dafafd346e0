"""Orchestration layer - fan-out of paid transactions into per-store orders."""

from typing import TYPE_CHECKING, Optional

from .bus import EventBusProtocol, InMemoryEventBus
from .coordinator import OrchestrationCoordinator
from .events import Event, EventMetadata
from .ledger import Claim, ClaimOutcome, StoreOrderLedger
from .models import FanOutResult, OrderIntent, PaymentConfirmation, StoreOrderResult
from .planner import plan, plan_resubmission
from .registry import StoreRegistry
from .retry import JitterStrategy, RetryPolicy
from .submitter import RemoteOrderClient, StoreOrderSubmitter, build_remote_request

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from core.settings.modules.app_settings import AppSettings

__all__ = [
    "Claim",
    "ClaimOutcome",
    "Event",
    "EventBusProtocol",
    "EventMetadata",
    "FanOutResult",
    "InMemoryEventBus",
    "JitterStrategy",
    "OrchestrationCoordinator",
    "OrderIntent",
    "PaymentConfirmation",
    "RemoteOrderClient",
    "RetryPolicy",
    "StoreOrderLedger",
    "StoreOrderResult",
    "StoreOrderSubmitter",
    "StoreRegistry",
    "build_remote_request",
    "plan",
    "plan_resubmission",
]


def create_default_coordinator(
    session_factory: "async_sessionmaker[AsyncSession]",
    client: Optional[RemoteOrderClient] = None,
    settings: Optional["AppSettings"] = None,
) -> OrchestrationCoordinator:
    """Create a coordinator from settings with an in-memory event bus.

    Args:
        session_factory: SQLAlchemy async session factory
        client: Remote order client (Shopify by default)
        settings: Application settings (environment by default)

    Returns:
        OrchestrationCoordinator instance
    """
    bus = InMemoryEventBus()
    return OrchestrationCoordinator.from_settings(
        session_factory,
        client=client,
        settings=settings,
        event_bus=bus,
    )
