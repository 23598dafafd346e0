"""Order ledger - durable per-store outcomes and the claim on each pair."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.domain.entities import StoreOrder
from core.domain.enums import StoreOrderStatus
from core.infrastructure.database.unit_of_work import create_uow
from core.infrastructure.logging import get_logger

from .models import OrderIntent, utc_now


logger = get_logger("orchestration.ledger")


class ClaimOutcome(str, Enum):
    CLAIMED = "claimed"
    ALREADY_CONFIRMED = "already_confirmed"
    ALREADY_FAILED = "already_failed"
    IN_FLIGHT = "in_flight"


@dataclass
class Claim:
    outcome: ClaimOutcome
    store_order: Optional[StoreOrder] = None

    @property
    def acquired(self) -> bool:
        return self.outcome == ClaimOutcome.CLAIMED


class StoreOrderLedger:
    """
    Ledger of (transaction, store) pairs.

    A submitter claims its pair before calling the store, so at most one
    attempt per pair is in flight across workers sharing the database. The
    claim is the `submitted` row; it is taken with an insert guarded by the
    unique key, or with a versioned update of an existing row. A `failed`
    row is terminal; only an explicit re-submission takes it again.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        claim_ttl_seconds: float = 600.0,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """
        Args:
            session_factory: SQLAlchemy async session factory
            claim_ttl_seconds: Age after which a `submitted` row counts as abandoned
            clock: Current time source
        """
        self._session_factory = session_factory
        self._claim_ttl = timedelta(seconds=claim_ttl_seconds)
        self._clock = clock

    async def claim(self, intent: OrderIntent, retry_failed: bool = False) -> Claim:
        """Take the pair of `intent` for one submission.

        Args:
            intent: Planned order of one store
            retry_failed: Also take a pair whose last outcome is `failed`
        """
        async with create_uow(self._session_factory) as uow:
            existing = await uow.store_orders.find(intent.transaction_id, intent.store_domain)

            if existing is None:
                entry = StoreOrder(
                    transaction_id=intent.transaction_id,
                    store_domain=intent.store_domain,
                    order_amount=intent.order_amount,
                    order_items=intent.items_snapshot(),
                )
                entry.mark_submitted()
                try:
                    await uow.store_orders.add(entry)
                    await uow.commit()
                except IntegrityError:
                    await uow.rollback()
                    logger.info(
                        f"Store order {intent.transaction_id}/{intent.store_domain} "
                        f"claimed by another worker"
                    )
                    return Claim(ClaimOutcome.IN_FLIGHT)
                return Claim(ClaimOutcome.CLAIMED, entry)

            if existing.status == StoreOrderStatus.CONFIRMED:
                return Claim(ClaimOutcome.ALREADY_CONFIRMED, existing)

            if existing.status == StoreOrderStatus.FAILED and not retry_failed:
                return Claim(ClaimOutcome.ALREADY_FAILED, existing)

            if existing.status == StoreOrderStatus.SUBMITTED and not self._is_abandoned(existing):
                return Claim(ClaimOutcome.IN_FLIGHT, existing)

            expected_version = existing.version
            existing.order_amount = intent.order_amount
            existing.order_items = intent.items_snapshot()
            existing.mark_submitted()
            won = await uow.store_orders.compare_and_set(existing, expected_version)
            if not won:
                await uow.rollback()
                return Claim(ClaimOutcome.IN_FLIGHT)
            await uow.commit()
            return Claim(ClaimOutcome.CLAIMED, existing)

    async def record(self, store_order: StoreOrder) -> None:
        """Write the outcome of a claimed pair."""
        async with create_uow(self._session_factory) as uow:
            await uow.store_orders.upsert(store_order)
            await uow.commit()

    async def load(self, transaction_id: int) -> List[StoreOrder]:
        async with create_uow(self._session_factory) as uow:
            return await uow.store_orders.find_by_transaction(transaction_id)

    def _is_abandoned(self, entry: StoreOrder) -> bool:
        if entry.updated_at is None:
            return True
        return self._clock() - entry.updated_at >= self._claim_ttl
