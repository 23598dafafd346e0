"""
SQLAlchemy StoreOrder Repository Implementation.

Implements the per-store order ledger on top of the `store_orders` table.
Uniqueness of (transaction_id, store_domain) is enforced by the database.
"""
from typing import List, Optional
import logging

from sqlalchemy import and_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.entities import StoreOrder
from core.domain.enums import StoreOrderStatus
from core.domain.repositories import StoreOrderRepository
from core.infrastructure.database.mappers import StoreOrderMapper, as_utc
from core.infrastructure.database.models import StoreOrderModel


logger = logging.getLogger(__name__)


class SQLAlchemyStoreOrderRepository(StoreOrderRepository):
    """SQLAlchemy implementation of StoreOrderRepository."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get_model(self, transaction_id: int, store_domain: str) -> Optional[StoreOrderModel]:
        result = await self.session.execute(
            select(StoreOrderModel).where(
                and_(
                    StoreOrderModel.transaction_id == transaction_id,
                    StoreOrderModel.store_domain == store_domain,
                )
            )
        )
        return result.scalar_one_or_none()

    async def find(self, transaction_id: int, store_domain: str) -> Optional[StoreOrder]:
        model = await self._get_model(transaction_id, store_domain)
        return StoreOrderMapper.to_domain(model) if model else None

    async def add(self, store_order: StoreOrder) -> None:
        """
        Insert a new ledger entry.

        Raises:
            IntegrityError: If the (transaction, store) pair already exists
        """
        model = StoreOrderMapper.to_persistence(store_order)
        self.session.add(model)
        await self.session.flush()

        store_order.created_at = as_utc(model.created_at)
        store_order.updated_at = as_utc(model.updated_at)

    async def upsert(self, store_order: StoreOrder) -> None:
        """
        Insert or update the entry of a (transaction, store) pair.

        Args:
            store_order: Ledger entry to persist
        """
        model = await self._get_model(store_order.transaction_id, store_order.store_domain)

        if model is None:
            await self.add(store_order)
            logger.info(
                f"✅ Recorded store order {store_order.transaction_id}/{store_order.store_domain}: "
                f"{store_order.status.value}"
            )
            return

        StoreOrderMapper.update_persistence(store_order, model)
        model.version = (model.version or 0) + 1
        await self.session.flush()
        store_order.version = model.version
        logger.info(
            f"✅ Updated store order {store_order.transaction_id}/{store_order.store_domain}: "
            f"{store_order.status.value}"
        )

    async def compare_and_set(self, store_order: StoreOrder, expected_version: int) -> bool:
        """
        Update an entry only if nobody wrote it since it was read.

        Args:
            store_order: Entry with the new values
            expected_version: Version observed when the entry was read

        Returns:
            True if this call won the write, False if the row moved on
        """
        result = await self.session.execute(
            update(StoreOrderModel)
            .where(
                and_(
                    StoreOrderModel.transaction_id == store_order.transaction_id,
                    StoreOrderModel.store_domain == store_order.store_domain,
                    StoreOrderModel.version == expected_version,
                )
            )
            .values(version=expected_version + 1, **StoreOrderMapper.to_values(store_order))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return False

        store_order.version = expected_version + 1
        return True

    async def find_by_transaction(self, transaction_id: int) -> List[StoreOrder]:
        result = await self.session.execute(
            select(StoreOrderModel)
            .where(StoreOrderModel.transaction_id == transaction_id)
            .order_by(StoreOrderModel.id)
        )
        return [StoreOrderMapper.to_domain(model) for model in result.scalars().all()]

    async def find_by_store(self, store_domain: str, limit: int = 100) -> List[StoreOrder]:
        result = await self.session.execute(
            select(StoreOrderModel)
            .where(StoreOrderModel.store_domain == store_domain)
            .order_by(StoreOrderModel.created_at.desc(), StoreOrderModel.id.desc())
            .limit(limit)
        )
        return [StoreOrderMapper.to_domain(model) for model in result.scalars().all()]

    async def find_by_status(self, status: StoreOrderStatus, limit: int = 100) -> List[StoreOrder]:
        result = await self.session.execute(
            select(StoreOrderModel)
            .where(StoreOrderModel.status == StoreOrderStatus(status).value)
            .order_by(StoreOrderModel.updated_at.desc(), StoreOrderModel.id.desc())
            .limit(limit)
        )
        return [StoreOrderMapper.to_domain(model) for model in result.scalars().all()]

    async def find_recent_errors(self, limit: int = 20) -> List[StoreOrder]:
        result = await self.session.execute(
            select(StoreOrderModel)
            .where(
                and_(
                    StoreOrderModel.status == StoreOrderStatus.FAILED.value,
                    StoreOrderModel.error_message.is_not(None),
                )
            )
            .order_by(StoreOrderModel.updated_at.desc(), StoreOrderModel.id.desc())
            .limit(limit)
        )
        return [StoreOrderMapper.to_domain(model) for model in result.scalars().all()]
