"""
SQLAlchemy Transaction Repository Implementation.

Implements TransactionRepository interface using SQLAlchemy.
"""
from typing import List, Optional
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.domain.entities import Transaction
from core.domain.enums import TransactionStatus
from core.domain.exceptions import UnknownTransactionError
from core.domain.repositories import TransactionRepository
from core.infrastructure.database.mappers import TransactionMapper, as_utc
from core.infrastructure.database.models import TransactionModel


logger = logging.getLogger(__name__)


class SQLAlchemyTransactionRepository(TransactionRepository):
    """
    SQLAlchemy implementation of TransactionRepository.

    Handles persistence of Transaction aggregates and their cart items.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def add(self, transaction: Transaction) -> Transaction:
        """
        Insert a new transaction.

        Args:
            transaction: Transaction aggregate to persist

        Returns:
            The same aggregate with `id` and `created_at` filled in
        """
        model = TransactionMapper.to_persistence(transaction)
        self.session.add(model)
        await self.session.flush()

        transaction.id = model.id
        transaction.created_at = as_utc(model.created_at)
        logger.info(f"✅ Created transaction: {model.id} ({len(transaction.cart_items)} items)")
        return transaction

    async def find_by_id(self, transaction_id: int) -> Optional[Transaction]:
        """
        Get transaction by ID.

        Args:
            transaction_id: Transaction ID to lookup

        Returns:
            Transaction aggregate if found, None otherwise
        """
        result = await self.session.execute(
            select(TransactionModel)
            .options(selectinload(TransactionModel.cart_items))
            .where(TransactionModel.id == transaction_id)
        )
        model = result.scalar_one_or_none()

        if not model:
            logger.info(f"Transaction not found: {transaction_id}")
            return None

        return TransactionMapper.to_domain(model)

    async def find_by_status(self, status: TransactionStatus, limit: int = 100) -> List[Transaction]:
        result = await self.session.execute(
            select(TransactionModel)
            .options(selectinload(TransactionModel.cart_items))
            .where(TransactionModel.status == TransactionStatus(status).value)
            .order_by(TransactionModel.created_at.desc(), TransactionModel.id.desc())
            .limit(limit)
        )
        return [TransactionMapper.to_domain(model) for model in result.scalars().all()]

    async def update(self, transaction: Transaction) -> None:
        """
        Persist status and payment fields of an existing transaction.

        Raises:
            UnknownTransactionError: If the transaction does not exist
        """
        model = await self.session.get(TransactionModel, transaction.id)
        if model is None:
            raise UnknownTransactionError(transaction.id)

        TransactionMapper.update_persistence(transaction, model)
        await self.session.flush()
        logger.info(f"Updated transaction {transaction.id}: status={transaction.status.value}")
