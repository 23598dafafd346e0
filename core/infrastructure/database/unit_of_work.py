"""
Unit of Work Pattern Implementation.

Manages database transactions and repository lifecycle.
"""
from typing import Optional
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.infrastructure.database.repositories import (
    SQLAlchemyStoreOrderRepository,
    SQLAlchemyStoreRepository,
    SQLAlchemyTransactionRepository,
)


logger = logging.getLogger(__name__)


class UnitOfWork:
    """
    Unit of Work pattern implementation.

    Opens one session per scope. Each concurrent submitter uses its own
    unit of work, sessions are never shared between tasks.

    Usage:
        async with UnitOfWork(session_factory) as uow:
            transaction = await uow.transactions.find_by_id(8)
            transaction.mark_paid("mp-123")
            await uow.transactions.update(transaction)
            await uow.commit()
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        """
        Initialize Unit of Work.

        Args:
            session_factory: SQLAlchemy async session factory
        """
        self._session_factory = session_factory
        self._session: Optional[AsyncSession] = None

        # Lazy-loaded repositories
        self._stores: Optional[SQLAlchemyStoreRepository] = None
        self._transactions: Optional[SQLAlchemyTransactionRepository] = None
        self._store_orders: Optional[SQLAlchemyStoreOrderRepository] = None

    async def __aenter__(self) -> "UnitOfWork":
        """Start transaction scope."""
        self._session = self._session_factory()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """
        Exit async context.

        Rolls back transaction if exception occurred.
        """
        if exc_type is not None:
            logger.error(f"Transaction failed: {exc_val}")
            await self.rollback()
        await self.session.close()

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("UnitOfWork not initialized. Use async context manager.")
        return self._session

    @property
    def stores(self) -> SQLAlchemyStoreRepository:
        if self._stores is None:
            self._stores = SQLAlchemyStoreRepository(self.session)
        return self._stores

    @property
    def transactions(self) -> SQLAlchemyTransactionRepository:
        if self._transactions is None:
            self._transactions = SQLAlchemyTransactionRepository(self.session)
        return self._transactions

    @property
    def store_orders(self) -> SQLAlchemyStoreOrderRepository:
        if self._store_orders is None:
            self._store_orders = SQLAlchemyStoreOrderRepository(self.session)
        return self._store_orders

    async def commit(self) -> None:
        """Commit transaction."""
        try:
            await self.session.commit()
        except Exception as e:
            logger.error(f"❌ Commit failed: {e}")
            await self.rollback()
            raise

    async def rollback(self) -> None:
        """Rollback transaction."""
        await self.session.rollback()
        logger.warning("Transaction rolled back")


def create_uow(session_factory: async_sessionmaker[AsyncSession]) -> UnitOfWork:
    """Create a new Unit of Work instance.

    Args:
        session_factory: SQLAlchemy async session factory

    Returns:
        UnitOfWork instance
    """
    return UnitOfWork(session_factory)
