"""SQLAlchemy repository implementations."""

from .sqlalchemy_store_order_repository import SQLAlchemyStoreOrderRepository
from .sqlalchemy_store_repository import SQLAlchemyStoreRepository
from .sqlalchemy_transaction_repository import SQLAlchemyTransactionRepository

__all__ = [
    "SQLAlchemyStoreOrderRepository",
    "SQLAlchemyStoreRepository",
    "SQLAlchemyTransactionRepository",
]
