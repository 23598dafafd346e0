"""Repository interfaces."""

from .store_order_repository import StoreOrderRepository
from .store_repository import StoreRepository
from .transaction_repository import TransactionRepository

__all__ = ["StoreOrderRepository", "StoreRepository", "TransactionRepository"]
