"""Domain enums."""

from .store_order_status import StoreOrderStatus
from .transaction_status import TransactionStatus

__all__ = ["StoreOrderStatus", "TransactionStatus"]
