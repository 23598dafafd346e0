"""Domain layer - pure domain models and interfaces."""

from .entities import CartItem, Store, StoreOrder, Transaction
from .enums import StoreOrderStatus, TransactionStatus
from .repositories import StoreOrderRepository, StoreRepository, TransactionRepository
from .value_objects import BuyerContact, ExecutionID, Money, ShippingAddress, ShippingLine

__all__ = [
    "BuyerContact",
    "CartItem",
    "ExecutionID",
    "Money",
    "ShippingAddress",
    "ShippingLine",
    "Store",
    "StoreOrder",
    "StoreOrderRepository",
    "StoreOrderStatus",
    "StoreRepository",
    "Transaction",
    "TransactionRepository",
    "TransactionStatus",
]
