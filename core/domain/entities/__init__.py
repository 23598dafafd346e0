"""Domain entities."""

from .store import Store, normalize_store_domain
from .store_order import StoreOrder
from .transaction import CartItem, Transaction

__all__ = ["CartItem", "Store", "StoreOrder", "Transaction", "normalize_store_domain"]
