"""
Store Order Status Enum.

Status values for one (transaction, store) ledger entry.
"""
from enum import Enum


class StoreOrderStatus(str, Enum):
    """Store order status values."""

    PENDING = "pending"
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (StoreOrderStatus.CONFIRMED, StoreOrderStatus.FAILED)
