"""
Transaction Status Enum.

Aggregate status of a paid transaction across its per-store orders.
"""
from enum import Enum


class TransactionStatus(str, Enum):
    """Transaction status values."""

    PENDING = "pending"
    PAID = "paid"
    PARTIALLY_FULFILLED = "partially_fulfilled"
    FULFILLED = "fulfilled"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Whether no further automatic transition happens from this status."""
        return self in (
            TransactionStatus.PARTIALLY_FULFILLED,
            TransactionStatus.FULFILLED,
            TransactionStatus.FAILED,
        )
