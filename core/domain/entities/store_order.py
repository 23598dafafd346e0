"""
StoreOrder entity - one ledger entry per (transaction, store) pair.

`remote_order_id` is set if and only if the entry is confirmed.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ..enums import StoreOrderStatus


@dataclass
class StoreOrder:
    transaction_id: int
    store_domain: str
    status: StoreOrderStatus = StoreOrderStatus.PENDING
    remote_order_id: Optional[str] = None
    remote_order_number: Optional[str] = None
    error_message: Optional[str] = None
    attempt_count: int = 0
    order_amount: Decimal = Decimal("0")
    order_items: List[Dict[str, Any]] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    synced_at: Optional[datetime] = None
    version: int = 0

    def __post_init__(self):
        self.status = StoreOrderStatus(self.status)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def mark_submitted(self) -> None:
        self.status = StoreOrderStatus.SUBMITTED
        self._touch()

    def confirm(self, remote_order_id: str, remote_order_number: Optional[str], attempts: int) -> None:
        """Record the order created at the store."""
        if not remote_order_id:
            raise ValueError("Confirmed store order requires a remote order id")
        self.status = StoreOrderStatus.CONFIRMED
        self.remote_order_id = remote_order_id
        self.remote_order_number = remote_order_number
        self.error_message = None
        self.attempt_count = attempts
        self.synced_at = self._touch()

    def fail(self, error_message: str, attempts: int) -> None:
        self.status = StoreOrderStatus.FAILED
        self.remote_order_id = None
        self.remote_order_number = None
        self.error_message = error_message
        self.attempt_count = attempts
        self._touch()

    def release(self, error_message: Optional[str], attempts: int) -> None:
        """Back to pending so a later run picks the pair up again."""
        self.status = StoreOrderStatus.PENDING
        self.remote_order_id = None
        self.remote_order_number = None
        self.error_message = error_message
        self.attempt_count = attempts
        self._touch()

    def _touch(self) -> datetime:
        self.updated_at = datetime.now(timezone.utc)
        return self.updated_at
