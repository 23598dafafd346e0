"""Orchestration models - PaymentConfirmation, OrderIntent, StoreOrderResult, FanOutResult."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from core.domain.entities import CartItem
from core.domain.enums import StoreOrderStatus, TransactionStatus
from core.domain.value_objects import BuyerContact, ExecutionID, ShippingAddress, ShippingLine


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class PaymentConfirmation:
    """Trigger: transaction X is now paid."""

    transaction_id: int
    payment_reference: str
    paid_amount: Decimal
    paid_at: Optional[datetime] = None
    payment_method: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.paid_amount, Decimal):
            object.__setattr__(self, "paid_amount", Decimal(str(self.paid_amount)))


@dataclass(frozen=True)
class OrderIntent:
    """Planned, not yet submitted order at one store."""

    transaction_id: int
    store_domain: str
    items: Tuple[CartItem, ...]
    buyer_contact: BuyerContact
    shipping_address: Optional[ShippingAddress] = None
    shipping_line: Optional[ShippingLine] = None

    @property
    def order_amount(self) -> Decimal:
        return sum((item.line_total.amount for item in self.items), Decimal("0"))

    def items_snapshot(self) -> List[Dict[str, Any]]:
        """JSON-ready copy of the items, stored on the ledger entry."""
        return [
            {
                "product_ref": item.product_ref,
                "variant_ref": item.variant_ref,
                "title": item.title,
                "quantity": item.quantity,
                "unit_price": str(item.unit_price.amount),
            }
            for item in self.items
        ]


@dataclass
class StoreOrderResult:
    """Terminal (or released) outcome of one store submission."""

    transaction_id: int
    store_domain: str
    status: StoreOrderStatus
    attempts: int = 0
    remote_order_id: Optional[str] = None
    remote_order_number: Optional[str] = None
    error_message: Optional[str] = None
    error_type: Optional[str] = None
    skipped: bool = False

    @property
    def success(self) -> bool:
        return self.status == StoreOrderStatus.CONFIRMED


@dataclass
class FanOutResult:
    """Result of one orchestration run for one transaction."""

    transaction_id: int
    execution_id: ExecutionID
    status: Optional[TransactionStatus]
    started_at: datetime
    finished_at: datetime
    store_results: List[StoreOrderResult] = field(default_factory=list)
    settled: bool = False
    rejected: bool = False
    error: Optional[str] = None
    error_type: Optional[str] = None

    @property
    def confirmed_count(self) -> int:
        return sum(1 for r in self.store_results if r.success)

    @property
    def failed_count(self) -> int:
        return sum(1 for r in self.store_results if r.status == StoreOrderStatus.FAILED)
