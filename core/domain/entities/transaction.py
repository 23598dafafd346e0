"""
Transaction aggregate root.

CRITICAL: This file must contain ZERO imports from:
- sqlalchemy
- pydantic
- fastapi
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional

from ..enums import TransactionStatus
from ..exceptions import InvalidStateError
from ..state_machine import ensure_transition
from ..value_objects import BuyerContact, Money, ShippingAddress, ShippingLine
from .store import normalize_store_domain


@dataclass
class CartItem:
    """One cart line, tagged with the store it is bought from."""
    store_id: str
    product_ref: str
    variant_ref: Optional[str]
    quantity: int
    unit_price: Money
    title: str = ""

    def __post_init__(self):
        if self.quantity <= 0:
            raise ValueError(f"Quantity must be positive, got: {self.quantity}")

    @property
    def store_domain(self) -> str:
        return normalize_store_domain(self.store_id)

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity


@dataclass
class Transaction:
    """
    A buyer's payment for a cart that may span several stores.

    Status only moves forward (see state_machine) and the cart is frozen
    once the transaction is paid.
    """
    id: int
    total_amount: Decimal
    buyer: BuyerContact
    currency: str = "CLP"
    status: TransactionStatus = TransactionStatus.PENDING
    cart_items: List[CartItem] = field(default_factory=list)
    payment_reference: Optional[str] = None
    payment_method: Optional[str] = None
    shipping_address: Optional[ShippingAddress] = None
    shipping_costs: Dict[str, ShippingLine] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if not isinstance(self.total_amount, Decimal):
            self.total_amount = Decimal(str(self.total_amount))
        self.status = TransactionStatus(self.status)

    @property
    def total(self) -> Money:
        return Money(amount=self.total_amount, currency=self.currency)

    @property
    def store_domains(self) -> List[str]:
        """Distinct store domains in first-seen cart order."""
        seen: List[str] = []
        for item in self.cart_items:
            if item.store_domain not in seen:
                seen.append(item.store_domain)
        return seen

    def add_item(self, item: CartItem) -> None:
        """Add a cart line. Only allowed before payment."""
        if self.status != TransactionStatus.PENDING:
            raise InvalidStateError(
                f"Cart of transaction {self.id} is frozen (status={self.status.value})"
            )
        self.cart_items.append(item)

    def shipping_for(self, store_domain: str) -> Optional[ShippingLine]:
        return self.shipping_costs.get(store_domain)

    def mark_paid(
        self,
        payment_reference: str,
        paid_at: Optional[datetime] = None,
        payment_method: Optional[str] = None,
    ) -> None:
        """Business rule: payment confirmed, cart becomes immutable."""
        self.transition_to(TransactionStatus.PAID)
        self.payment_reference = payment_reference
        self.payment_method = payment_method or self.payment_method
        self.paid_at = paid_at or datetime.now(timezone.utc)

    def transition_to(self, target: TransactionStatus) -> None:
        """
        Move to `target` status.

        Raises:
            InvalidTransitionError: If the move is not forward
        """
        target = TransactionStatus(target)
        ensure_transition(self.status, target)
        self.status = target
        self.updated_at = datetime.now(timezone.utc)
