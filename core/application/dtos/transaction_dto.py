"""Application DTOs for transactions and their store orders."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class CartItemDTO(BaseModel):
    """DTO for one cart line."""

    store_domain: str = Field(..., description="Store the item is bought from")
    product_ref: str = Field(..., description="Product reference (GraphQL gid)")
    variant_ref: Optional[str] = Field(None, description="Variant reference (GraphQL gid)")
    title: str = Field(default="", description="Product title")
    quantity: int = Field(..., gt=0, description="Quantity bought")
    unit_price: Decimal = Field(..., ge=0, description="Unit price")

    model_config = {"frozen": True}


class StoreOrderDTO(BaseModel):
    """DTO for one ledger entry."""

    transaction_id: int = Field(..., description="Transaction id")
    store_domain: str = Field(..., description="Store domain")
    status: str = Field(..., description="pending | submitted | confirmed | failed")
    remote_order_id: Optional[str] = Field(None, description="Order id at the store")
    remote_order_number: Optional[str] = Field(None, description="Order number at the store (#1001)")
    error_message: Optional[str] = Field(None, description="Last error, verbatim")
    attempt_count: int = Field(default=0, ge=0, description="Remote calls made")
    order_amount: Decimal = Field(default=Decimal("0"), description="Amount of this store's items")
    order_items: List[Dict[str, Any]] = Field(default_factory=list, description="Items snapshot")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    synced_at: Optional[datetime] = None

    model_config = {"frozen": True}


class TransactionDTO(BaseModel):
    """Response DTO for transaction summary."""

    id: int = Field(..., description="Transaction id")
    status: str = Field(..., description="Stored aggregate status")
    total_amount: Decimal = Field(..., ge=0, description="Amount paid by the buyer")
    currency: str = Field(default="CLP", description="Currency code")
    buyer_email: str = Field(..., description="Buyer email address")
    buyer_name: str = Field(default="", description="Buyer full name")
    payment_reference: Optional[str] = Field(None, description="Payment provider reference")
    store_domains: List[str] = Field(default_factory=list, description="Stores in first-seen cart order")
    created_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None

    model_config = {"frozen": True}


class TransactionDetailDTO(TransactionDTO):
    """Transaction with its cart and ledger, and the status the ledger implies."""

    cart_items: List[CartItemDTO] = Field(default_factory=list)
    store_orders: List[StoreOrderDTO] = Field(default_factory=list)
    derived_status: Optional[str] = Field(
        None, description="Status re-derived from the ledger; null while a store is unsettled"
    )
    missing_stores: List[str] = Field(
        default_factory=list, description="Cart stores without a ledger entry"
    )

    @property
    def consistent(self) -> bool:
        return self.derived_status is None or self.derived_status == self.status
