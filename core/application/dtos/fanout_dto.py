"""Application DTOs for the payment trigger and fan-out results."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class PaymentConfirmationRequest(BaseModel):
    """Request DTO: a transaction has been paid."""

    transaction_id: int = Field(..., gt=0, description="Transaction id")
    payment_reference: str = Field(..., min_length=1, description="Payment provider reference")
    paid_amount: Decimal = Field(..., ge=0, description="Amount paid")
    paid_at: Optional[datetime] = Field(None, description="Payment time")
    payment_method: Optional[str] = Field(None, description="Payment method")

    model_config = {"frozen": True}


class StoreOrderResultDTO(BaseModel):
    """Outcome of one store in a fan-out run."""

    store_domain: str
    status: str
    attempts: int = 0
    remote_order_id: Optional[str] = None
    remote_order_number: Optional[str] = None
    error_message: Optional[str] = None
    error_type: Optional[str] = None
    skipped: bool = False

    model_config = {"frozen": True}


class FanOutResultDTO(BaseModel):
    """Response DTO for a fan-out run."""

    transaction_id: int
    execution_id: str = Field(..., description="Execution ID for tracing")
    status: Optional[str] = Field(None, description="Aggregate status after the run")
    settled: bool = Field(default=False, description="Every store reached a terminal status")
    rejected: bool = Field(default=False, description="Trigger refused before dispatch")
    error: Optional[str] = None
    error_type: Optional[str] = None
    started_at: datetime
    finished_at: datetime
    store_results: List[StoreOrderResultDTO] = Field(default_factory=list)

    model_config = {"frozen": True}
