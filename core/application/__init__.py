"""Application layer - diagnostics service and DTOs."""

from .dtos import (
    FanOutResultDTO,
    PaymentConfirmationRequest,
    StoreOrderDTO,
    StoreReadinessDTO,
    TransactionDetailDTO,
    TransactionDTO,
)
from .services import DiagnosticsService

__all__ = [
    # DTOs
    "FanOutResultDTO",
    "PaymentConfirmationRequest",
    "StoreOrderDTO",
    "StoreReadinessDTO",
    "TransactionDTO",
    "TransactionDetailDTO",
    # Services
    "DiagnosticsService",
]
