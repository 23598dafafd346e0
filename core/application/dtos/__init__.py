"""Application DTOs."""

from .fanout_dto import FanOutResultDTO, PaymentConfirmationRequest, StoreOrderResultDTO
from .store_dto import StoreReadinessDTO
from .transaction_dto import CartItemDTO, StoreOrderDTO, TransactionDetailDTO, TransactionDTO

__all__ = [
    "CartItemDTO",
    "FanOutResultDTO",
    "PaymentConfirmationRequest",
    "StoreOrderDTO",
    "StoreOrderResultDTO",
    "StoreReadinessDTO",
    "TransactionDTO",
    "TransactionDetailDTO",
]
