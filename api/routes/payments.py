"""
Payment confirmation endpoint.

Entry point of the fan-out: a transaction was paid, create its store orders.
"""
from fastapi import APIRouter, Depends, status
import logging

from api.dependencies import get_coordinator
from core.application.dtos import FanOutResultDTO, PaymentConfirmationRequest, StoreOrderResultDTO
from orchestration import FanOutResult, PaymentConfirmation


logger = logging.getLogger(__name__)
router = APIRouter()


def to_fanout_dto(result: FanOutResult) -> FanOutResultDTO:
    """Transform a coordinator result into its response DTO."""
    return FanOutResultDTO(
        transaction_id=result.transaction_id,
        execution_id=str(result.execution_id),
        status=result.status.value if result.status else None,
        settled=result.settled,
        rejected=result.rejected,
        error=result.error,
        error_type=result.error_type,
        started_at=result.started_at,
        finished_at=result.finished_at,
        store_results=[
            StoreOrderResultDTO(
                store_domain=r.store_domain,
                status=r.status.value,
                attempts=r.attempts,
                remote_order_id=r.remote_order_id,
                remote_order_number=r.remote_order_number,
                error_message=r.error_message,
                error_type=r.error_type,
                skipped=r.skipped,
            )
            for r in result.store_results
        ],
    )


@router.post(
    "/confirmations",
    response_model=FanOutResultDTO,
    status_code=status.HTTP_200_OK,
    summary="Confirm a payment",
    description="Mark the transaction paid and create one order per store"
)
async def confirm_payment(
    request: PaymentConfirmationRequest,
    coordinator=Depends(get_coordinator),
):
    """
    Confirm the payment of a transaction.

    A rejected confirmation (unknown transaction, amount mismatch) is
    returned with `rejected=true` and the error, never as an HTTP error.
    """
    logger.info(f"Payment confirmation for transaction {request.transaction_id}")

    result = await coordinator.handle_payment_confirmation(
        PaymentConfirmation(
            transaction_id=request.transaction_id,
            payment_reference=request.payment_reference,
            paid_amount=request.paid_amount,
            paid_at=request.paid_at,
            payment_method=request.payment_method,
        )
    )
    return to_fanout_dto(result)
