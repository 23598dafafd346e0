"""
Transaction endpoints.

Read-only diagnostics plus the explicit re-submission trigger.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List
import logging

from api.dependencies import get_coordinator, get_diagnostics_service
from api.routes.payments import to_fanout_dto
from core.application.dtos import FanOutResultDTO, StoreOrderDTO, TransactionDetailDTO, TransactionDTO
from core.domain.enums import TransactionStatus


logger = logging.getLogger(__name__)
router = APIRouter()


@router.get(
    "",
    response_model=List[TransactionDTO],
    summary="List transactions by status",
)
async def list_transactions(
    status_filter: TransactionStatus = Query(..., alias="status", description="Aggregate status"),
    limit: int = Query(default=100, ge=1, le=1000, description="Maximum number of transactions to return"),
    service=Depends(get_diagnostics_service),
):
    return await service.list_transactions(status_filter, limit=limit)


@router.get(
    "/{transaction_id}",
    response_model=TransactionDetailDTO,
    summary="Get transaction details",
    description="Transaction with its cart, store orders and the status derived from them"
)
async def get_transaction(transaction_id: int, service=Depends(get_diagnostics_service)):
    transaction = await service.get_transaction(transaction_id)
    if transaction is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Transaction {transaction_id} not found"
        )
    return transaction


@router.get(
    "/{transaction_id}/store-orders",
    response_model=List[StoreOrderDTO],
    summary="Store orders of a transaction",
)
async def get_transaction_store_orders(transaction_id: int, service=Depends(get_diagnostics_service)):
    return await service.list_store_orders(transaction_id)


@router.post(
    "/{transaction_id}/resubmit",
    response_model=FanOutResultDTO,
    summary="Re-submit non-confirmed store orders",
)
async def resubmit_transaction(transaction_id: int, coordinator=Depends(get_coordinator)):
    """
    Retry every store of the transaction that is not confirmed yet.

    **Returns:**
    - The fan-out result; `rejected=true` if the transaction cannot be re-submitted
    """
    logger.info(f"Re-submission requested for transaction {transaction_id}")
    result = await coordinator.resubmit(transaction_id)
    return to_fanout_dto(result)
