"""
Store order endpoints.

Ledger queries by status and the latest errors.
"""
from fastapi import APIRouter, Depends, Query
from typing import List

from api.dependencies import get_diagnostics_service
from core.application.dtos import StoreOrderDTO
from core.domain.enums import StoreOrderStatus


router = APIRouter()


@router.get("", response_model=List[StoreOrderDTO], summary="Store orders by status")
async def list_store_orders(
    status_filter: StoreOrderStatus = Query(..., alias="status"),
    limit: int = Query(default=100, ge=1, le=1000),
    service=Depends(get_diagnostics_service),
):
    return await service.store_orders_by_status(status_filter, limit=limit)


@router.get("/errors", response_model=List[StoreOrderDTO], summary="Latest store order errors")
async def recent_errors(
    limit: int = Query(default=20, ge=1, le=200),
    service=Depends(get_diagnostics_service),
):
    return await service.recent_errors(limit=limit)
