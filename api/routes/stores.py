"""
Store endpoints.

Credential readiness and per-store order history.
"""
from fastapi import APIRouter, Depends, Query
from typing import List
import logging

from api.dependencies import get_diagnostics_service
from core.application.dtos import StoreOrderDTO, StoreReadinessDTO


logger = logging.getLogger(__name__)
router = APIRouter()


@router.get(
    "/readiness",
    response_model=List[StoreReadinessDTO],
    summary="Store credential readiness",
    description="Which stores can read products and which can receive orders"
)
async def store_readiness(
    domain: List[str] = Query(default=[], description="Restrict to these domains"),
    service=Depends(get_diagnostics_service),
):
    return await service.store_readiness(domain or None)


@router.get(
    "/{domain}/orders",
    response_model=List[StoreOrderDTO],
    summary="Store orders of one store",
)
async def store_orders_of_store(
    domain: str,
    limit: int = Query(default=100, ge=1, le=1000),
    service=Depends(get_diagnostics_service),
):
    return await service.store_orders_by_store(domain, limit=limit)
