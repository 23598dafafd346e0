"""Shopify Admin API adapter."""

from .client import (
    RemoteLineItem,
    RemoteOrder,
    RemoteOrderRequest,
    ShopifyOrderClient,
    extract_variant_id,
)

__all__ = [
    "RemoteLineItem",
    "RemoteOrder",
    "RemoteOrderRequest",
    "ShopifyOrderClient",
    "extract_variant_id",
]
