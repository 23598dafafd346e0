"""
Store entity.

A merchant storefront registered in the marketplace.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


LEGACY_STORE_PREFIX = "real-"


def normalize_store_domain(store_id: str) -> str:
    """Strip the legacy `real-` prefix some cart items carry."""
    store_id = store_id.strip()
    if store_id.startswith(LEGACY_STORE_PREFIX):
        return store_id[len(LEGACY_STORE_PREFIX):]
    return store_id


@dataclass
class Store:
    """
    Store with its read and write credentials.

    A store without `admin_token` cannot receive fan-out orders.
    """
    domain: str
    display_name: str = ""
    storefront_token: Optional[str] = None
    admin_token: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def name(self) -> str:
        return self.display_name or self.domain

    @property
    def can_receive_orders(self) -> bool:
        return bool(self.admin_token)

    @property
    def can_read_products(self) -> bool:
        return bool(self.storefront_token)
