from __future__ import annotations

from pydantic_settings import SettingsConfigDict

from core.settings.base import GrumoBaseSettings


class ShopifySettings(GrumoBaseSettings):
    """
    Shopify Admin API settings shared by every store.

    Per-store credentials live in the `stores` table, not here.
    """

    model_config = SettingsConfigDict(env_prefix="SHOPIFY_")

    api_version: str = "2024-01"
    scheme: str = "https"

    default_country: str = "Chile"
    default_country_code: str = "CL"

    order_note_template: str = "Orden de Grumo - Transacción #{transaction_id}"
    order_tags: str = "grumo, marketplace"
