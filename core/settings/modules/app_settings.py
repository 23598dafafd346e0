from __future__ import annotations

from functools import lru_cache

from pydantic import BaseModel, ConfigDict

from core.infrastructure.database.config import DatabaseSettings
from core.settings.modules.orchestration_settings import OrchestrationSettings
from core.settings.modules.shopify_settings import ShopifySettings


class AppSettings(BaseModel):
    """Application settings aggregator."""

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="ignore")

    orchestration: OrchestrationSettings
    shopify: ShopifySettings
    database: DatabaseSettings


@lru_cache()
def get_app_settings() -> AppSettings:
    return AppSettings(
        orchestration=OrchestrationSettings(),
        shopify=ShopifySettings(),
        database=DatabaseSettings(),
    )
