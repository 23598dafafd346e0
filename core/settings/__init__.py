# Settings package
from core.settings.modules import (
    AppSettings,
    OrchestrationSettings,
    ShopifySettings,
    get_app_settings,
)

__all__ = ["get_app_settings", "AppSettings", "OrchestrationSettings", "ShopifySettings"]
