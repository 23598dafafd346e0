# Settings modules
from .app_settings import AppSettings, get_app_settings
from .orchestration_settings import OrchestrationSettings
from .shopify_settings import ShopifySettings

__all__ = [
    "AppSettings",
    "get_app_settings",
    "OrchestrationSettings",
    "ShopifySettings",
]
