"""Application DTOs for stores."""

from pydantic import BaseModel, Field


class StoreReadinessDTO(BaseModel):
    """Which credentials a store has."""

    domain: str = Field(..., description="Store domain")
    name: str = Field(..., description="Display name")
    has_storefront_token: bool = Field(..., description="Can read products")
    has_admin_token: bool = Field(..., description="Can receive orders")

    model_config = {"frozen": True}

    @property
    def ready(self) -> bool:
        return self.has_admin_token
