from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from core.settings.base import GrumoBaseSettings


class OrchestrationSettings(GrumoBaseSettings):
    """
    Fan-out orchestration settings.

    FIELD_NAME -> ENV VAR NAME = FANOUT_ + FIELD_NAME.upper()
    e.g. max_attempts -> FANOUT_MAX_ATTEMPTS
    """

    model_config = SettingsConfigDict(env_prefix="FANOUT_")

    # === Retry policy ===
    max_attempts: int = Field(default=3, ge=1)
    base_delay_seconds: float = Field(default=0.5, ge=0)
    backoff_multiplier: float = Field(default=2.0, ge=1)
    jitter: Literal["full", "none"] = "full"

    # === Remote calls ===
    request_timeout_seconds: float = Field(default=15.0, gt=0)

    # === Dispatch ===
    max_concurrency: Optional[int] = Field(default=None, ge=1)  # None: one task per store
    claim_ttl_seconds: float = Field(default=600.0, gt=0)       # abandoned `submitted` rows
