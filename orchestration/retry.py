"""Retry policy - exponential backoff with optional full jitter."""

import random
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class JitterStrategy(str, Enum):
    """How a backoff ceiling becomes an actual delay."""

    FULL = "full"  # uniform in [0, ceiling]
    NONE = "none"  # exactly the ceiling


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry policy for remote order creation.

    `max_attempts` counts every call, the first one included. The delay
    before retry n (n >= 1) is drawn from [0, base_delay * multiplier ** (n - 1)].
    """

    max_attempts: int = 3
    base_delay: float = 0.5
    multiplier: float = 2.0
    jitter: JitterStrategy = JitterStrategy.FULL

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got: {self.max_attempts}")
        if self.base_delay < 0 or self.multiplier < 1:
            raise ValueError("base_delay must be >= 0 and multiplier >= 1")
        object.__setattr__(self, "jitter", JitterStrategy(self.jitter))

    @classmethod
    def from_settings(cls, settings) -> "RetryPolicy":
        """Build from OrchestrationSettings."""
        return cls(
            max_attempts=settings.max_attempts,
            base_delay=settings.base_delay_seconds,
            multiplier=settings.backoff_multiplier,
            jitter=JitterStrategy(settings.jitter),
        )

    def ceiling(self, retry_number: int) -> float:
        """Upper bound of the delay before retry `retry_number` (1-based)."""
        return self.base_delay * self.multiplier ** (retry_number - 1)

    def delay_for(self, retry_number: int, rng: Optional[random.Random] = None) -> float:
        ceiling = self.ceiling(retry_number)
        if self.jitter == JitterStrategy.NONE:
            return ceiling
        return (rng or random).uniform(0, ceiling)

    def ceilings(self) -> List[float]:
        """Delay ceilings for every retry the policy allows."""
        return [self.ceiling(n) for n in range(1, self.max_attempts)]
