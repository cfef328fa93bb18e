"""Retry policy configuration.

This module defines the bounded exponential backoff policy applied to
storage-engine calls.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from infrastructure.configuration.infrastructure.persistence import (
        PersistenceSettings,
    )


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff for transient storage failures.

    Attributes:
        max_retries: Retries after the first attempt (total attempts = 1 + max_retries)
        initial_backoff_ms: Delay before the first retry
        max_backoff_ms: Cap applied to every delay
        backoff_multiplier: Factor applied to the delay after each retry

    Example:
        # Default policy: 100ms, 200ms, 400ms, then give up
        policy = RetryPolicy()

        # Tighter policy for latency-sensitive deployments
        policy = RetryPolicy(max_retries=1, initial_backoff_ms=50)
    """

    max_retries: int = 3
    initial_backoff_ms: int = 100
    max_backoff_ms: int = 5000
    backoff_multiplier: float = 2.0

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.initial_backoff_ms < 1:
            raise ValueError("initial_backoff_ms must be at least 1")
        if self.max_backoff_ms < self.initial_backoff_ms:
            raise ValueError("max_backoff_ms must be >= initial_backoff_ms")
        if self.backoff_multiplier < 1:
            raise ValueError("backoff_multiplier must be >= 1")

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def backoff_ms(self, retry_number: int) -> int:
        """Delay before the given retry (1-based), capped at max_backoff_ms."""
        delay = self.initial_backoff_ms * (self.backoff_multiplier ** (retry_number - 1))
        return int(min(delay, self.max_backoff_ms))

    @classmethod
    def from_settings(cls, settings: "PersistenceSettings") -> "RetryPolicy":
        """Build a policy from persistence settings."""
        return cls(
            max_retries=settings.retry_max_retries,
            initial_backoff_ms=settings.retry_initial_backoff_ms,
            max_backoff_ms=settings.retry_max_backoff_ms,
            backoff_multiplier=settings.retry_backoff_multiplier,
        )
