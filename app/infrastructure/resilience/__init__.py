"""Resilience patterns and implementations.

This module contains resilience-related infrastructure components used by
the persistence layer: bounded retries with exponential backoff.
"""

from infrastructure.resilience.retry import RetryExecutor, RetryPolicy

__all__ = [
    "RetryPolicy",
    "RetryExecutor",
]
