"""Retry with exponential backoff for storage-engine calls.

Architecture:
- RetryPolicy: bounded exponential backoff configuration
- RetryExecutor: runs one operation, classifying and retrying failures

Usage:
    from infrastructure.resilience.retry import RetryExecutor, RetryPolicy

    executor = RetryExecutor(RetryPolicy(max_retries=3))
    item = executor.execute_with_retry(
        lambda: client.get_item(TableName="idp-data", Key=key),
        "get_item",
    )
"""

from infrastructure.resilience.retry.config import RetryPolicy
from infrastructure.resilience.retry.executor import (
    RetryExecutor,
    is_retryable,
    wait_for_cancellation,
)

__all__ = [
    "RetryPolicy",
    "RetryExecutor",
    "is_retryable",
    "wait_for_cancellation",
]
