"""Storage error classification types.

This module contains the closed set of storage error kinds, the
classification result type, and the classifier that maps raw DynamoDB
exceptions onto them.
"""

from infrastructure.operations.classifiers import (
    classify_dynamodb_error,
    parse_cancellation_reasons,
)
from infrastructure.operations.result import CancellationReason, ErrorClassification
from infrastructure.operations.status import RETRYABLE_KINDS, StorageErrorKind

__all__ = [
    "StorageErrorKind",
    "RETRYABLE_KINDS",
    "ErrorClassification",
    "CancellationReason",
    "classify_dynamodb_error",
    "parse_cancellation_reasons",
]
