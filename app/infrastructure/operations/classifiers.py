"""Error classifiers for storage-engine exceptions.

Converts DynamoDB (botocore) exceptions into a standardized
ErrorClassification. Centralizes the retryable-vs-fatal decision so every
repository and the transaction manager agree on it.

Key Functions:
- classify_dynamodb_error(): any exception -> ErrorClassification
- parse_cancellation_reasons(): TransactionCanceledException -> reasons

Usage:
    from infrastructure.operations.classifiers import classify_dynamodb_error

    try:
        client.put_item(TableName=table, Item=item)
    except Exception as exc:
        classification = classify_dynamodb_error(exc)
        if classification.retryable:
            ...
"""

from typing import Any, Dict, List

from botocore.exceptions import ClientError

from infrastructure.operations.result import CancellationReason, ErrorClassification
from infrastructure.operations.status import StorageErrorKind

THROTTLING_CODES = frozenset(
    {
        "ProvisionedThroughputExceededException",
        "ThrottlingException",
        "Throttling",
    }
)
REQUEST_LIMIT_CODES = frozenset({"RequestLimitExceeded"})
INTERNAL_CODES = frozenset({"InternalServerError", "ServiceUnavailable"})
CONFLICT_CODES = frozenset(
    {"ConditionalCheckFailedException", "TransactionConflictException"}
)
NOT_FOUND_CODES = frozenset({"ResourceNotFoundException"})
OVERSIZE_CODES = frozenset({"ItemCollectionSizeLimitExceededException"})
TRANSACTION_CANCELED_CODE = "TransactionCanceledException"

# Cancellation reason codes reported per descriptor
REASON_CONDITION_FAILED = "ConditionalCheckFailed"
REASON_TRANSACTION_CONFLICT = "TransactionConflict"
REASON_THROTTLED = frozenset({"ProvisionedThroughputExceeded", "ThrottlingError"})
REASON_OVERSIZE = "ItemCollectionSizeLimitExceeded"
REASON_NONE = "None"

_SIZE_MESSAGE_MARKER = "size has exceeded"


def _error_code(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Code", "Unknown")


def _error_message(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Message", str(exc))


def parse_cancellation_reasons(exc: ClientError) -> List[CancellationReason]:
    """Extract per-descriptor reasons from a TransactionCanceledException.

    Args:
        exc: ClientError raised by transact_write_items

    Returns:
        One CancellationReason per descriptor, in submission order
    """
    raw: List[Dict[str, Any]] = exc.response.get("CancellationReasons") or []
    reasons = []
    for index, reason in enumerate(raw):
        code = reason.get("Code") or REASON_NONE
        reasons.append(
            CancellationReason(
                index=index,
                code=code,
                message=reason.get("Message"),
                item_exists=bool(reason.get("Item")),
            )
        )
    return reasons


def _classify_cancellation(exc: ClientError) -> ErrorClassification:
    reasons = parse_cancellation_reasons(exc)
    codes = {r.code for r in reasons}
    message = _error_message(exc)

    if REASON_CONDITION_FAILED in codes or REASON_TRANSACTION_CONFLICT in codes:
        return ErrorClassification.of(
            StorageErrorKind.CONFLICT,
            f"Write unit cancelled by failed condition: {message}",
            error_code=TRANSACTION_CANCELED_CODE,
            reasons=reasons,
        )

    oversize = REASON_OVERSIZE in codes or any(
        r.message and _SIZE_MESSAGE_MARKER in r.message.lower() for r in reasons
    )
    if oversize:
        return ErrorClassification.of(
            StorageErrorKind.OVERSIZE,
            f"Write unit exceeds item size limits: {message}",
            error_code=TRANSACTION_CANCELED_CODE,
            reasons=reasons,
        )

    if codes & REASON_THROTTLED:
        return ErrorClassification.of(
            StorageErrorKind.THROTTLED,
            f"Write unit throttled: {message}",
            error_code=TRANSACTION_CANCELED_CODE,
            reasons=reasons,
        )

    return ErrorClassification.of(
        StorageErrorKind.UNKNOWN,
        f"Write unit cancelled: {message}",
        error_code=TRANSACTION_CANCELED_CODE,
        reasons=reasons,
    )


def classify_dynamodb_error(exc: BaseException) -> ErrorClassification:
    """Classify a DynamoDB error into an ErrorClassification.

    Error Code Mapping:
    - ProvisionedThroughputExceededException, ThrottlingException: THROTTLED
    - RequestLimitExceeded: REQUEST_LIMIT
    - InternalServerError, ServiceUnavailable: INTERNAL
    - ConditionalCheckFailedException, TransactionConflictException: CONFLICT
    - ResourceNotFoundException: NOT_FOUND
    - ItemCollectionSizeLimitExceededException, item-size validation: OVERSIZE
    - TransactionCanceledException: from its cancellation reasons
    - Other: UNKNOWN (never retried)

    Unlike the engine SDK's own retry policy, unknown errors are treated as
    fatal so that programming errors are not retried as transient faults.

    Args:
        exc: Exception raised while talking to the storage engine

    Returns:
        ErrorClassification with kind, retryability, message and error code
    """
    if not isinstance(exc, ClientError):
        return ErrorClassification.of(
            StorageErrorKind.UNKNOWN,
            f"Unexpected error: {type(exc).__name__}: {exc}",
        )

    code = _error_code(exc)
    message = _error_message(exc)

    if code in THROTTLING_CODES:
        return ErrorClassification.of(
            StorageErrorKind.THROTTLED, f"DynamoDB throttled: {message}", code
        )

    if code in REQUEST_LIMIT_CODES:
        return ErrorClassification.of(
            StorageErrorKind.REQUEST_LIMIT,
            f"DynamoDB request limit exceeded: {message}",
            code,
        )

    if code in INTERNAL_CODES:
        return ErrorClassification.of(
            StorageErrorKind.INTERNAL, f"DynamoDB internal error: {message}", code
        )

    if code in CONFLICT_CODES:
        return ErrorClassification.of(
            StorageErrorKind.CONFLICT, f"Conditional check failed: {message}", code
        )

    if code in NOT_FOUND_CODES:
        return ErrorClassification.of(
            StorageErrorKind.NOT_FOUND, f"DynamoDB resource not found: {message}", code
        )

    if code in OVERSIZE_CODES or (
        code == "ValidationException" and _SIZE_MESSAGE_MARKER in message.lower()
    ):
        return ErrorClassification.of(
            StorageErrorKind.OVERSIZE, f"Item size limit exceeded: {message}", code
        )

    if code == TRANSACTION_CANCELED_CODE:
        return _classify_cancellation(exc)

    return ErrorClassification.of(
        StorageErrorKind.UNKNOWN, f"DynamoDB client error: {code}: {message}", code
    )
