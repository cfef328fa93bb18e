"""Storage error kind enumeration.

Closed set of kinds that every storage-engine failure is mapped onto before
it leaves the persistence layer. Callers never see botocore error codes.
"""

from enum import Enum


class StorageErrorKind(Enum):
    """Kinds of storage failures.

    Attributes:
        THROTTLED: Provisioned capacity exceeded (retryable)
        REQUEST_LIMIT: Account-level request limit exceeded (retryable)
        INTERNAL: Storage engine internal/server error (retryable)
        CONFLICT: A guarded write's condition failed
        NOT_FOUND: Target table or item does not exist
        OVERSIZE: Item or item collection exceeds the engine's size limit
        UNKNOWN: Anything else, including programming errors
    """

    THROTTLED = "throttled"
    REQUEST_LIMIT = "request_limit"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    OVERSIZE = "oversize"
    INTERNAL = "internal"
    UNKNOWN = "unknown"

    @property
    def is_retryable(self) -> bool:
        """True for transient kinds that the retry executor may retry."""
        return self in RETRYABLE_KINDS


RETRYABLE_KINDS = frozenset(
    {
        StorageErrorKind.THROTTLED,
        StorageErrorKind.REQUEST_LIMIT,
        StorageErrorKind.INTERNAL,
    }
)
