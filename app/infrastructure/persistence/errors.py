"""Caller-visible persistence errors.

Every storage failure leaves the persistence layer as one of these
exceptions; botocore types never cross the repository boundary.
"""

from typing import List, Optional

from infrastructure.operations.result import ErrorClassification
from infrastructure.operations.status import StorageErrorKind


class PersistenceError(Exception):
    """Base error for repository operations.

    Attributes:
        message: human-friendly message
        operation: name of the repository/storage operation that failed
        kind: classified StorageErrorKind, if the failure came from the engine.
            None for failures that are not engine errors (interruption,
            undecodable data); their ``classification`` still carries the
            engine error they wrapped
        attempts: number of attempts made before giving up
        classification: full ErrorClassification, when available
    """

    kind: Optional[StorageErrorKind] = None
    adopts_classified_kind = True

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        attempts: int = 0,
        classification: Optional[ErrorClassification] = None,
    ):
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.attempts = attempts
        self.classification = classification
        if (
            classification is not None
            and type(self).kind is None
            and self.adopts_classified_kind
        ):
            self.kind = classification.kind

    @property
    def cause(self) -> Optional[BaseException]:
        """The underlying engine exception, if any."""
        return self.__cause__

    def __str__(self) -> str:
        if self.operation:
            return f"{self.message} (operation={self.operation}, attempts={self.attempts})"
        return self.message


class ConflictError(PersistenceError):
    """A guarded write's precondition did not hold at commit time.

    Never retried automatically; the business layer decides whether to
    re-read and try again.

    Attributes:
        failed_writes: labels of the write descriptors whose condition failed
    """

    kind = StorageErrorKind.CONFLICT

    def __init__(self, *args, failed_writes: Optional[List[str]] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.failed_writes = list(failed_writes or [])


class NotFoundError(PersistenceError):
    """The target item (or table) does not exist."""

    kind = StorageErrorKind.NOT_FOUND


class OversizeError(PersistenceError):
    """An item or item collection exceeds the engine's size limit."""

    kind = StorageErrorKind.OVERSIZE


class TransientStorageFailure(PersistenceError):
    """A retryable failure persisted after the retry budget was exhausted."""


class CorruptDataError(PersistenceError):
    """A stored item could not be decoded into its entity."""

    adopts_classified_kind = False


class OperationInterruptedError(PersistenceError):
    """Cancellation was signalled while waiting to retry."""

    adopts_classified_kind = False


class UnknownStorageError(PersistenceError):
    """An unrecognized error; not retried."""

    kind = StorageErrorKind.UNKNOWN


_ERRORS_BY_KIND = {
    StorageErrorKind.CONFLICT: ConflictError,
    StorageErrorKind.NOT_FOUND: NotFoundError,
    StorageErrorKind.OVERSIZE: OversizeError,
    StorageErrorKind.THROTTLED: TransientStorageFailure,
    StorageErrorKind.REQUEST_LIMIT: TransientStorageFailure,
    StorageErrorKind.INTERNAL: TransientStorageFailure,
    StorageErrorKind.UNKNOWN: UnknownStorageError,
}


def error_for(
    classification: ErrorClassification,
    operation: str,
    attempts: int,
) -> PersistenceError:
    """Build the caller-visible error for a classified failure.

    Args:
        classification: Result of classifying the raw engine error
        operation: Operation name for diagnostics
        attempts: Number of attempts made

    Returns:
        PersistenceError subclass instance matching the classification kind
    """
    error_cls = _ERRORS_BY_KIND[classification.kind]
    return error_cls(
        classification.message,
        operation=operation,
        attempts=attempts,
        classification=classification,
    )
