"""Error classification dataclasses.

Uniform result of classifying a raw storage-engine error, including the
per-descriptor cancellation reasons reported for transactional writes.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from infrastructure.operations.status import StorageErrorKind


@dataclass(frozen=True)
class CancellationReason:
    """Why one descriptor of a cancelled write unit did not commit.

    Attributes:
        index: Position of the descriptor in the write unit
        code: Engine reason code (e.g. "ConditionalCheckFailed")
        message: Engine message, if any
        item_exists: Whether the engine returned the current item for a
            failed condition (only known when ALL_OLD was requested)
    """

    index: int
    code: str
    message: Optional[str] = None
    item_exists: Optional[bool] = None


@dataclass(frozen=True)
class ErrorClassification:
    """Outcome of classifying a storage error.

    Attributes:
        kind: StorageErrorKind -- high-level failure kind
        retryable: bool -- whether a retry may succeed
        message: str -- human-friendly message for logs/troubleshooting
        error_code: Optional[str] -- raw engine error code, if any
        reasons: List[CancellationReason] -- transactional cancellation reasons
    """

    kind: StorageErrorKind
    retryable: bool
    message: str
    error_code: Optional[str] = None
    reasons: List[CancellationReason] = field(default_factory=list)

    @classmethod
    def of(
        cls,
        kind: StorageErrorKind,
        message: str,
        error_code: Optional[str] = None,
        reasons: Optional[List[CancellationReason]] = None,
    ) -> "ErrorClassification":
        """Create a classification whose retryability follows from its kind.

        Args:
            kind: Classified error kind
            message: Human-friendly message
            error_code: Optional raw engine error code
            reasons: Optional cancellation reasons

        Returns:
            ErrorClassification with retryable derived from kind
        """
        return cls(
            kind=kind,
            retryable=kind.is_retryable,
            message=message,
            error_code=error_code,
            reasons=list(reasons or []),
        )

    @property
    def failed_indexes(self) -> List[int]:
        """Indexes of write descriptors that caused the cancellation."""
        return [r.index for r in self.reasons if r.code not in ("None", "")]
