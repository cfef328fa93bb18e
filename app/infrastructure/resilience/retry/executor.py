"""Retry executor for storage-engine operations.

Wraps a single storage call with bounded retries and exponential backoff,
using the storage error classifier to decide whether a failure is worth
retrying. Only the final outcome reaches the caller: the operation's
result, or one PersistenceError carrying the original cause.
"""

import threading
from typing import Callable, Optional, Set, TypeVar

import structlog

from infrastructure.operations.classifiers import classify_dynamodb_error
from infrastructure.operations.status import StorageErrorKind
from infrastructure.persistence.errors import (
    OperationInterruptedError,
    PersistenceError,
    TransientStorageFailure,
    error_for,
)
from infrastructure.resilience.retry.config import RetryPolicy

logger = structlog.get_logger()

T = TypeVar("T")


def wait_for_cancellation(cancel_event: threading.Event, seconds: float) -> bool:
    """Sleep for up to `seconds`, returning True if cancellation was signalled."""
    return cancel_event.wait(timeout=seconds)


class RetryExecutor:
    """Executes storage operations with retry and exponential backoff.

    Holds no per-call state beyond the cancellation events of calls that
    are currently running, so a single instance is shared by every
    repository and safe to call from many threads.

    Args:
        policy: RetryPolicy controlling attempts and backoff
        wait: Backoff wait function; returns True when cancelled
    """

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        wait: Optional[Callable[[threading.Event, float], bool]] = None,
    ) -> None:
        self.policy = policy or RetryPolicy()
        self._in_flight: Set[threading.Event] = set()
        self._in_flight_lock = threading.Lock()
        self._wait = wait or wait_for_cancellation

    def execute_with_retry(
        self,
        operation: Callable[[], T],
        operation_name: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> T:
        """Run `operation`, retrying retryable storage failures.

        Args:
            operation: Zero-argument callable performing the storage call
            operation_name: Name used in logs and raised errors
            cancel_event: Optional per-call cancellation signal; a fresh one
                is used when omitted

        Returns:
            Whatever `operation` returns

        Raises:
            TransientStorageFailure: retryable failures outlasted the budget
            OperationInterruptedError: cancelled during a backoff wait
            PersistenceError: any non-retryable failure, already classified
        """
        event = cancel_event or threading.Event()
        with self._in_flight_lock:
            self._in_flight.add(event)
        try:
            return self._run(operation, operation_name, event)
        finally:
            with self._in_flight_lock:
                self._in_flight.discard(event)

    def _run(
        self,
        operation: Callable[[], T],
        operation_name: str,
        event: threading.Event,
    ) -> T:
        log = logger.bind(operation=operation_name)
        attempt = 0

        while True:
            attempt += 1
            try:
                return operation()
            except PersistenceError:
                raise
            except Exception as exc:  # pylint: disable=broad-except
                classification = classify_dynamodb_error(exc)

                if not classification.retryable:
                    log_method = (
                        log.warning
                        if classification.kind == StorageErrorKind.CONFLICT
                        else log.error
                    )
                    log_method(
                        "storage_operation_failed",
                        attempt=attempt,
                        kind=classification.kind.value,
                        error_code=classification.error_code,
                        error=classification.message,
                    )
                    raise error_for(classification, operation_name, attempt) from exc

                if attempt > self.policy.max_retries:
                    log.error(
                        "storage_retries_exhausted",
                        attempts=attempt,
                        kind=classification.kind.value,
                        error_code=classification.error_code,
                        error=classification.message,
                    )
                    raise TransientStorageFailure(
                        f"{classification.message} - max retries exceeded",
                        operation=operation_name,
                        attempts=attempt,
                        classification=classification,
                    ) from exc

                delay_ms = self.policy.backoff_ms(attempt)
                log.warning(
                    "storage_operation_retry",
                    attempt=attempt,
                    kind=classification.kind.value,
                    error_code=classification.error_code,
                    delay_ms=delay_ms,
                )
                if self._wait(event, delay_ms / 1000.0):
                    log.warning("storage_retry_interrupted", attempt=attempt)
                    raise OperationInterruptedError(
                        "Operation interrupted during retry backoff",
                        operation=operation_name,
                        attempts=attempt,
                        classification=classification,
                    ) from exc

    def execute_with_retry_void(
        self,
        operation: Callable[[], object],
        operation_name: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        """Run an operation whose result is not needed, with retries."""
        self.execute_with_retry(operation, operation_name, cancel_event=cancel_event)

    def cancel(self) -> None:
        """Interrupt the backoff of every call currently in flight.

        Calls started afterwards are unaffected.
        """
        with self._in_flight_lock:
            events = list(self._in_flight)
        for event in events:
            event.set()


def is_retryable(exc: BaseException) -> bool:
    """Check whether a raw storage exception would be retried."""
    return classify_dynamodb_error(exc).retryable
