"""Request context binding for structured logging.

Binds a correlation id (and any extra metadata) to every log entry made
within a block, so the retry and transaction events of one repository call
can be grouped.

Usage:
    from infrastructure.logging import bind_request_context

    with bind_request_context(actor_email="admin@example.com"):
        repository.rotate_atomically(old_key, new_key, "admin@example.com")
"""

import uuid
from contextlib import contextmanager
from typing import Any, Generator, Optional

import structlog


@contextmanager
def bind_request_context(
    correlation_id: Optional[str] = None,
    actor_email: Optional[str] = None,
    **extra_context: Any,
) -> Generator[str, None, None]:
    """Bind request-scoped context to all logs within the block.

    Args:
        correlation_id: Unique request identifier. Generated when omitted.
        actor_email: Email of the user performing the operation.
        **extra_context: Additional key-value pairs to include in logs.

    Yields:
        The correlation id in effect for the block.
    """
    context: dict[str, Any] = {"correlation_id": correlation_id or str(uuid.uuid4())}
    if actor_email is not None:
        context["actor_email"] = actor_email
    context.update(extra_context)

    structlog.contextvars.bind_contextvars(**context)
    try:
        yield context["correlation_id"]
    finally:
        structlog.contextvars.unbind_contextvars(*context.keys())


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from the logging context."""
    return structlog.contextvars.get_contextvars().get("correlation_id")


def clear_request_context() -> None:
    """Clear all request-scoped context from the logging context."""
    structlog.contextvars.clear_contextvars()
