"""Structured logging infrastructure.

Public API:
    - configure_logging(): Initialize logging for the process
    - get_module_logger(): Get a logger for the calling module
    - bind_request_context(): Context manager for request-scoped logging
    - get_correlation_id(): Get current correlation ID from context
    - clear_request_context(): Clear all request context
    - mask_sensitive_data(): Processor to redact sensitive fields

Logging is configured once per process by
``infrastructure.services.get_logger()``, which ``get_api_key_repository()``
calls. Hosts that build repositories through the module factories instead
call ``configure_logging()`` themselves at startup.
"""

from infrastructure.logging.setup import configure_logging, get_module_logger
from infrastructure.logging.context import (
    bind_request_context,
    get_correlation_id,
    clear_request_context,
)
from infrastructure.logging.formatters import mask_sensitive_data, SENSITIVE_PATTERNS

__all__ = [
    "configure_logging",
    "get_module_logger",
    "bind_request_context",
    "get_correlation_id",
    "clear_request_context",
    "mask_sensitive_data",
    "SENSITIVE_PATTERNS",
]
