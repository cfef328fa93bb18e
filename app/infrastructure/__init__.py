"""Infrastructure modules for the IdP persistence core.

Centralized infrastructure components:
- clients: AWS session handling and the shared DynamoDB client
- configuration: Settings management (Settings, AwsSettings, PersistenceSettings)
- logging: Structured logging setup and request context (get_module_logger)
- operations: Storage error kinds and DynamoDB error classification
- persistence: Entity codecs, repositories, transactional writes, audit
- resilience: Bounded retries with exponential backoff
- services: Application-scoped providers (get_settings, get_api_key_repository)
"""

# Configuration
from infrastructure.configuration import Settings

# Observability
from infrastructure.logging import configure_logging, get_module_logger

# Operations
from infrastructure.operations import ErrorClassification, StorageErrorKind

__all__ = [
    # Configuration
    "Settings",
    # Observability
    "configure_logging",
    "get_module_logger",
    # Operations
    "ErrorClassification",
    "StorageErrorKind",
]
