"""
Factory functions for dependency injection.

Provides application-scoped singleton providers for core infrastructure services.
"""

from functools import lru_cache

from structlog.stdlib import BoundLogger

from infrastructure.clients.aws import DynamoDBClient
from infrastructure.configuration import Settings
from infrastructure.logging.setup import configure_logging
from modules.api_keys.domain.repository import ApiKeyRepository
from modules.api_keys.factory import create_api_key_repository, create_dynamodb_client


@lru_cache
def get_settings() -> Settings:
    """
    Get application-scoped settings singleton.

    The @lru_cache decorator ensures only ONE instance is created per process,
    even if called from multiple packages:

        from infrastructure.services.providers import get_settings
        settings = get_settings()

    Returns:
        Settings: Cached settings instance loaded from environment.
    """
    return Settings()


@lru_cache
def get_logger() -> BoundLogger:
    """Configure structured logging once per process from settings.

    Hosts that configure logging themselves at startup may call
    ``configure_logging`` directly instead; this provider is what the
    repository provider uses when nothing else has.
    """
    settings = get_settings()
    return configure_logging(
        log_level=settings.LOG_LEVEL, is_production=settings.is_production
    )


@lru_cache
def get_dynamodb_client() -> DynamoDBClient:
    """Provider for the shared DynamoDB client.

    The boto3 client underneath is created on first use and shared by every
    repository in the process.
    """
    return create_dynamodb_client(get_settings())


@lru_cache
def get_api_key_repository() -> ApiKeyRepository:
    """Provider for the API key repository selected by PERSISTENCE_BACKEND.

    Returns:
        ApiKeyRepository: DynamoDB-backed in production, in-memory for
        local development; audited when PERSISTENCE_AUDIT_ENABLED is set.
    """
    settings = get_settings()
    get_logger()
    client = (
        get_dynamodb_client() if settings.persistence.backend == "dynamodb" else None
    )
    return create_api_key_repository(settings, client=client)
