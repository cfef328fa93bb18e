"""Backend selection for the API key repository."""

from typing import Optional

from infrastructure.clients.aws import DynamoDBClient, SessionProvider
from infrastructure.configuration import Settings
from infrastructure.logging import get_module_logger
from modules.api_keys.infrastructure.audited import AuditedApiKeyRepository
from infrastructure.resilience.retry import RetryExecutor, RetryPolicy
from modules.api_keys.domain.repository import ApiKeyRepository
from modules.api_keys.infrastructure.dynamodb import DynamoDBApiKeyRepository
from modules.api_keys.infrastructure.memory import InMemoryApiKeyRepository

logger = get_module_logger()


def create_dynamodb_client(settings: Settings) -> DynamoDBClient:
    """Build the shared DynamoDB client from AWS settings."""
    session_provider = SessionProvider(
        region=settings.aws.AWS_REGION,
        service_role_map=settings.aws.SERVICE_ROLE_MAP,
        endpoint_url=settings.aws.ENDPOINT_URL,
    )
    return DynamoDBClient(session_provider)


def create_api_key_repository(
    settings: Settings,
    backend: Optional[str] = None,
    client: Optional[DynamoDBClient] = None,
    retry_executor: Optional[RetryExecutor] = None,
) -> ApiKeyRepository:
    """Create the API key repository configured by settings.

    Args:
        settings: Application settings
        backend: Override for PERSISTENCE_BACKEND ('dynamodb' or 'memory')
        client: Optional shared DynamoDB client (built from settings if omitted)
        retry_executor: Optional executor (policy taken from settings if omitted)

    Returns:
        The repository, wrapped in AuditedApiKeyRepository when auditing is enabled

    Raises:
        ValueError: unknown backend
    """
    persistence = settings.persistence
    backend = (backend or persistence.backend).strip().lower()

    repository: ApiKeyRepository
    if backend == "dynamodb":
        repository = DynamoDBApiKeyRepository(
            client or create_dynamodb_client(settings),
            persistence.table_name,
            retry_executor or RetryExecutor(RetryPolicy.from_settings(persistence)),
            consistent_reads=persistence.consistent_reads,
        )
    elif backend == "memory":
        repository = InMemoryApiKeyRepository()
    else:
        raise ValueError(f"Unsupported persistence backend: {backend}")

    logger.info(
        "api_key_repository_created",
        backend=backend,
        table=persistence.table_name,
        audit_enabled=persistence.audit_enabled,
    )
    if persistence.audit_enabled:
        return AuditedApiKeyRepository(repository)
    return repository
