"""API key storage backends."""

from modules.api_keys.infrastructure.audited import AuditedApiKeyRepository
from modules.api_keys.infrastructure.codec import ApiKeyCodec
from modules.api_keys.infrastructure.dynamodb import DynamoDBApiKeyRepository
from modules.api_keys.infrastructure.memory import InMemoryApiKeyRepository

__all__ = [
    "ApiKeyCodec",
    "AuditedApiKeyRepository",
    "DynamoDBApiKeyRepository",
    "InMemoryApiKeyRepository",
]
