"""API key persistence module.

Exposes the API key domain model, the repository contract and a factory
that picks the storage backend from settings:

    from infrastructure.services import get_api_key_repository

    repository = get_api_key_repository()
    new_key = repository.rotate_atomically(old_key, new_key, "admin@example.com")
"""

from modules.api_keys.domain import ApiKey, ApiKeyRepository, ApiKeyStatus, ApiKeyType
from modules.api_keys.factory import create_api_key_repository

__all__ = [
    "ApiKey",
    "ApiKeyRepository",
    "ApiKeyStatus",
    "ApiKeyType",
    "create_api_key_repository",
]
