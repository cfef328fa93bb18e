"""API key domain: model and repository contract."""

from modules.api_keys.domain.models import ApiKey, ApiKeyStatus, ApiKeyType
from modules.api_keys.domain.repository import ApiKeyRepository

__all__ = ["ApiKey", "ApiKeyStatus", "ApiKeyType", "ApiKeyRepository"]
