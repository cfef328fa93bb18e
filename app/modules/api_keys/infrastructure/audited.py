"""Audited API key repository."""

from datetime import datetime
from typing import Iterable, List, Optional
from uuid import UUID

from infrastructure.persistence.audit import AuditedRepository
from modules.api_keys.domain.models import ApiKey, ApiKeyType
from modules.api_keys.domain.repository import ApiKeyRepository


class AuditedApiKeyRepository(AuditedRepository[ApiKey, UUID], ApiKeyRepository):
    """ApiKeyRepository that audits every write of the wrapped backend."""

    _delegate: ApiKeyRepository

    def __init__(self, delegate: ApiKeyRepository) -> None:
        super().__init__(delegate)

    def find_by_key_hash(self, key_hash: str) -> Optional[ApiKey]:
        return self._delegate.find_by_key_hash(key_hash)

    def find_by_user_email(self, user_email: str) -> List[ApiKey]:
        return self._delegate.find_by_user_email(user_email)

    def find_by_user_email_and_is_active(
        self, user_email: str, is_active: bool
    ) -> List[ApiKey]:
        return self._delegate.find_by_user_email_and_is_active(user_email, is_active)

    def find_by_created_by_email(self, created_by_email: str) -> List[ApiKey]:
        return self._delegate.find_by_created_by_email(created_by_email)

    def find_by_key_type(self, key_type: ApiKeyType) -> List[ApiKey]:
        return self._delegate.find_by_key_type(key_type)

    def find_by_is_active(self, is_active: bool) -> List[ApiKey]:
        return self._delegate.find_by_is_active(is_active)

    def find_expired_keys(self, now: Optional[datetime] = None) -> List[ApiKey]:
        return self._delegate.find_expired_keys(now)

    def revoke_with_guard(self, api_key: ApiKey, revoked_by: str) -> ApiKey:
        return self._audit(
            "revoke_with_guard", self._delegate.revoke_with_guard, api_key, revoked_by
        )

    def rotate_atomically(
        self, old_key: ApiKey, new_key: ApiKey, revoked_by: str
    ) -> ApiKey:
        return self._audit(
            "rotate_atomically",
            self._delegate.rotate_atomically,
            old_key,
            new_key,
            revoked_by,
        )

    def save_all_atomically(self, api_keys: Iterable[ApiKey]) -> List[ApiKey]:
        return self._audit(
            "save_all_atomically", self._delegate.save_all_atomically, list(api_keys)
        )
