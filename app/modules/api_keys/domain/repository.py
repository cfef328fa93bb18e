"""API key repository contract.

Implemented by the DynamoDB backend (production) and the in-memory backend
(development, contract tests). Both raise the same errors:

- ``revoke_with_guard`` on an already revoked key: ConflictError
- ``revoke_with_guard``/``rotate_atomically`` on a missing key: NotFoundError
- transient storage failures after retries: TransientStorageFailure
"""

from abc import abstractmethod
from datetime import datetime
from typing import Iterable, List, Optional
from uuid import UUID

from infrastructure.persistence.repository import Repository
from modules.api_keys.domain.models import ApiKey, ApiKeyType

REVOKE_CONFLICT_MESSAGE = "API key already revoked"


class ApiKeyRepository(Repository[ApiKey, UUID]):
    """Persistence operations for API keys."""

    @abstractmethod
    def find_by_key_hash(self, key_hash: str) -> Optional[ApiKey]:
        pass

    @abstractmethod
    def find_by_user_email(self, user_email: str) -> List[ApiKey]:
        """Keys owned by ``user_email``, oldest first."""

    @abstractmethod
    def find_by_user_email_and_is_active(
        self, user_email: str, is_active: bool
    ) -> List[ApiKey]:
        pass

    @abstractmethod
    def find_by_created_by_email(self, created_by_email: str) -> List[ApiKey]:
        pass

    @abstractmethod
    def find_by_key_type(self, key_type: ApiKeyType) -> List[ApiKey]:
        pass

    @abstractmethod
    def find_by_is_active(self, is_active: bool) -> List[ApiKey]:
        pass

    @abstractmethod
    def find_expired_keys(self, now: Optional[datetime] = None) -> List[ApiKey]:
        """Keys whose ``expires_at`` is before ``now``."""

    @abstractmethod
    def revoke_with_guard(self, api_key: ApiKey, revoked_by: str) -> ApiKey:
        """Revoke ``api_key`` only if it is still active.

        Returns:
            The same object, updated to the revoked state

        Raises:
            ConflictError: the key was already revoked
            NotFoundError: no stored key has this id
        """

    @abstractmethod
    def rotate_atomically(
        self, old_key: ApiKey, new_key: ApiKey, revoked_by: str
    ) -> ApiKey:
        """Create ``new_key`` and revoke ``old_key`` in one atomic write.

        ``new_key.rotated_from_id`` is set to ``old_key.id``. Concurrent
        rotations of the same key: exactly one succeeds, the others raise
        ConflictError.
        """

    @abstractmethod
    def save_all_atomically(self, api_keys: Iterable[ApiKey]) -> List[ApiKey]:
        """Save every key or none of them."""
