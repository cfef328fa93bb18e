"""In-memory API key repository.

Lock-guarded dict keyed by id, used for local development and as the
reference backend in contract tests. Guards and errors mirror the DynamoDB
backend; stored entities are copies, so callers never share state with the
store.
"""

import copy
import threading
import uuid
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional
from uuid import UUID

from infrastructure.logging import get_module_logger
from infrastructure.persistence.errors import ConflictError, NotFoundError
from infrastructure.persistence.transactions import MAX_TRANSACTION_WRITES
from modules.api_keys.domain.models import ApiKey, ApiKeyType, utc_now
from modules.api_keys.domain.repository import (
    REVOKE_CONFLICT_MESSAGE,
    ApiKeyRepository,
)

logger = get_module_logger()


class InMemoryApiKeyRepository(ApiKeyRepository):
    """Thread-safe in-memory API key store."""

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._items: Dict[UUID, ApiKey] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def _prepare_for_save(self, api_key: ApiKey) -> None:
        api_key.validate()
        if api_key.id is None:
            api_key.id = uuid.uuid4()
        if api_key.created_at is None:
            api_key.created_at = self._clock()

    def _select(self, predicate: Callable[[ApiKey], bool]) -> List[ApiKey]:
        with self._lock:
            matches = [copy.deepcopy(k) for k in self._items.values() if predicate(k)]
        return matches

    # -- capability set ------------------------------------------------------

    def save(self, entity: ApiKey) -> ApiKey:
        self._prepare_for_save(entity)
        with self._lock:
            self._items[entity.id] = copy.deepcopy(entity)
        return entity

    def find_by_id(self, entity_id: UUID) -> Optional[ApiKey]:
        with self._lock:
            stored = self._items.get(entity_id)
            return copy.deepcopy(stored) if stored is not None else None

    def find_all(self) -> List[ApiKey]:
        return self._select(lambda key: True)

    def delete(self, entity: ApiKey) -> None:
        with self._lock:
            self._items.pop(entity.id, None)

    def count(self) -> int:
        with self._lock:
            return len(self._items)

    def exists(self, entity_id: UUID) -> bool:
        with self._lock:
            return entity_id in self._items

    # -- queries -------------------------------------------------------------

    def find_by_key_hash(self, key_hash: str) -> Optional[ApiKey]:
        matches = self._select(lambda key: key.key_hash == key_hash)
        return matches[0] if matches else None

    def find_by_user_email(self, user_email: str) -> List[ApiKey]:
        matches = self._select(
            lambda key: key.user_email == user_email and key.created_at is not None
        )
        return sorted(matches, key=lambda key: key.created_at)

    def find_by_user_email_and_is_active(
        self, user_email: str, is_active: bool
    ) -> List[ApiKey]:
        return [
            key
            for key in self.find_by_user_email(user_email)
            if key.is_active == is_active
        ]

    def find_by_created_by_email(self, created_by_email: str) -> List[ApiKey]:
        return self._select(lambda key: key.created_by_email == created_by_email)

    def find_by_key_type(self, key_type: ApiKeyType) -> List[ApiKey]:
        return self._select(lambda key: key.key_type == key_type)

    def find_by_is_active(self, is_active: bool) -> List[ApiKey]:
        return self._select(lambda key: key.is_active == is_active)

    def find_expired_keys(self, now: Optional[datetime] = None) -> List[ApiKey]:
        now = now or self._clock()
        return self._select(
            lambda key: key.expires_at is not None and key.expires_at < now
        )

    # -- atomic lifecycle operations -----------------------------------------

    def _check_revocable(
        self, api_key: ApiKey, label: str, operation: str
    ) -> ApiKey:
        """Return the stored key; caller must hold the lock."""
        stored = self._items.get(api_key.id)
        if stored is None:
            raise NotFoundError(
                f"API key not found: {api_key.id}", operation=operation
            )
        if not stored.is_active:
            raise ConflictError(
                f"{REVOKE_CONFLICT_MESSAGE}: {api_key.id}",
                operation=operation,
                failed_writes=[label],
            )
        return stored

    def revoke_with_guard(self, api_key: ApiKey, revoked_by: str) -> ApiKey:
        if api_key.id is None:
            raise ValueError("API key id must not be None")
        revoked_at = self._clock()
        with self._lock:
            stored = self._check_revocable(
                api_key, f"revoke API key {api_key.id}", "revoke_with_guard"
            )
            stored.revoke(revoked_by, revoked_at)
        api_key.revoke(revoked_by, revoked_at)
        logger.info("api_key_revoked", api_key_id=str(api_key.id), revoked_by=revoked_by)
        return api_key

    def rotate_atomically(
        self, old_key: ApiKey, new_key: ApiKey, revoked_by: str
    ) -> ApiKey:
        if old_key.id is None:
            raise ValueError("API key id must not be None")
        self._prepare_for_save(new_key)
        if new_key.id == old_key.id:
            raise ValueError("Rotated key must have a different id")
        new_key.rotated_from_id = old_key.id
        revoked_at = self._clock()

        with self._lock:
            # Check every guard before applying anything
            stored = self._check_revocable(
                old_key, f"revoke old API key {old_key.id}", "rotate_atomically"
            )
            if new_key.id in self._items:
                raise ConflictError(
                    f"API key already exists: create API key {new_key.id}",
                    operation="rotate_atomically",
                    failed_writes=[f"create API key {new_key.id}"],
                )
            stored.revoke(revoked_by, revoked_at)
            self._items[new_key.id] = copy.deepcopy(new_key)

        old_key.revoke(revoked_by, revoked_at)
        logger.info(
            "api_key_rotated",
            old_api_key_id=str(old_key.id),
            new_api_key_id=str(new_key.id),
            revoked_by=revoked_by,
        )
        return new_key

    def save_all_atomically(self, api_keys: Iterable[ApiKey]) -> List[ApiKey]:
        api_keys = list(api_keys)
        if len(api_keys) > MAX_TRANSACTION_WRITES:
            raise ValueError(
                f"A transaction unit holds at most {MAX_TRANSACTION_WRITES} writes, "
                f"got {len(api_keys)}"
            )
        ids = [api_key.id for api_key in api_keys if api_key.id is not None]
        if len(ids) != len(set(ids)):
            raise ValueError("A transaction unit cannot write one item twice")
        for api_key in api_keys:
            self._prepare_for_save(api_key)
        with self._lock:
            for api_key in api_keys:
                self._items[api_key.id] = copy.deepcopy(api_key)
        return api_keys
