"""API key domain model.

``ApiKey`` is a plain dataclass (no runtime validation beyond
``validate``); its lifecycle state is derived at read time:

    ACTIVE   -> not revoked and not past ``expires_at``
    REVOKED  -> ``revoked_at`` set (explicit revoke or rotation)
    EXPIRED  -> past ``expires_at`` (never stored)

All timestamps are timezone-aware UTC datetimes.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional
from uuid import UUID

EXPIRING_SOON_WINDOW = timedelta(days=7)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ApiKeyType(str, Enum):
    USER = "USER"
    SYSTEM = "SYSTEM"


class ApiKeyStatus(str, Enum):
    ACTIVE = "ACTIVE"
    REVOKED = "REVOKED"
    EXPIRED = "EXPIRED"


@dataclass
class ApiKey:
    """An issued API key. Only the hash of the secret is ever stored.

    Attributes:
        key_name: Display name chosen by the owner
        key_hash: Hash of the secret, used for authentication lookups
        key_prefix: First characters of the secret, shown in listings
        key_type: USER keys belong to ``user_email``; SYSTEM keys to a service
        is_active: False once revoked
        rotated_from_id: Id of the key this one replaced
        grace_period_ends_at: When the replaced key stops being honoured
    """

    key_name: str
    key_hash: str
    key_type: ApiKeyType
    key_prefix: Optional[str] = None
    id: Optional[UUID] = None
    user_email: Optional[str] = None
    created_by_email: Optional[str] = None
    created_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    last_used_at: Optional[datetime] = None
    revoked_at: Optional[datetime] = None
    revoked_by_email: Optional[str] = None
    is_active: bool = True
    rotated_from_id: Optional[UUID] = None
    grace_period_ends_at: Optional[datetime] = None

    def validate(self) -> None:
        """Raise ValueError if required attributes are missing."""
        if not self.key_name:
            raise ValueError("API key name is required")
        if not self.key_hash:
            raise ValueError("API key hash is required")
        if not isinstance(self.key_type, ApiKeyType):
            raise ValueError(f"Invalid API key type: {self.key_type!r}")

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or utc_now()) > self.expires_at

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        """True if the key may be used to authenticate."""
        if not self.is_active or self.revoked_at is not None:
            return False
        return not self.is_expired(now)

    def is_expiring_soon(self, now: Optional[datetime] = None) -> bool:
        now = now or utc_now()
        if self.expires_at is None or self.is_expired(now):
            return False
        return self.expires_at < now + EXPIRING_SOON_WINDOW

    def status(self, now: Optional[datetime] = None) -> ApiKeyStatus:
        if self.revoked_at is not None or not self.is_active:
            return ApiKeyStatus.REVOKED
        if self.is_expired(now):
            return ApiKeyStatus.EXPIRED
        return ApiKeyStatus.ACTIVE

    def revoke(self, revoked_by: str, now: Optional[datetime] = None) -> None:
        self.is_active = False
        self.revoked_at = now or utc_now()
        self.revoked_by_email = revoked_by

    def mark_as_used(self, now: Optional[datetime] = None) -> None:
        self.last_used_at = now or utc_now()
