"""Factory functions for API key test data."""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, List

from modules.api_keys.domain.models import ApiKey, ApiKeyType

FIXED_NOW = datetime(2025, 3, 1, 12, 0, 0, 123456, tzinfo=timezone.utc)


def make_api_key(**overrides: Any) -> ApiKey:
    """Create an ApiKey with realistic defaults.

    Args:
        **overrides: Field values replacing the defaults

    Returns:
        ApiKey instance (not persisted)
    """
    suffix = uuid.uuid4().hex[:12]
    values = {
        "key_name": f"ci-key-{suffix}",
        "key_hash": f"sha256-{uuid.uuid4().hex}",
        "key_prefix": f"idp_{suffix[:6]}",
        "key_type": ApiKeyType.USER,
        "user_email": "dev@example.com",
        "created_by_email": "dev@example.com",
        "expires_at": FIXED_NOW + timedelta(days=90),
    }
    values.update(overrides)
    return ApiKey(**values)


def make_api_keys(count: int, **overrides: Any) -> List[ApiKey]:
    return [make_api_key(**overrides) for _ in range(count)]
