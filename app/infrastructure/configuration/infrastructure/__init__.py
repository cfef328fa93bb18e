"""Infrastructure-level settings."""

from infrastructure.configuration.infrastructure.persistence import (
    PersistenceSettings,
)

__all__ = ["PersistenceSettings"]
