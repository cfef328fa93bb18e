"""
Dependency injection services.

Provides singleton provider functions for settings, logging, the storage
client and repositories.
"""

from infrastructure.services.providers import (
    get_settings,
    get_logger,
    get_dynamodb_client,
    get_api_key_repository,
)

__all__ = [
    "get_settings",
    "get_logger",
    "get_dynamodb_client",
    "get_api_key_repository",
]
