"""Infrastructure configuration module - public API.

Centralized configuration management using Pydantic BaseSettings with
domain-based organization.

Exports:
    Settings: Main settings class
    AwsSettings: AWS session settings
    PersistenceSettings: Storage backend settings

Example:
    ```python
    from infrastructure.services import get_settings

    settings = get_settings()
    backend = settings.persistence.backend
    ```
"""

from infrastructure.configuration.settings import Settings
from infrastructure.configuration.integrations import AwsSettings
from infrastructure.configuration.infrastructure import PersistenceSettings

__all__ = ["Settings", "AwsSettings", "PersistenceSettings"]
