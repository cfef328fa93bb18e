"""External integration settings."""

from infrastructure.configuration.integrations.aws import AwsSettings

__all__ = ["AwsSettings"]
