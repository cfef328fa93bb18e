"""Persistence infrastructure settings."""

from pydantic import Field, field_validator, model_validator

from infrastructure.configuration.base import InfrastructureSettings

SUPPORTED_BACKENDS = ("memory", "dynamodb")


class PersistenceSettings(InfrastructureSettings):
    """Storage backend configuration.

    Environment Variables:
        PERSISTENCE_BACKEND: 'dynamodb' (production) or 'memory' (dev, tests)
        PERSISTENCE_TABLE_NAME: Single table holding all entities (default: idp-data)
        PERSISTENCE_CONSISTENT_READS: Strongly consistent point reads (default: True)
        PERSISTENCE_AUDIT_ENABLED: Wrap repositories with audit logging (default: True)
        PERSISTENCE_RETRY_MAX_RETRIES: Retries after the first attempt (default: 3)
        PERSISTENCE_RETRY_INITIAL_BACKOFF_MS: First backoff delay (default: 100ms)
        PERSISTENCE_RETRY_MAX_BACKOFF_MS: Backoff cap (default: 5000ms)
        PERSISTENCE_RETRY_BACKOFF_MULTIPLIER: Growth factor (default: 2.0)

    Exponential Backoff:
        Delay before retry n: min(initial * multiplier ** (n - 1), max)

        With defaults: 100ms, 200ms, 400ms, then the call fails.
    """

    backend: str = Field(
        default="dynamodb",
        alias="PERSISTENCE_BACKEND",
        description="Storage backend: 'dynamodb' or 'memory'",
    )
    table_name: str = Field(
        default="idp-data",
        alias="PERSISTENCE_TABLE_NAME",
        description="DynamoDB table name",
    )
    consistent_reads: bool = Field(
        default=True,
        alias="PERSISTENCE_CONSISTENT_READS",
        description="Use strongly consistent reads for point lookups",
    )
    audit_enabled: bool = Field(
        default=True,
        alias="PERSISTENCE_AUDIT_ENABLED",
        description="Log an audit event for each repository call",
    )
    retry_max_retries: int = Field(
        default=3,
        alias="PERSISTENCE_RETRY_MAX_RETRIES",
        ge=0,
    )
    retry_initial_backoff_ms: int = Field(
        default=100,
        alias="PERSISTENCE_RETRY_INITIAL_BACKOFF_MS",
        gt=0,
    )
    retry_max_backoff_ms: int = Field(
        default=5000,
        alias="PERSISTENCE_RETRY_MAX_BACKOFF_MS",
        gt=0,
    )
    retry_backoff_multiplier: float = Field(
        default=2.0,
        alias="PERSISTENCE_RETRY_BACKOFF_MULTIPLIER",
        ge=1.0,
    )

    @field_validator("backend")
    @classmethod
    def _validate_backend(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in SUPPORTED_BACKENDS:
            raise ValueError(
                f"backend must be one of {', '.join(SUPPORTED_BACKENDS)}, got {value!r}"
            )
        return value

    @model_validator(mode="after")
    def _validate_backoff_bounds(self) -> "PersistenceSettings":
        if self.retry_max_backoff_ms < self.retry_initial_backoff_ms:
            raise ValueError(
                "PERSISTENCE_RETRY_MAX_BACKOFF_MS must be >= PERSISTENCE_RETRY_INITIAL_BACKOFF_MS"
            )
        return self
