"""Unit tests for settings classes."""

import pytest
from pydantic import ValidationError

from infrastructure.configuration import AwsSettings, PersistenceSettings, Settings


@pytest.mark.unit
class TestPersistenceSettings:
    def test_defaults(self, monkeypatch):
        for name in (
            "PERSISTENCE_BACKEND",
            "PERSISTENCE_TABLE_NAME",
            "PERSISTENCE_RETRY_MAX_RETRIES",
        ):
            monkeypatch.delenv(name, raising=False)

        settings = PersistenceSettings(_env_file=None)

        assert settings.backend == "dynamodb"
        assert settings.table_name == "idp-data"
        assert settings.consistent_reads is True
        assert settings.audit_enabled is True
        assert settings.retry_max_retries == 3
        assert settings.retry_initial_backoff_ms == 100
        assert settings.retry_max_backoff_ms == 5000
        assert settings.retry_backoff_multiplier == 2.0

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("PERSISTENCE_BACKEND", "Memory")
        monkeypatch.setenv("PERSISTENCE_TABLE_NAME", "idp-data-staging")
        monkeypatch.setenv("PERSISTENCE_RETRY_MAX_RETRIES", "1")

        settings = PersistenceSettings(_env_file=None)

        assert settings.backend == "memory"
        assert settings.table_name == "idp-data-staging"
        assert settings.retry_max_retries == 1

    def test_unknown_backend_rejected(self):
        with pytest.raises(ValidationError, match="backend must be one of"):
            PersistenceSettings(backend="postgres")

    @pytest.mark.parametrize(
        "overrides",
        [
            {"retry_max_retries": -1},
            {"retry_initial_backoff_ms": 0},
            {"retry_backoff_multiplier": 0.5},
            {"retry_initial_backoff_ms": 500, "retry_max_backoff_ms": 100},
        ],
    )
    def test_invalid_retry_budget_rejected(self, overrides):
        with pytest.raises(ValidationError):
            PersistenceSettings(**overrides)


@pytest.mark.unit
class TestSettings:
    def test_aggregates_sections(self, settings_factory):
        settings = settings_factory(backend="memory")

        assert settings.persistence.backend == "memory"
        assert settings.aws.AWS_REGION == "ca-central-1"

    def test_is_production_follows_prefix(self):
        assert Settings(PREFIX="").is_production is True
        assert Settings(PREFIX="dev-").is_production is False

    def test_service_role_map_only_when_role_set(self):
        assert AwsSettings(AWS_DYNAMODB_ROLE_ARN=None).SERVICE_ROLE_MAP == {}
        assert AwsSettings(
            AWS_DYNAMODB_ROLE_ARN="arn:aws:iam::1:role/r"
        ).SERVICE_ROLE_MAP == {"dynamodb": "arn:aws:iam::1:role/r"}
