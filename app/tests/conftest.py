"""Shared fixtures for the persistence test suite."""

from typing import List

import pytest

from infrastructure.clients.aws.dynamodb import DynamoDBClient
from infrastructure.configuration import AwsSettings, PersistenceSettings, Settings
from infrastructure.persistence.schema import table_definition
from infrastructure.resilience.retry import RetryExecutor, RetryPolicy
from infrastructure.services import providers
from tests.factories.api_keys import FIXED_NOW, make_api_key
from tests.fixtures.dynamodb import TABLE_NAME, FakeDynamoDBClient
from tests.fixtures.dynamodb import make_client_error as _make_client_error


class WaitRecorder:
    """Backoff wait double: records requested delays, never sleeps."""

    def __init__(self, cancel_after: int | None = None):
        self.delays: List[float] = []
        self._cancel_after = cancel_after

    def __call__(self, event, seconds: float) -> bool:
        self.delays.append(seconds)
        if self._cancel_after is not None and len(self.delays) >= self._cancel_after:
            return True
        return event.is_set()

    @property
    def delays_ms(self) -> List[int]:
        return [round(d * 1000) for d in self.delays]


@pytest.fixture(autouse=True)
def clear_provider_caches():
    providers.get_settings.cache_clear()
    providers.get_logger.cache_clear()
    providers.get_dynamodb_client.cache_clear()
    providers.get_api_key_repository.cache_clear()
    yield
    providers.get_settings.cache_clear()
    providers.get_logger.cache_clear()
    providers.get_dynamodb_client.cache_clear()
    providers.get_api_key_repository.cache_clear()


@pytest.fixture
def make_client_error():
    """Factory for botocore ClientError instances."""
    return _make_client_error


@pytest.fixture
def wait_recorder():
    return WaitRecorder()


@pytest.fixture
def retry_executor(wait_recorder):
    return RetryExecutor(RetryPolicy(), wait=wait_recorder)


@pytest.fixture
def fake_dynamodb():
    fake = FakeDynamoDBClient(page_size=25)
    fake.create_table(**table_definition(TABLE_NAME))
    fake.calls.clear()
    return fake


@pytest.fixture
def dynamodb_client(fake_dynamodb):
    return DynamoDBClient(client=fake_dynamodb)


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def api_key_factory():
    """Factory for ApiKey instances with overridable fields."""
    return make_api_key


@pytest.fixture
def settings_factory():
    """Factory for Settings with explicit persistence overrides."""

    def _factory(**persistence_overrides) -> Settings:
        values = {"table_name": TABLE_NAME}
        values.update(persistence_overrides)
        return Settings(
            aws=AwsSettings(AWS_REGION="ca-central-1"),
            persistence=PersistenceSettings(**values),
        )

    return _factory
