"""Fixtures shared by the API key repository tests."""

import pytest

from modules.api_keys.infrastructure.dynamodb import DynamoDBApiKeyRepository
from modules.api_keys.infrastructure.memory import InMemoryApiKeyRepository
from tests.fixtures.dynamodb import TABLE_NAME


@pytest.fixture
def dynamodb_repository(dynamodb_client, retry_executor, fixed_clock):
    return DynamoDBApiKeyRepository(
        dynamodb_client, TABLE_NAME, retry_executor, clock=fixed_clock
    )


@pytest.fixture
def memory_repository(fixed_clock):
    return InMemoryApiKeyRepository(clock=fixed_clock)


@pytest.fixture(params=["memory", "dynamodb"])
def api_key_repository(request):
    """Each backend in turn; both must honour the same contract."""
    return request.getfixturevalue(f"{request.param}_repository")
