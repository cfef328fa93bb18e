"""Unit tests for the API key item codec."""

import uuid
from datetime import timedelta

import pytest

from infrastructure.persistence.errors import CorruptDataError
from modules.api_keys.domain.models import ApiKeyType
from modules.api_keys.infrastructure.codec import ApiKeyCodec
from tests.factories.api_keys import FIXED_NOW


@pytest.fixture
def codec():
    return ApiKeyCodec()


@pytest.fixture
def stored_key(api_key_factory):
    return api_key_factory(id=uuid.uuid4(), created_at=FIXED_NOW)


@pytest.mark.unit
class TestApiKeyCodecEncode:
    def test_keys_and_indexes(self, codec, stored_key):
        item = codec.to_item(stored_key)

        assert item["PK"] == {"S": f"APIKEY#{stored_key.id}"}
        assert item["SK"] == {"S": "METADATA"}
        assert item["GSI1PK"] == {"S": f"KEYHASH#{stored_key.key_hash}"}
        assert item["GSI1SK"] == {"S": "METADATA"}
        assert item["GSI2PK"] == {"S": "USER#dev@example.com"}
        assert item["GSI2SK"] == {"S": "2025-03-01T12:00:00.123456+00:00"}
        assert item["entityType"] == {"S": "API_KEY"}

    def test_attributes_use_camel_case(self, codec, stored_key):
        item = codec.to_item(stored_key)

        assert item["keyName"] == {"S": stored_key.key_name}
        assert item["keyType"] == {"S": "USER"}
        assert item["isActive"] == {"BOOL": True}
        assert item["createdAt"] == {"S": "2025-03-01T12:00:00.123456+00:00"}

    def test_absent_values_are_omitted(self, codec, stored_key):
        item = codec.to_item(stored_key)

        for name in ("lastUsedAt", "revokedAt", "revokedByEmail", "rotatedFromId"):
            assert name not in item

    def test_system_key_has_no_owner_index(self, codec, api_key_factory):
        api_key = api_key_factory(
            id=uuid.uuid4(), created_at=FIXED_NOW, user_email=None,
            key_type=ApiKeyType.SYSTEM,
        )

        item = codec.to_item(api_key)

        assert "GSI2PK" not in item
        assert "GSI2SK" not in item
        assert "GSI1PK" in item

    def test_requires_id(self, codec, api_key_factory):
        with pytest.raises(ValueError, match="must have an id"):
            codec.to_item(api_key_factory())


@pytest.mark.unit
class TestApiKeyCodecDecode:
    def test_round_trip_preserves_fields(self, codec, stored_key):
        stored_key.revoke("admin@example.com", FIXED_NOW + timedelta(hours=1))
        stored_key.rotated_from_id = uuid.uuid4()

        decoded = codec.to_entity(codec.to_item(stored_key))

        assert decoded == stored_key

    def test_missing_item_returns_none(self, codec):
        assert codec.to_entity(None) is None
        assert codec.to_entity({}) is None

    def test_other_entity_type_returns_none(self, codec, stored_key):
        item = codec.to_item(stored_key)
        item["entityType"] = {"S": "USER"}

        assert codec.to_entity(item) is None

    def test_missing_required_attribute_is_corrupt(self, codec, stored_key):
        item = codec.to_item(stored_key)
        del item["keyHash"]

        with pytest.raises(CorruptDataError) as exc_info:
            codec.to_entity(item)

        assert exc_info.value.operation == "decode_API_KEY"
        assert "keyHash" in exc_info.value.message

    @pytest.mark.parametrize(
        "name,value",
        [
            ("keyType", {"S": "ROBOT"}),
            ("createdAt", {"S": "yesterday"}),
            ("id", {"S": "not-a-uuid"}),
            ("isActive", {"S": "true"}),
        ],
    )
    def test_malformed_attribute_is_corrupt(self, codec, stored_key, name, value):
        item = codec.to_item(stored_key)
        item[name] = value

        with pytest.raises(CorruptDataError):
            codec.to_entity(item)

    def test_z_suffix_timestamps_are_utc(self, codec, stored_key):
        item = codec.to_item(stored_key)
        item["createdAt"] = {"S": "2025-03-01T12:00:00Z"}

        decoded = codec.to_entity(item)

        assert decoded.created_at == FIXED_NOW.replace(microsecond=0)
