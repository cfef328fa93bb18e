"""Single-table item mapping for API keys.

Item layout:

    PK=APIKEY#<id>          SK=METADATA
    GSI1PK=KEYHASH#<hash>   GSI1SK=METADATA          (lookup by key hash)
    GSI2PK=USER#<email>     GSI2SK=<createdAt ISO>   (keys per owner, by age)

Entity attributes use camelCase names; absent values are omitted.
"""

from infrastructure.persistence import codec as attrs
from infrastructure.persistence.codec import EntityCodec, Item
from infrastructure.persistence.keys import (
    GSI1,
    GSI2,
    METADATA_SK,
    entity_key,
    index_attributes,
    partition_value,
)
from modules.api_keys.domain.models import ApiKey, ApiKeyType

API_KEY_PREFIX = "APIKEY"
KEY_HASH_PREFIX = "KEYHASH"
USER_PREFIX = "USER"

KEY_HASH_INDEX = GSI1
USER_EMAIL_INDEX = GSI2


class ApiKeyCodec(EntityCodec[ApiKey]):
    entity_type = "API_KEY"

    def encode(self, entity: ApiKey) -> Item:
        if entity.id is None:
            raise ValueError("API key must have an id before it is stored")
        item: Item = dict(entity_key(API_KEY_PREFIX, entity.id))
        item["id"] = attrs.string_value(str(entity.id))
        item["keyName"] = attrs.string_value(entity.key_name)
        item["keyHash"] = attrs.string_value(entity.key_hash)
        item["keyType"] = attrs.string_value(entity.key_type.value)
        item["isActive"] = attrs.bool_value(entity.is_active)
        attrs.put_optional(item, "keyPrefix", entity.key_prefix)
        attrs.put_optional(item, "userEmail", entity.user_email)
        attrs.put_optional(item, "createdByEmail", entity.created_by_email)
        attrs.put_optional(item, "createdAt", entity.created_at)
        attrs.put_optional(item, "expiresAt", entity.expires_at)
        attrs.put_optional(item, "lastUsedAt", entity.last_used_at)
        attrs.put_optional(item, "revokedAt", entity.revoked_at)
        attrs.put_optional(item, "revokedByEmail", entity.revoked_by_email)
        attrs.put_optional(item, "rotatedFromId", entity.rotated_from_id)
        attrs.put_optional(item, "gracePeriodEndsAt", entity.grace_period_ends_at)

        item.update(
            index_attributes(
                KEY_HASH_INDEX,
                partition_value(KEY_HASH_PREFIX, entity.key_hash),
                METADATA_SK,
            )
        )
        if entity.user_email and entity.created_at:
            item.update(
                index_attributes(
                    USER_EMAIL_INDEX,
                    partition_value(USER_PREFIX, entity.user_email),
                    item["createdAt"]["S"],
                )
            )
        return item

    def decode(self, item: Item) -> ApiKey:
        return ApiKey(
            id=attrs.get_uuid(item, "id", required=True),
            key_name=attrs.get_string(item, "keyName", required=True),
            key_hash=attrs.get_string(item, "keyHash", required=True),
            key_type=attrs.get_enum(item, "keyType", ApiKeyType, required=True),
            is_active=attrs.get_bool(item, "isActive", required=True),
            key_prefix=attrs.get_string(item, "keyPrefix"),
            user_email=attrs.get_string(item, "userEmail"),
            created_by_email=attrs.get_string(item, "createdByEmail"),
            created_at=attrs.get_datetime(item, "createdAt"),
            expires_at=attrs.get_datetime(item, "expiresAt"),
            last_used_at=attrs.get_datetime(item, "lastUsedAt"),
            revoked_at=attrs.get_datetime(item, "revokedAt"),
            revoked_by_email=attrs.get_string(item, "revokedByEmail"),
            rotated_from_id=attrs.get_uuid(item, "rotatedFromId"),
            grace_period_ends_at=attrs.get_datetime(item, "gracePeriodEndsAt"),
        )
