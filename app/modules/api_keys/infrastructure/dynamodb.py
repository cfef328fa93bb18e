"""DynamoDB-backed API key repository."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Callable, List, Optional

from infrastructure.clients.aws.dynamodb import DynamoDBClient
from infrastructure.logging import get_module_logger
from infrastructure.persistence.codec import bool_value, datetime_value, string_value
from infrastructure.persistence.dynamodb import DynamoDBRepository
from infrastructure.persistence.errors import ConflictError, NotFoundError
from infrastructure.persistence.keys import partition_value
from infrastructure.persistence.transactions import (
    TransactionUnit,
    TransactionWriteBuilder,
)
from modules.api_keys.domain.models import ApiKey, ApiKeyType, utc_now
from modules.api_keys.domain.repository import (
    REVOKE_CONFLICT_MESSAGE,
    ApiKeyRepository,
)
from modules.api_keys.infrastructure.codec import (
    API_KEY_PREFIX,
    KEY_HASH_INDEX,
    KEY_HASH_PREFIX,
    USER_EMAIL_INDEX,
    USER_PREFIX,
    ApiKeyCodec,
)

if TYPE_CHECKING:
    from infrastructure.resilience.retry.executor import RetryExecutor

logger = get_module_logger()

REVOKE_UPDATE = (
    "SET #isActive = :inactive, #revokedAt = :revokedAt, "
    "#revokedByEmail = :revokedBy"
)
ACTIVE_GUARD = "#isActive = :active"


class DynamoDBApiKeyRepository(DynamoDBRepository[ApiKey], ApiKeyRepository):
    """API keys stored in the single table.

    Key hash lookups query GSI1 and owner lookups query GSI2; the remaining
    attribute lookups are drained, filtered scans.

    Args:
        client: Shared DynamoDB client
        table_name: Single table name
        retry_executor: Executor wrapping every engine call
        consistent_reads: Use strongly consistent point reads
        clock: Returns the current UTC time
    """

    key_prefix = API_KEY_PREFIX

    def __init__(
        self,
        client: DynamoDBClient,
        table_name: str,
        retry_executor: "RetryExecutor",
        consistent_reads: bool = True,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        super().__init__(
            client,
            table_name,
            ApiKeyCodec(),
            retry_executor,
            consistent_reads=consistent_reads,
        )
        self._clock = clock

    def prepare_for_save(self, entity: ApiKey) -> None:
        entity.validate()
        if entity.id is None:
            entity.id = uuid.uuid4()
        if entity.created_at is None:
            entity.created_at = self._clock()

    # -- queries -------------------------------------------------------------

    def find_by_key_hash(self, key_hash: str) -> Optional[ApiKey]:
        matches = self.query_index(
            KEY_HASH_INDEX,
            partition_value(KEY_HASH_PREFIX, key_hash),
            operation_name="find_by_key_hash",
        )
        return matches[0] if matches else None

    def find_by_user_email(self, user_email: str) -> List[ApiKey]:
        return self.query_index(
            USER_EMAIL_INDEX,
            partition_value(USER_PREFIX, user_email),
            operation_name="find_by_user_email",
        )

    def find_by_user_email_and_is_active(
        self, user_email: str, is_active: bool
    ) -> List[ApiKey]:
        return self.query_index(
            USER_EMAIL_INDEX,
            partition_value(USER_PREFIX, user_email),
            filter_expression="#isActive = :isActive",
            names={"#isActive": "isActive"},
            values={":isActive": bool_value(is_active)},
            operation_name="find_by_user_email_and_is_active",
        )

    def find_by_created_by_email(self, created_by_email: str) -> List[ApiKey]:
        return self.scan_entities(
            "#createdByEmail = :createdByEmail",
            names={"#createdByEmail": "createdByEmail"},
            values={":createdByEmail": string_value(created_by_email)},
            operation_name="find_by_created_by_email",
        )

    def find_by_key_type(self, key_type: ApiKeyType) -> List[ApiKey]:
        return self.scan_entities(
            "#keyType = :keyType",
            names={"#keyType": "keyType"},
            values={":keyType": string_value(key_type.value)},
            operation_name="find_by_key_type",
        )

    def find_by_is_active(self, is_active: bool) -> List[ApiKey]:
        return self.scan_entities(
            "#isActive = :isActive",
            names={"#isActive": "isActive"},
            values={":isActive": bool_value(is_active)},
            operation_name="find_by_is_active",
        )

    def find_expired_keys(self, now: Optional[datetime] = None) -> List[ApiKey]:
        return self.scan_entities(
            "attribute_exists(#expiresAt) AND #expiresAt < :now",
            names={"#expiresAt": "expiresAt"},
            values={":now": datetime_value(now or self._clock())},
            operation_name="find_expired_keys",
        )

    # -- atomic lifecycle operations -----------------------------------------

    def _add_revoke(
        self,
        builder: TransactionWriteBuilder,
        api_key: ApiKey,
        revoked_by: str,
        revoked_at: datetime,
        label: str,
    ) -> None:
        builder.update(
            self.key_for(api_key.id),
            REVOKE_UPDATE,
            label=label,
            condition=ACTIVE_GUARD,
            names={
                "#isActive": "isActive",
                "#revokedAt": "revokedAt",
                "#revokedByEmail": "revokedByEmail",
            },
            values={
                ":inactive": bool_value(False),
                ":active": bool_value(True),
                ":revokedAt": datetime_value(revoked_at),
                ":revokedBy": string_value(revoked_by),
            },
        )

    def revoke_with_guard(self, api_key: ApiKey, revoked_by: str) -> ApiKey:
        if api_key.id is None:
            raise ValueError("API key id must not be None")

        revoked_at = self._clock()
        builder = TransactionWriteBuilder(self.table_name)
        self._add_revoke(
            builder, api_key, revoked_by, revoked_at, f"revoke API key {api_key.id}"
        )
        self._submit(builder.build(), "revoke_with_guard", api_key)

        api_key.revoke(revoked_by, revoked_at)
        logger.info("api_key_revoked", api_key_id=str(api_key.id), revoked_by=revoked_by)
        return api_key

    def rotate_atomically(
        self, old_key: ApiKey, new_key: ApiKey, revoked_by: str
    ) -> ApiKey:
        if old_key.id is None:
            raise ValueError("API key id must not be None")
        self.prepare_for_save(new_key)
        if new_key.id == old_key.id:
            raise ValueError("Rotated key must have a different id")
        new_key.rotated_from_id = old_key.id

        revoked_at = self._clock()
        builder = TransactionWriteBuilder(self.table_name)
        builder.put_if_absent(
            self._codec.to_item(new_key), label=f"create API key {new_key.id}"
        )
        self._add_revoke(
            builder, old_key, revoked_by, revoked_at, f"revoke old API key {old_key.id}"
        )
        self._submit(builder.build(), "rotate_atomically", old_key)

        old_key.revoke(revoked_by, revoked_at)
        logger.info(
            "api_key_rotated",
            old_api_key_id=str(old_key.id),
            new_api_key_id=str(new_key.id),
            revoked_by=revoked_by,
        )
        return new_key

    def _submit(self, unit: TransactionUnit, operation: str, api_key: ApiKey) -> None:
        operation_name = self._operation(operation)
        try:
            self._transactions.execute(unit, operation_name)
        except NotFoundError as exc:
            raise NotFoundError(
                f"API key not found: {api_key.id}",
                operation=operation_name,
                attempts=exc.attempts,
                classification=exc.classification,
            ) from exc
        except ConflictError as exc:
            revoke_failed = any(label.startswith("revoke") for label in exc.failed_writes)
            message = (
                f"{REVOKE_CONFLICT_MESSAGE}: {api_key.id}"
                if revoke_failed or not exc.failed_writes
                else f"API key already exists: {exc.failed_writes[0]}"
            )
            raise ConflictError(
                message,
                operation=operation_name,
                attempts=exc.attempts,
                classification=exc.classification,
                failed_writes=exc.failed_writes,
            ) from exc
