"""Transactional write units for DynamoDB.

``TransactionWriteBuilder`` assembles write descriptors (put, update,
delete) into an immutable ``TransactionUnit``; it performs no I/O.
``TransactionManager`` submits a unit through the retry executor as one
all-or-nothing ``TransactWriteItems`` call.

Each unit carries a ``ClientRequestToken`` generated once at build time, so
resubmitting the same unit after a transient failure cannot apply it twice.
"""

import copy
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Tuple

import structlog

from infrastructure.clients.aws.dynamodb import DynamoDBClient
from infrastructure.operations.result import ErrorClassification
from infrastructure.persistence.errors import ConflictError, NotFoundError
from infrastructure.persistence.keys import PK, SK

if TYPE_CHECKING:
    from infrastructure.resilience.retry.executor import RetryExecutor

logger = structlog.get_logger()

MAX_TRANSACTION_WRITES = 100

PUT = "Put"
UPDATE = "Update"
DELETE = "Delete"

ATTRIBUTE_NOT_EXISTS_PK = f"attribute_not_exists({PK})"


@dataclass(frozen=True)
class TransactionWrite:
    """One write descriptor in a transaction unit.

    Attributes:
        action: "Put", "Update" or "Delete"
        table_name: Target table
        label: Human-readable description used only in logs and errors
        item: Full item (Put only)
        key: Primary key (Update/Delete)
        update_expression: SET/REMOVE expression (Update only)
        condition_expression: Optional guard evaluated at commit time
        expression_attribute_names: Placeholders used by the expressions
        expression_attribute_values: Bound values used by the expressions
        return_old_on_failure: Request ALL_OLD when the guard fails, so a
            missing target is distinguishable from a failed guard
    """

    action: str
    table_name: str
    label: str
    item: Optional[Mapping[str, Any]] = None
    key: Optional[Mapping[str, Any]] = None
    update_expression: Optional[str] = None
    condition_expression: Optional[str] = None
    expression_attribute_names: Mapping[str, str] = field(default_factory=dict)
    expression_attribute_values: Mapping[str, Any] = field(default_factory=dict)
    return_old_on_failure: bool = False

    def to_request(self) -> Dict[str, Any]:
        """Render the descriptor as a ``TransactItems`` entry."""
        body: Dict[str, Any] = {"TableName": self.table_name}
        if self.item is not None:
            body["Item"] = copy.deepcopy(dict(self.item))
        if self.key is not None:
            body["Key"] = copy.deepcopy(dict(self.key))
        if self.update_expression:
            body["UpdateExpression"] = self.update_expression
        if self.condition_expression:
            body["ConditionExpression"] = self.condition_expression
        if self.expression_attribute_names:
            body["ExpressionAttributeNames"] = dict(self.expression_attribute_names)
        if self.expression_attribute_values:
            body["ExpressionAttributeValues"] = copy.deepcopy(
                dict(self.expression_attribute_values)
            )
        if self.return_old_on_failure:
            body["ReturnValuesOnConditionCheckFailure"] = "ALL_OLD"
        return {self.action: body}

    @property
    def target(self) -> Tuple[str, str, str]:
        """Table and primary key this write touches."""
        source = (self.item if self.action == PUT else self.key) or {}
        return self.table_name, repr(source.get(PK)), repr(source.get(SK))


@dataclass(frozen=True)
class TransactionUnit:
    """Immutable, ordered set of writes submitted as one call."""

    writes: Tuple[TransactionWrite, ...]
    client_request_token: str

    def __len__(self) -> int:
        return len(self.writes)

    @property
    def labels(self) -> List[str]:
        return [write.label for write in self.writes]

    def to_request(self) -> Dict[str, Any]:
        return {
            "TransactItems": [write.to_request() for write in self.writes],
            "ClientRequestToken": self.client_request_token,
        }


class TransactionWriteBuilder:
    """Accumulates write descriptors for a single table.

    Example:
        unit = (
            TransactionWriteBuilder("idp-data")
            .put_if_absent(new_item, label="create new key")
            .update(old_key, "SET #active = :false", label="revoke old key",
                    condition="#active = :true", ...)
            .build()
        )
    """

    def __init__(self, table_name: str) -> None:
        self._table_name = table_name
        self._writes: List[TransactionWrite] = []

    def __len__(self) -> int:
        return len(self._writes)

    def put(
        self,
        item: Mapping[str, Any],
        label: str,
        condition: Optional[str] = None,
        names: Optional[Mapping[str, str]] = None,
        values: Optional[Mapping[str, Any]] = None,
    ) -> "TransactionWriteBuilder":
        self._writes.append(
            TransactionWrite(
                action=PUT,
                table_name=self._table_name,
                label=label,
                item=copy.deepcopy(dict(item)),
                condition_expression=condition,
                expression_attribute_names=dict(names or {}),
                expression_attribute_values=copy.deepcopy(dict(values or {})),
            )
        )
        return self

    def put_if_absent(
        self, item: Mapping[str, Any], label: str
    ) -> "TransactionWriteBuilder":
        """Put guarded by "item must not already exist"."""
        return self.put(item, label, condition=ATTRIBUTE_NOT_EXISTS_PK)

    def update(
        self,
        key: Mapping[str, Any],
        update_expression: str,
        label: str,
        condition: Optional[str] = None,
        names: Optional[Mapping[str, str]] = None,
        values: Optional[Mapping[str, Any]] = None,
    ) -> "TransactionWriteBuilder":
        """Partial update; guarded updates request ALL_OLD on failure."""
        self._writes.append(
            TransactionWrite(
                action=UPDATE,
                table_name=self._table_name,
                label=label,
                key=copy.deepcopy(dict(key)),
                update_expression=update_expression,
                condition_expression=condition,
                expression_attribute_names=dict(names or {}),
                expression_attribute_values=copy.deepcopy(dict(values or {})),
                return_old_on_failure=condition is not None,
            )
        )
        return self

    def delete(
        self,
        key: Mapping[str, Any],
        label: str,
        condition: Optional[str] = None,
        names: Optional[Mapping[str, str]] = None,
        values: Optional[Mapping[str, Any]] = None,
    ) -> "TransactionWriteBuilder":
        self._writes.append(
            TransactionWrite(
                action=DELETE,
                table_name=self._table_name,
                label=label,
                key=copy.deepcopy(dict(key)),
                condition_expression=condition,
                expression_attribute_names=dict(names or {}),
                expression_attribute_values=copy.deepcopy(dict(values or {})),
            )
        )
        return self

    def build(self) -> TransactionUnit:
        """Freeze the accumulated writes into a unit.

        Raises:
            ValueError: no writes, more than the engine accepts in one call, or
                two writes on the same item
        """
        if not self._writes:
            raise ValueError("A transaction unit needs at least one write")
        if len(self._writes) > MAX_TRANSACTION_WRITES:
            raise ValueError(
                f"A transaction unit holds at most {MAX_TRANSACTION_WRITES} writes, "
                f"got {len(self._writes)}"
            )
        seen: Dict[Tuple[str, str, str], str] = {}
        for write in self._writes:
            if write.target in seen:
                raise ValueError(
                    f"A transaction unit cannot write one item twice: "
                    f"{seen[write.target]!r} and {write.label!r}"
                )
            seen[write.target] = write.label
        return TransactionUnit(
            writes=tuple(self._writes),
            client_request_token=str(uuid.uuid4()),
        )


class TransactionManager:
    """Submits transaction units through the retry executor.

    Args:
        client: Shared DynamoDB client
        retry_executor: Executor applying the retry policy to each submission
    """

    def __init__(self, client: DynamoDBClient, retry_executor: "RetryExecutor"):
        self._client = client
        self._retry_executor = retry_executor

    def execute(self, unit: TransactionUnit, operation_name: str) -> None:
        """Apply every write in ``unit`` or none of them.

        Raises:
            ConflictError: a guard failed; ``failed_writes`` names which
            NotFoundError: a guarded update targeted an item that does not exist
            PersistenceError: any other classified failure
        """
        log = logger.bind(operation=operation_name)
        log.info(
            "transaction_write_submitted",
            write_count=len(unit),
            writes=unit.labels,
        )
        request = unit.to_request()
        try:
            self._retry_executor.execute_with_retry_void(
                lambda: self._client.transact_write_items(**request),
                operation_name,
            )
        except ConflictError as exc:
            raise self._refine_conflict(unit, exc, operation_name) from exc
        log.info("transaction_write_committed", write_count=len(unit))

    def _refine_conflict(
        self, unit: TransactionUnit, exc: ConflictError, operation_name: str
    ) -> Exception:
        classification: Optional[ErrorClassification] = exc.classification
        reasons = classification.reasons if classification else []
        failed: List[str] = []
        missing: List[str] = []

        for reason in reasons:
            if reason.code in ("None", "") or reason.index >= len(unit):
                continue
            write = unit.writes[reason.index]
            failed.append(write.label)
            logger.warning(
                "transaction_write_cancelled",
                operation=operation_name,
                index=reason.index,
                write=write.label,
                reason=reason.code,
                detail=reason.message,
            )
            if (
                write.return_old_on_failure
                and reason.code == "ConditionalCheckFailed"
                and not reason.item_exists
            ):
                missing.append(write.label)

        if missing:
            return NotFoundError(
                f"Target item does not exist: {', '.join(missing)}",
                operation=operation_name,
                attempts=exc.attempts,
                classification=classification,
            )
        return ConflictError(
            exc.message,
            operation=operation_name,
            attempts=exc.attempts,
            classification=classification,
            failed_writes=failed,
        )
