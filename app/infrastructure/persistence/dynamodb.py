"""Generic DynamoDB repository over the single-table layout.

Concrete repositories supply a codec, a key prefix and their domain
queries; this base provides the shared capability set, drained scans and
queries, and atomic bulk saves. Every engine call goes through the retry
executor, so callers only ever see PersistenceError subclasses.
"""

from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Mapping, Optional, TypeVar
from uuid import UUID

import structlog

from infrastructure.clients.aws.dynamodb import DynamoDBClient
from infrastructure.persistence.codec import ENTITY_TYPE_ATTR, EntityCodec
from infrastructure.persistence.keys import entity_key, index_key_names
from infrastructure.persistence.repository import Repository
from infrastructure.persistence.transactions import (
    TransactionManager,
    TransactionWriteBuilder,
)

if TYPE_CHECKING:
    from infrastructure.resilience.retry.executor import RetryExecutor

logger = structlog.get_logger()

T = TypeVar("T")

ENTITY_TYPE_FILTER = "#entityType = :entityType"


class DynamoDBRepository(Repository[T, UUID]):
    """Shared DynamoDB implementation of the repository capability set.

    Args:
        client: Shared DynamoDB client
        table_name: Single table holding all entities
        codec: Codec for the entity type this repository stores
        retry_executor: Executor wrapping every engine call
        consistent_reads: Use strongly consistent point reads
    """

    key_prefix: str = ""

    def __init__(
        self,
        client: DynamoDBClient,
        table_name: str,
        codec: EntityCodec[T],
        retry_executor: "RetryExecutor",
        consistent_reads: bool = True,
    ) -> None:
        self._client = client
        self._table_name = table_name
        self._codec = codec
        self._retry = retry_executor
        self._consistent_reads = consistent_reads
        self._transactions = TransactionManager(client, retry_executor)

    @property
    def table_name(self) -> str:
        return self._table_name

    # -- hooks ---------------------------------------------------------------

    def entity_id(self, entity: T) -> Any:
        return getattr(entity, "id")

    def prepare_for_save(self, entity: T) -> None:
        """Assign store-owned fields (ids, timestamps) before encoding."""

    def key_for(self, entity_id: Any) -> Dict[str, Dict[str, str]]:
        return entity_key(self.key_prefix, entity_id)

    def _operation(self, name: str) -> str:
        return f"{self._codec.entity_type}.{name}"

    # -- capability set ------------------------------------------------------

    def save(self, entity: T) -> T:
        self.prepare_for_save(entity)
        item = self._codec.to_item(entity)
        self._retry.execute_with_retry_void(
            lambda: self._client.put_item(self._table_name, Item=item),
            self._operation("save"),
        )
        logger.debug(
            "entity_saved",
            entity_type=self._codec.entity_type,
            entity_id=str(self.entity_id(entity)),
        )
        return entity

    def find_by_id(self, entity_id: UUID) -> Optional[T]:
        if entity_id is None:
            return None
        key = self.key_for(entity_id)
        response = self._retry.execute_with_retry(
            lambda: self._client.get_item(
                self._table_name, Key=key, ConsistentRead=self._consistent_reads
            ),
            self._operation("find_by_id"),
        )
        return self._codec.to_entity(response.get("Item"))

    def find_all(self) -> List[T]:
        return self.scan_entities(operation_name="find_all")

    def delete(self, entity: T) -> None:
        entity_id = self.entity_id(entity)
        if entity_id is None:
            return
        key = self.key_for(entity_id)
        self._retry.execute_with_retry_void(
            lambda: self._client.delete_item(self._table_name, Key=key),
            self._operation("delete"),
        )

    def count(self) -> int:
        total = 0
        for page in self._client.paginate(
            "scan",
            self._table_name,
            page_executor=self._page_executor("count"),
            Select="COUNT",
            **self._filter_params(),
        ):
            total += page.get("Count", 0)
        return total

    def exists(self, entity_id: UUID) -> bool:
        if entity_id is None:
            return False
        key = self.key_for(entity_id)
        response = self._retry.execute_with_retry(
            lambda: self._client.get_item(
                self._table_name,
                Key=key,
                ConsistentRead=self._consistent_reads,
                ProjectionExpression="#entityType",
                ExpressionAttributeNames={"#entityType": ENTITY_TYPE_ATTR},
            ),
            self._operation("exists"),
        )
        item = response.get("Item") or {}
        return item.get(ENTITY_TYPE_ATTR, {}).get("S") == self._codec.entity_type

    # -- atomic writes -------------------------------------------------------

    def save_all_atomically(self, entities: Iterable[T]) -> List[T]:
        """Put every entity in one transaction unit; all land or none do.

        Raises:
            ValueError: more entities than one unit can hold, or two entities
                with the same id
        """
        entities = list(entities)
        if not entities:
            return []
        builder = TransactionWriteBuilder(self._table_name)
        for entity in entities:
            self.prepare_for_save(entity)
            builder.put(
                self._codec.to_item(entity),
                label=f"save {self._codec.entity_type} {self.entity_id(entity)}",
            )
        self._transactions.execute(builder.build(), self._operation("save_all"))
        return entities

    # -- reads ---------------------------------------------------------------

    def scan_entities(
        self,
        filter_expression: Optional[str] = None,
        names: Optional[Mapping[str, str]] = None,
        values: Optional[Mapping[str, Any]] = None,
        operation_name: str = "scan",
    ) -> List[T]:
        """Drain a filtered scan restricted to this repository's entity type."""
        params = self._filter_params(filter_expression, names, values)
        return self._drain("scan", operation_name, params)

    def query_index(
        self,
        index_name: str,
        partition_value: str,
        filter_expression: Optional[str] = None,
        names: Optional[Mapping[str, str]] = None,
        values: Optional[Mapping[str, Any]] = None,
        operation_name: str = "query",
    ) -> List[T]:
        """Drain a GSI query on its partition attribute."""
        pk_name, _ = index_key_names(index_name)
        params = self._filter_params(filter_expression, names, values)
        params["ExpressionAttributeNames"]["#indexPk"] = pk_name
        params["ExpressionAttributeValues"][":indexPk"] = {"S": partition_value}
        params["IndexName"] = index_name
        params["KeyConditionExpression"] = "#indexPk = :indexPk"
        return self._drain("query", operation_name, params)

    def _drain(
        self, operation: str, operation_name: str, params: Dict[str, Any]
    ) -> List[T]:
        entities: List[T] = []
        pages = 0
        for page in self._client.paginate(
            operation,
            self._table_name,
            page_executor=self._page_executor(operation_name),
            **params,
        ):
            pages += 1
            for item in page.get("Items", []):
                entity = self._codec.to_entity(item)
                if entity is not None:
                    entities.append(entity)
        logger.debug(
            "entities_read",
            operation=self._operation(operation_name),
            pages=pages,
            count=len(entities),
        )
        return entities

    def _page_executor(self, operation_name: str):
        name = self._operation(operation_name)

        def execute(fetch_page):
            return self._retry.execute_with_retry(fetch_page, name)

        return execute

    def _filter_params(
        self,
        filter_expression: Optional[str] = None,
        names: Optional[Mapping[str, str]] = None,
        values: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        expression = ENTITY_TYPE_FILTER
        if filter_expression:
            expression = f"{ENTITY_TYPE_FILTER} AND ({filter_expression})"
        attribute_names = {"#entityType": ENTITY_TYPE_ATTR}
        attribute_names.update(names or {})
        attribute_values: Dict[str, Any] = {
            ":entityType": {"S": self._codec.entity_type}
        }
        attribute_values.update(values or {})
        return {
            "FilterExpression": expression,
            "ExpressionAttributeNames": attribute_names,
            "ExpressionAttributeValues": attribute_values,
        }
