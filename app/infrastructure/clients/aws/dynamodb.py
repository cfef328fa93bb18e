"""DynamoDB client for AWS operations.

Wraps a single shared boto3 DynamoDB client. Every method passes the table
name through and returns the raw botocore response; service errors surface
as ``botocore.exceptions.ClientError`` so callers can classify them.
"""

import threading
from typing import Any, Callable, Dict, Iterator, List, Optional

import structlog

from infrastructure.clients.aws.session_provider import SessionProvider

logger = structlog.get_logger()


class DynamoDBClient:
    """Client for DynamoDB operations.

    The underlying boto3 client is created lazily on first use and reused for
    the lifetime of this object. boto3 low-level clients are thread-safe, so
    one instance is shared by all repositories.

    Args:
        session_provider: SessionProvider instance for credential/config management
        default_role_arn: Optional role to assume for every call
        client: Optional pre-built low-level client (tests, DynamoDB Local)
    """

    def __init__(
        self,
        session_provider: Optional[SessionProvider] = None,
        default_role_arn: Optional[str] = None,
        client: Any = None,
    ) -> None:
        self._session_provider = session_provider or SessionProvider()
        self._default_role_arn = default_role_arn
        self._service_name = "dynamodb"
        self._client = client
        self._lock = threading.Lock()
        self._logger = logger.bind(component="dynamodb_client")

    @property
    def client(self) -> Any:
        """Return the shared low-level client, creating it on first access."""
        if self._client is None:
            with self._lock:
                if self._client is None:
                    self._client = self._session_provider.get_boto3_client(
                        self._service_name, role_arn=self._default_role_arn
                    )
                    self._logger.info("dynamodb_client_initialized")
        return self._client

    def get_item(
        self, table_name: str, Key: Dict[str, Any], **kwargs
    ) -> Dict[str, Any]:
        """Get an item from DynamoDB.

        Args:
            table_name: Name of the DynamoDB table
            Key: Primary key of the item (e.g., {"PK": {"S": "APIKEY#123"}})
            **kwargs: Additional get_item parameters (ConsistentRead, ...)
        """
        return self.client.get_item(TableName=table_name, Key=Key, **kwargs)

    def put_item(
        self, table_name: str, Item: Dict[str, Any], **kwargs
    ) -> Dict[str, Any]:
        """Put an item into DynamoDB."""
        return self.client.put_item(TableName=table_name, Item=Item, **kwargs)

    def update_item(
        self, table_name: str, Key: Dict[str, Any], **kwargs
    ) -> Dict[str, Any]:
        """Update an item (UpdateExpression, ConditionExpression, ...)."""
        return self.client.update_item(TableName=table_name, Key=Key, **kwargs)

    def delete_item(
        self, table_name: str, Key: Dict[str, Any], **kwargs
    ) -> Dict[str, Any]:
        return self.client.delete_item(TableName=table_name, Key=Key, **kwargs)

    def query(self, table_name: str, **kwargs) -> Dict[str, Any]:
        return self.client.query(TableName=table_name, **kwargs)

    def scan(self, table_name: str, **kwargs) -> Dict[str, Any]:
        return self.client.scan(TableName=table_name, **kwargs)

    def transact_write_items(
        self, TransactItems: List[Dict[str, Any]], **kwargs
    ) -> Dict[str, Any]:
        """Execute an all-or-nothing write across up to 100 items.

        Each entry already carries its own TableName.
        """
        return self.client.transact_write_items(TransactItems=TransactItems, **kwargs)

    def create_table(self, **kwargs) -> Dict[str, Any]:
        return self.client.create_table(**kwargs)

    def describe_table(self, table_name: str) -> Dict[str, Any]:
        return self.client.describe_table(TableName=table_name)

    def paginate(
        self,
        operation: str,
        table_name: str,
        page_executor: Optional[Callable[[Callable[[], Dict[str, Any]]], Dict[str, Any]]] = None,
        **kwargs,
    ) -> Iterator[Dict[str, Any]]:
        """Yield successive pages of a query or scan.

        Follows ``LastEvaluatedKey`` until the service stops returning one.

        Args:
            operation: Either "query" or "scan"
            table_name: Name of the DynamoDB table
            page_executor: Optional wrapper invoked with a zero-argument
                callable for each page (e.g. a retry executor), so a failed
                page is retried on its own
            **kwargs: Parameters passed to every page request
        """
        if operation not in ("query", "scan"):
            raise ValueError(f"Cannot paginate operation: {operation}")
        call = getattr(self, operation)
        params = dict(kwargs)
        while True:
            page_params = dict(params)

            def fetch_page(page_params=page_params) -> Dict[str, Any]:
                return call(table_name, **page_params)

            page = page_executor(fetch_page) if page_executor else fetch_page()
            yield page
            last_key = page.get("LastEvaluatedKey")
            if not last_key:
                return
            params["ExclusiveStartKey"] = last_key

    def healthcheck(self, table_name: str) -> bool:
        """Return True when the table is reachable."""
        try:
            self.describe_table(table_name)
            return True
        except Exception as exc:  # pylint: disable=broad-except
            self._logger.warning(
                "dynamodb_healthcheck_failed", table=table_name, error=str(exc)
            )
            return False
