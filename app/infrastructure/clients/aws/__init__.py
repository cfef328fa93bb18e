"""Infrastructure AWS clients public API.

The DynamoDB client is the only AWS service client this package needs. A
single instance is built from settings and shared by every repository:

    from infrastructure.clients.aws import DynamoDBClient, SessionProvider

    client = DynamoDBClient(SessionProvider(region="ca-central-1"))
    response = client.get_item("idp-data", {"PK": {"S": "APIKEY#123"}, "SK": {"S": "METADATA"}})
"""

from infrastructure.clients.aws.dynamodb import DynamoDBClient
from infrastructure.clients.aws.session_provider import ClientTarget, SessionProvider

__all__ = [
    "ClientTarget",
    "DynamoDBClient",
    "SessionProvider",
]
