"""Table definition for the single-table layout.

Used to provision DynamoDB Local / LocalStack and in tests; production
tables are provisioned outside the application.
"""

from typing import Any, Dict

from infrastructure.persistence.keys import INDEX_NAMES, PK, SK, index_key_names


def table_definition(table_name: str) -> Dict[str, Any]:
    """Return ``create_table`` kwargs for the single table and its GSIs."""
    attribute_names = [PK, SK]
    indexes = []
    for index_name in INDEX_NAMES:
        pk_name, sk_name = index_key_names(index_name)
        attribute_names.extend([pk_name, sk_name])
        indexes.append(
            {
                "IndexName": index_name,
                "KeySchema": [
                    {"AttributeName": pk_name, "KeyType": "HASH"},
                    {"AttributeName": sk_name, "KeyType": "RANGE"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            }
        )

    return {
        "TableName": table_name,
        "AttributeDefinitions": [
            {"AttributeName": name, "AttributeType": "S"} for name in attribute_names
        ],
        "KeySchema": [
            {"AttributeName": PK, "KeyType": "HASH"},
            {"AttributeName": SK, "KeyType": "RANGE"},
        ],
        "GlobalSecondaryIndexes": indexes,
        "BillingMode": "PAY_PER_REQUEST",
    }
