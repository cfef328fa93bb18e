"""Single-table key layout.

Every entity lives in one table under ``PK=<PREFIX>#<id>`` / ``SK=METADATA``.
Secondary lookups use denormalized GSI attributes written on the item:

    GSI1PK / GSI1SK   unique lookup (e.g. KEYHASH#<hash>)
    GSI2PK / GSI2SK   one-to-many lookup (e.g. USER#<email>, sorted by time)
"""

from typing import Any, Dict

PK = "PK"
SK = "SK"
METADATA_SK = "METADATA"

GSI1 = "GSI1"
GSI2 = "GSI2"
INDEX_NAMES = (GSI1, GSI2)

SEPARATOR = "#"


def partition_value(prefix: str, value: Any) -> str:
    """Format a prefixed key value, e.g. ``APIKEY#<uuid>``."""
    return f"{prefix}{SEPARATOR}{value}"


def entity_key(prefix: str, entity_id: Any) -> Dict[str, Dict[str, str]]:
    """Primary key of an entity's metadata item."""
    return {
        PK: {"S": partition_value(prefix, entity_id)},
        SK: {"S": METADATA_SK},
    }


def index_key_names(index_name: str) -> tuple[str, str]:
    """Attribute names backing a GSI, e.g. ``("GSI1PK", "GSI1SK")``."""
    if index_name not in INDEX_NAMES:
        raise ValueError(f"Unknown index: {index_name}")
    return f"{index_name}PK", f"{index_name}SK"


def index_attributes(
    index_name: str, partition: str, sort: str
) -> Dict[str, Dict[str, str]]:
    """Item attributes placing an entity in a GSI."""
    pk_name, sk_name = index_key_names(index_name)
    return {pk_name: {"S": partition}, sk_name: {"S": sort}}
