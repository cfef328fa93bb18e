"""Entity codec base class and DynamoDB attribute helpers.

A codec maps one domain entity to exactly one storage item (a dict of
DynamoDB attribute values such as ``{"S": "..."}``) and back.

Decoding rules:
- ``None``/empty item, or an item whose ``entityType`` belongs to another
  codec: ``to_entity`` returns ``None`` (not found).
- An item of the right type with missing required or malformed attributes:
  ``CorruptDataError`` (found but corrupt).
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Generic, Optional, Type, TypeVar
from uuid import UUID

from infrastructure.persistence.errors import CorruptDataError

T = TypeVar("T")
E = TypeVar("E", bound=Enum)

Item = Dict[str, Dict[str, Any]]

ENTITY_TYPE_ATTR = "entityType"


# ---------------------------------------------------------------------------
# Encoding helpers
# ---------------------------------------------------------------------------


def string_value(value: str) -> Dict[str, Any]:
    return {"S": value}


def bool_value(value: bool) -> Dict[str, Any]:
    return {"BOOL": bool(value)}


def number_value(value: Any) -> Dict[str, Any]:
    return {"N": str(value)}


def datetime_value(value: datetime) -> Dict[str, Any]:
    """Encode a timezone-aware datetime as an ISO-8601 UTC string."""
    if value.tzinfo is None:
        raise ValueError("datetime values must be timezone-aware")
    return {"S": value.astimezone(timezone.utc).isoformat(timespec="microseconds")}


def put_optional(item: Item, name: str, value: Any) -> None:
    """Set ``item[name]`` from a Python value, skipping ``None``.

    Absent values are omitted from the item rather than stored as NULL so
    that filters on ``attribute_not_exists`` behave as expected.
    """
    if value is None:
        return
    if isinstance(value, bool):
        item[name] = bool_value(value)
    elif isinstance(value, datetime):
        item[name] = datetime_value(value)
    elif isinstance(value, Enum):
        item[name] = string_value(str(value.value))
    elif isinstance(value, UUID):
        item[name] = string_value(str(value))
    elif isinstance(value, (int, float, Decimal)):
        item[name] = number_value(value)
    else:
        item[name] = string_value(str(value))


def encode_value(value: Any) -> Dict[str, Any]:
    """Encode a single Python scalar as a DynamoDB attribute value."""
    holder: Item = {}
    put_optional(holder, "value", value)
    if not holder:
        return {"NULL": True}
    return holder["value"]


# ---------------------------------------------------------------------------
# Decoding helpers
# ---------------------------------------------------------------------------


def _raw(item: Item, name: str, descriptor: str, required: bool) -> Any:
    attr = item.get(name)
    if attr is None or attr.get("NULL"):
        if required:
            raise CorruptDataError(f"Missing required attribute '{name}'")
        return None
    if descriptor not in attr:
        raise CorruptDataError(
            f"Attribute '{name}' has type {sorted(attr)}, expected '{descriptor}'"
        )
    return attr[descriptor]


def get_string(item: Item, name: str, required: bool = False) -> Optional[str]:
    return _raw(item, name, "S", required)


def get_bool(item: Item, name: str, required: bool = False) -> Optional[bool]:
    value = _raw(item, name, "BOOL", required)
    if value is not None and not isinstance(value, bool):
        raise CorruptDataError(f"Attribute '{name}' is not a boolean: {value!r}")
    return value


def get_int(item: Item, name: str, required: bool = False) -> Optional[int]:
    value = _raw(item, name, "N", required)
    if value is None:
        return None
    try:
        return int(Decimal(value))
    except (InvalidOperation, ValueError) as exc:
        raise CorruptDataError(f"Attribute '{name}' is not a number: {value!r}") from exc


def get_datetime(
    item: Item, name: str, required: bool = False
) -> Optional[datetime]:
    """Decode an ISO-8601 string into an aware UTC datetime."""
    value = _raw(item, name, "S", required)
    if value is None:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise CorruptDataError(
            f"Attribute '{name}' is not an ISO-8601 timestamp: {value!r}"
        ) from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def get_uuid(item: Item, name: str, required: bool = False) -> Optional[UUID]:
    value = _raw(item, name, "S", required)
    if value is None:
        return None
    try:
        return UUID(value)
    except ValueError as exc:
        raise CorruptDataError(f"Attribute '{name}' is not a UUID: {value!r}") from exc


def get_enum(
    item: Item, name: str, enum_cls: Type[E], required: bool = False
) -> Optional[E]:
    value = _raw(item, name, "S", required)
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError as exc:
        raise CorruptDataError(
            f"Attribute '{name}' is not a valid {enum_cls.__name__}: {value!r}"
        ) from exc


# ---------------------------------------------------------------------------
# Codec base
# ---------------------------------------------------------------------------


class EntityCodec(ABC, Generic[T]):
    """Bidirectional mapping between an entity and its storage item.

    Subclasses set ``entity_type`` and implement ``encode``/``decode``.
    ``to_item`` stamps the entity type; ``to_entity`` enforces the decoding
    rules described in the module docstring.
    """

    entity_type: str = ""

    @abstractmethod
    def encode(self, entity: T) -> Item:
        """Return the item attributes for ``entity`` (keys included)."""

    @abstractmethod
    def decode(self, item: Item) -> T:
        """Build the entity from a well-typed item.

        May raise CorruptDataError, KeyError, ValueError or TypeError on
        malformed data; ``to_entity`` reports all of them as corruption.
        """

    def to_item(self, entity: T) -> Item:
        item = self.encode(entity)
        item[ENTITY_TYPE_ATTR] = string_value(self.entity_type)
        return item

    def to_entity(self, item: Optional[Item]) -> Optional[T]:
        if not item:
            return None
        if get_string(item, ENTITY_TYPE_ATTR) != self.entity_type:
            return None
        try:
            return self.decode(item)
        except CorruptDataError as exc:
            exc.operation = exc.operation or f"decode_{self.entity_type}"
            raise
        except (KeyError, ValueError, TypeError) as exc:
            raise CorruptDataError(
                f"Malformed {self.entity_type} item: {exc}",
                operation=f"decode_{self.entity_type}",
            ) from exc
