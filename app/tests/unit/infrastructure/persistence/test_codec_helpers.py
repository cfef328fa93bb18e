"""Unit tests for EntityCodec and attribute helpers."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

import pytest

from infrastructure.persistence import codec as attrs
from infrastructure.persistence.codec import EntityCodec
from infrastructure.persistence.errors import CorruptDataError


class Colour(str, Enum):
    RED = "RED"
    BLUE = "BLUE"


@dataclass
class Widget:
    id: UUID
    name: str
    size: int
    colour: Colour
    enabled: bool = True
    built_at: Optional[datetime] = None


class WidgetCodec(EntityCodec[Widget]):
    entity_type = "WIDGET"

    def encode(self, entity: Widget):
        item = {
            "PK": attrs.string_value(f"WIDGET#{entity.id}"),
            "id": attrs.string_value(str(entity.id)),
            "name": attrs.string_value(entity.name),
        }
        attrs.put_optional(item, "size", entity.size)
        attrs.put_optional(item, "colour", entity.colour)
        attrs.put_optional(item, "enabled", entity.enabled)
        attrs.put_optional(item, "builtAt", entity.built_at)
        return item

    def decode(self, item):
        return Widget(
            id=attrs.get_uuid(item, "id", required=True),
            name=attrs.get_string(item, "name", required=True),
            size=attrs.get_int(item, "size", required=True),
            colour=attrs.get_enum(item, "colour", Colour, required=True),
            enabled=attrs.get_bool(item, "enabled", required=True),
            built_at=attrs.get_datetime(item, "builtAt"),
        )


@pytest.fixture
def widget():
    return Widget(
        id=uuid4(),
        name="sprocket",
        size=12,
        colour=Colour.BLUE,
        built_at=datetime(2024, 5, 6, 7, 8, 9, 10, tzinfo=timezone.utc),
    )


@pytest.mark.unit
class TestEntityCodec:
    def test_round_trip(self, widget):
        codec = WidgetCodec()

        item = codec.to_item(widget)

        assert item["entityType"] == {"S": "WIDGET"}
        assert codec.to_entity(item) == widget

    def test_none_values_are_omitted(self, widget):
        widget.built_at = None

        item = WidgetCodec().to_item(widget)

        assert "builtAt" not in item
        assert WidgetCodec().to_entity(item).built_at is None

    @pytest.mark.parametrize("item", [None, {}])
    def test_missing_item_decodes_to_none(self, item):
        assert WidgetCodec().to_entity(item) is None

    def test_other_entity_type_decodes_to_none(self, widget):
        item = WidgetCodec().to_item(widget)
        item["entityType"] = {"S": "GADGET"}

        assert WidgetCodec().to_entity(item) is None

    def test_missing_required_attribute_is_corrupt(self, widget):
        item = WidgetCodec().to_item(widget)
        del item["name"]

        with pytest.raises(CorruptDataError, match="name"):
            WidgetCodec().to_entity(item)

    @pytest.mark.parametrize(
        "attribute,value",
        [
            ("id", {"S": "not-a-uuid"}),
            ("size", {"N": "twelve"}),
            ("size", {"S": "12"}),
            ("colour", {"S": "GREEN"}),
            ("enabled", {"S": "yes"}),
            ("builtAt", {"S": "yesterday"}),
        ],
    )
    def test_malformed_attribute_is_corrupt(self, widget, attribute, value):
        item = WidgetCodec().to_item(widget)
        item[attribute] = value

        with pytest.raises(CorruptDataError) as exc_info:
            WidgetCodec().to_entity(item)

        assert exc_info.value.operation == "decode_WIDGET"


@pytest.mark.unit
class TestAttributeHelpers:
    def test_datetime_is_normalised_to_utc(self):
        eastern = timezone(timedelta(hours=-5))
        value = datetime(2024, 1, 1, 7, 0, tzinfo=eastern)

        encoded = attrs.datetime_value(value)

        assert encoded == {"S": "2024-01-01T12:00:00.000000+00:00"}
        assert attrs.get_datetime({"t": encoded}, "t") == value

    def test_naive_datetime_rejected_on_encode(self):
        with pytest.raises(ValueError):
            attrs.datetime_value(datetime(2024, 1, 1))

    def test_z_suffix_is_accepted(self):
        decoded = attrs.get_datetime({"t": {"S": "2024-01-01T00:00:00Z"}}, "t")

        assert decoded == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_encode_value(self):
        assert attrs.encode_value(True) == {"BOOL": True}
        assert attrs.encode_value(3) == {"N": "3"}
        assert attrs.encode_value("x") == {"S": "x"}
        assert attrs.encode_value(None) == {"NULL": True}

    def test_null_attribute_reads_as_missing(self):
        assert attrs.get_string({"a": {"NULL": True}}, "a") is None
