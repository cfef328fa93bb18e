"""Unit tests for transaction builder and manager."""

import dataclasses

import pytest

from infrastructure.persistence.errors import (
    ConflictError,
    NotFoundError,
    TransientStorageFailure,
    UnknownStorageError,
)
from infrastructure.persistence.keys import entity_key
from infrastructure.persistence.transactions import (
    MAX_TRANSACTION_WRITES,
    TransactionManager,
    TransactionUnit,
    TransactionWriteBuilder,
)
from tests.fixtures.dynamodb import TABLE_NAME


def _item(entity_id: str, **extra):
    item = dict(entity_key("THING", entity_id))
    item["entityType"] = {"S": "THING"}
    item["isActive"] = {"BOOL": True}
    item.update(extra)
    return item


def _deactivate(builder, entity_id, label="deactivate"):
    return builder.update(
        entity_key("THING", entity_id),
        "SET #isActive = :inactive",
        label=label,
        condition="#isActive = :active",
        names={"#isActive": "isActive"},
        values={":inactive": {"BOOL": False}, ":active": {"BOOL": True}},
    )


@pytest.mark.unit
class TestTransactionWriteBuilder:
    def test_build_renders_transact_items(self):
        builder = TransactionWriteBuilder(TABLE_NAME)
        builder.put_if_absent(_item("1"), label="create 1")
        _deactivate(builder, "2", label="deactivate 2")
        builder.delete(entity_key("THING", "3"), label="delete 3")

        unit = builder.build()
        request = unit.to_request()

        assert unit.labels == ["create 1", "deactivate 2", "delete 3"]
        put, update, delete = request["TransactItems"]
        assert put["Put"]["ConditionExpression"] == "attribute_not_exists(PK)"
        assert put["Put"]["TableName"] == TABLE_NAME
        assert "ReturnValuesOnConditionCheckFailure" not in put["Put"]
        assert update["Update"]["ReturnValuesOnConditionCheckFailure"] == "ALL_OLD"
        assert update["Update"]["UpdateExpression"] == "SET #isActive = :inactive"
        assert delete["Delete"]["Key"] == entity_key("THING", "3")
        assert request["ClientRequestToken"] == unit.client_request_token

    def test_token_is_fixed_per_unit(self):
        builder = TransactionWriteBuilder(TABLE_NAME).put(_item("1"), label="p")
        first = builder.build()

        assert first.to_request()["ClientRequestToken"] == first.to_request()["ClientRequestToken"]
        assert builder.build().client_request_token != first.client_request_token

    def test_unit_is_immutable(self):
        source = _item("1")
        unit = TransactionWriteBuilder(TABLE_NAME).put(source, label="p").build()
        source["isActive"] = {"BOOL": False}
        unit.to_request()["TransactItems"][0]["Put"]["Item"]["extra"] = {"S": "x"}

        assert unit.writes[0].item["isActive"] == {"BOOL": True}
        assert "extra" not in unit.writes[0].item
        with pytest.raises(dataclasses.FrozenInstanceError):
            unit.client_request_token = "other"

    def test_empty_unit_rejected(self):
        with pytest.raises(ValueError, match="at least one"):
            TransactionWriteBuilder(TABLE_NAME).build()

    def test_oversized_unit_rejected(self):
        builder = TransactionWriteBuilder(TABLE_NAME)
        for index in range(MAX_TRANSACTION_WRITES + 1):
            builder.put(_item(str(index)), label=f"put {index}")

        with pytest.raises(ValueError, match="at most 100"):
            builder.build()

    def test_hundred_writes_accepted(self):
        builder = TransactionWriteBuilder(TABLE_NAME)
        for index in range(MAX_TRANSACTION_WRITES):
            builder.put(_item(str(index)), label=f"put {index}")

        assert len(builder.build()) == MAX_TRANSACTION_WRITES

    def test_two_writes_on_one_item_rejected(self):
        builder = TransactionWriteBuilder(TABLE_NAME)
        builder.put(_item("1"), label="put 1")
        _deactivate(builder, "1", label="deactivate 1")

        with pytest.raises(ValueError, match="cannot write one item twice"):
            builder.build()

    def test_writes_on_distinct_items_accepted(self):
        builder = TransactionWriteBuilder(TABLE_NAME)
        builder.put(_item("1"), label="put 1")
        _deactivate(builder, "2", label="deactivate 2")
        builder.delete(entity_key("OTHER", "1"), label="delete other 1")

        assert len(builder.build()) == 3


@pytest.mark.unit
class TestTransactionManager:
    @pytest.fixture
    def manager(self, dynamodb_client, retry_executor):
        return TransactionManager(dynamodb_client, retry_executor)

    def test_all_writes_commit(self, manager, fake_dynamodb):
        unit = (
            TransactionWriteBuilder(TABLE_NAME)
            .put(_item("1"), label="a")
            .put(_item("2"), label="b")
            .build()
        )

        manager.execute(unit, "save_all")

        assert fake_dynamodb.raw_item(TABLE_NAME, "THING#1") is not None
        assert fake_dynamodb.raw_item(TABLE_NAME, "THING#2") is not None

    def test_failed_guard_commits_nothing(self, manager, fake_dynamodb):
        fake_dynamodb.put_raw_item(TABLE_NAME, _item("2"))
        builder = TransactionWriteBuilder(TABLE_NAME)
        builder.put_if_absent(_item("1"), label="create 1")
        builder.put_if_absent(_item("2"), label="create 2")

        with pytest.raises(ConflictError) as exc_info:
            manager.execute(builder.build(), "create_pair")

        assert exc_info.value.failed_writes == ["create 2"]
        assert exc_info.value.operation == "create_pair"
        assert fake_dynamodb.raw_item(TABLE_NAME, "THING#1") is None

    def test_guarded_update_on_missing_item_is_not_found(self, manager, fake_dynamodb):
        unit = _deactivate(TransactionWriteBuilder(TABLE_NAME), "missing").build()

        with pytest.raises(NotFoundError, match="deactivate"):
            manager.execute(unit, "deactivate")

        assert fake_dynamodb.raw_item(TABLE_NAME, "THING#missing") is None

    def test_guarded_update_on_inactive_item_is_conflict(self, manager, fake_dynamodb):
        fake_dynamodb.put_raw_item(TABLE_NAME, _item("1", isActive={"BOOL": False}))
        unit = _deactivate(TransactionWriteBuilder(TABLE_NAME), "1").build()

        with pytest.raises(ConflictError):
            manager.execute(unit, "deactivate")

    def test_transient_failure_retries_same_unit(
        self, manager, fake_dynamodb, wait_recorder
    ):
        fake_dynamodb.fail_next("transact_write_items", "ThrottlingException", times=2)
        unit = TransactionWriteBuilder(TABLE_NAME).put(_item("1"), label="a").build()

        manager.execute(unit, "save")

        submitted = [
            params["ClientRequestToken"]
            for name, params in fake_dynamodb.calls
            if name == "transact_write_items"
        ]
        assert submitted == [unit.client_request_token] * 3
        assert wait_recorder.delays_ms == [100, 200]
        assert fake_dynamodb.raw_item(TABLE_NAME, "THING#1") is not None

    def test_resubmitting_committed_unit_is_idempotent(self, manager, fake_dynamodb):
        fake_dynamodb.put_raw_item(TABLE_NAME, _item("1"))
        unit = _deactivate(TransactionWriteBuilder(TABLE_NAME), "1").build()

        manager.execute(unit, "deactivate")
        manager.execute(unit, "deactivate")

        assert fake_dynamodb.raw_item(TABLE_NAME, "THING#1")["isActive"] == {"BOOL": False}

    def test_exhausted_retries_surface_transient_failure(self, manager, fake_dynamodb):
        fake_dynamodb.fail_next("transact_write_items", "InternalServerError", times=4)
        unit = TransactionWriteBuilder(TABLE_NAME).put(_item("1"), label="a").build()

        with pytest.raises(TransientStorageFailure):
            manager.execute(unit, "save")

        assert fake_dynamodb.call_count("transact_write_items") == 4
        assert fake_dynamodb.raw_item(TABLE_NAME, "THING#1") is None

    def test_engine_rejects_two_operations_on_one_item(self, manager, fake_dynamodb):
        first = TransactionWriteBuilder(TABLE_NAME).put(_item("1"), label="a").build()
        second = _deactivate(TransactionWriteBuilder(TABLE_NAME), "1").build()
        unit = TransactionUnit(
            writes=first.writes + second.writes,
            client_request_token=first.client_request_token,
        )

        with pytest.raises(UnknownStorageError, match="multiple operations on one item"):
            manager.execute(unit, "save")

        assert fake_dynamodb.call_count("transact_write_items") == 1
        assert fake_dynamodb.raw_item(TABLE_NAME, "THING#1") is None
