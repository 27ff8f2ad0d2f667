"""Tests for insert/update/delete interception and history recording."""

import datetime as dt

import pytest

from chronicle import (
    AmbiguousRecordError,
    Chronicle,
    InvalidPredicateError,
    NotRegisteredError,
    Predicate,
    RecordNotFoundError,
    UnknownColumnError,
    VersionOperation,
)

ADA = {"id": 1, "name": "Ada", "email": "ada@example.com", "value": 10}


class TestInsert:
    """insert() writes the live row and one INSERT version."""

    def test_records_single_insert_version(self, chronicle, fetch_users) -> None:
        chronicle.insert("users", ADA)

        versions = chronicle.get_versions("users", {"id": 1})
        assert len(versions) == 1
        assert versions[0].operation is VersionOperation.INSERT
        assert versions[0].attributes == ADA
        assert fetch_users() == [ADA]

    def test_version_metadata_assigned_by_store(self, chronicle) -> None:
        version_id = chronicle.insert("users", ADA)

        version = chronicle.get_version("users", version_id)
        assert version is not None
        assert version.version_id == version_id
        assert isinstance(version.created_at, dt.datetime)

    def test_generated_values_are_not_captured_by_default(self, chronicle, fetch_users) -> None:
        chronicle.insert("users", {"name": "Ada"})

        assert fetch_users()[0]["id"] == 1
        version = chronicle.latest_version("users", {"name": "Ada"})
        assert version.attributes["id"] is None

    def test_unregistered_table_raises(self, chronicle) -> None:
        with pytest.raises(NotRegisteredError):
            chronicle.insert("orders", {"id": 1})

    def test_unknown_column_raises_before_writing(self, chronicle, fetch_users) -> None:
        with pytest.raises(UnknownColumnError) as exc_info:
            chronicle.insert("users", {"id": 1, "name": "Ada", "nickname": "A"})

        assert exc_info.value.column == "nickname"
        assert fetch_users() == []
        assert chronicle.get_versions("users", {"id": 1}) == []


class TestInsertReread:
    """reread_inserted_rows captures identity keys and server defaults."""

    def test_insert_version_holds_generated_values(self, engine, note_columns) -> None:
        chronicle = Chronicle(engine, reread_inserted_rows=True)
        chronicle.register_table(note_columns, "notes")

        version_id = chronicle.insert("notes", {"body": "hello"})

        version = chronicle.get_version("notes", version_id)
        assert version.attributes == {"id": 1, "body": "hello", "status": "draft"}

    def test_table_without_primary_key_keeps_supplied_values(self, engine) -> None:
        chronicle = Chronicle(engine, reread_inserted_rows=True)
        chronicle.register_table([{"name": "body"}, {"name": "status"}], "notes")

        version_id = chronicle.insert("notes", {"body": "hello"})

        version = chronicle.get_version("notes", version_id)
        assert version.attributes == {"body": "hello", "status": None}


class TestUpdate:
    """update() merges the partial map into the current row."""

    def test_appends_merged_full_row(self, chronicle, fetch_users) -> None:
        chronicle.insert("users", ADA)

        chronicle.update("users", {"email": "ada@lovelace.dev"}, {"id": 1})

        versions = chronicle.get_versions("users", {"id": 1})
        assert len(versions) == 2
        assert versions[1].operation is VersionOperation.UPDATE
        assert versions[1].attributes == {**ADA, "email": "ada@lovelace.dev"}
        assert fetch_users() == [{**ADA, "email": "ada@lovelace.dev"}]

    def test_missing_row_raises_without_recording(self, chronicle) -> None:
        with pytest.raises(RecordNotFoundError):
            chronicle.update("users", {"name": "Nobody"}, {"id": 99})
        assert chronicle.get_versions("users", {"id": 99}) == []

    def test_accepts_predicate_forms(self, chronicle) -> None:
        chronicle.insert("users", ADA)

        chronicle.update("users", {"value": 11}, Predicate.where(id=1, name="Ada"))
        chronicle.update("users", {"value": 12}, [("id", 1)])

        values = [v.attributes["value"] for v in chronicle.get_versions("users", {"id": 1})]
        assert values == [10, 11, 12]

    def test_empty_values_still_records_current_row(self, chronicle, fetch_users) -> None:
        chronicle.insert("users", ADA)

        chronicle.update("users", {}, {"id": 1})

        versions = chronicle.get_versions("users", {"id": 1})
        assert [v.operation for v in versions] == [VersionOperation.INSERT, VersionOperation.UPDATE]
        assert versions[1].attributes == ADA
        assert fetch_users() == [ADA]

    def test_predicate_matching_many_rows_raises(self, chronicle, fetch_users) -> None:
        chronicle.insert("users", {"id": 1, "name": "Twin"})
        chronicle.insert("users", {"id": 2, "name": "Twin"})

        with pytest.raises(AmbiguousRecordError):
            chronicle.update("users", {"value": 1}, {"name": "Twin"})

        assert [row["value"] for row in fetch_users()] == [None, None]
        assert len(chronicle.get_versions("users", {"name": "Twin"})) == 2

    def test_unknown_predicate_column_raises(self, chronicle) -> None:
        chronicle.insert("users", ADA)
        with pytest.raises(UnknownColumnError):
            chronicle.update("users", {"value": 1}, {"uuid": "x"})

    @pytest.mark.parametrize("predicate", [{}, [(1, "x")]])
    def test_malformed_predicate_raises(self, chronicle, fetch_users, predicate) -> None:
        chronicle.insert("users", ADA)
        with pytest.raises(InvalidPredicateError):
            chronicle.update("users", {"value": 1}, predicate)
        assert fetch_users() == [ADA]


class TestDelete:
    """delete() removes the row and records its last live values."""

    def test_records_last_values(self, chronicle, fetch_users) -> None:
        chronicle.insert("users", ADA)
        chronicle.update("users", {"value": 20}, {"id": 1})

        chronicle.delete("users", {"id": 1})

        versions = chronicle.get_versions("users", {"id": 1})
        assert versions[-1].operation is VersionOperation.DELETE
        assert versions[-1].attributes == {**ADA, "value": 20}
        assert fetch_users() == []

    def test_later_mutations_on_deleted_row_raise(self, chronicle) -> None:
        chronicle.insert("users", ADA)
        chronicle.delete("users", {"id": 1})

        with pytest.raises(RecordNotFoundError):
            chronicle.update("users", {"name": "Ghost"}, {"id": 1})
        with pytest.raises(RecordNotFoundError):
            chronicle.delete("users", {"id": 1})
        assert len(chronicle.get_versions("users", {"id": 1})) == 2

    def test_reinsert_after_delete_continues_same_key_history(self, chronicle) -> None:
        chronicle.insert("users", ADA)
        chronicle.delete("users", {"id": 1})
        chronicle.insert("users", {**ADA, "name": "Ada II"})

        versions = chronicle.get_versions("users", {"id": 1})
        assert [v.operation for v in versions] == [
            VersionOperation.INSERT,
            VersionOperation.DELETE,
            VersionOperation.INSERT,
        ]


class TestHistoryOrdering:
    def test_three_version_scenario(self, chronicle) -> None:
        chronicle.insert("users", {"id": 1, "name": "V1", "value": 1})
        chronicle.update("users", {"name": "V2"}, {"id": 1})
        chronicle.update("users", {"name": "V3"}, {"id": 1})

        versions = chronicle.get_versions("users", {"id": 1})
        assert len(versions) == 3
        assert [v.attributes["name"] for v in versions] == ["V1", "V2", "V3"]
        assert [v.operation.value for v in versions] == ["INSERT", "UPDATE", "UPDATE"]

    def test_version_ids_strictly_increase_in_call_order(self, chronicle) -> None:
        returned = [
            chronicle.insert("users", ADA),
            chronicle.update("users", {"value": 1}, {"id": 1}),
            chronicle.insert("users", {"id": 2, "name": "Grace"}),
            chronicle.update("users", {"value": 2}, {"id": 1}),
            chronicle.delete("users", {"id": 1}),
        ]

        ids = [v.version_id for v in chronicle.get_versions("users", {"id": 1})]
        assert ids == sorted(ids)
        assert len(set(ids)) == len(ids)
        assert ids == [returned[0], returned[1], returned[3], returned[4]]
        assert returned == sorted(returned)

    def test_keys_are_independent(self, chronicle) -> None:
        chronicle.insert("users", ADA)
        chronicle.insert("users", {"id": 2, "name": "Grace"})
        chronicle.update("users", {"value": 5}, {"id": 2})

        assert len(chronicle.get_versions("users", {"id": 1})) == 1
        assert len(chronicle.get_versions("users", {"id": 2})) == 2
