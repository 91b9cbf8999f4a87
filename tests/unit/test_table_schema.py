"""Unit tests for TableSchema."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from document_store.domain.entities import Record, TableSchema, persisted
from document_store.domain.errors import (
    CorruptDocumentError,
    DuplicateFieldError,
    FieldNotFoundError,
    NotStorableError,
)
from document_store.domain.value_objects import INT_TAG, STR_TAG, TableField, TypeTag


@dataclass
class Player(Record):
    name: str = persisted(default="")
    score: int = persisted(default=0)
    session_token: str = ""


class Unstorable:
    pass


@pytest.fixture
def player_schema() -> TableSchema:
    return TableSchema.from_type(Player)


@pytest.mark.unit
class TestTableSchemaIntrospection:
    """Tests for TableSchema.from_type."""

    def test_fields_from_type(self, player_schema: TableSchema) -> None:
        """Persisted members become fields; ID is always present."""
        assert player_schema.item_type == "Player"
        assert player_schema.fields == [
            TableField(STR_TAG, "name"),
            TableField(INT_TAG, "score"),
            TableField(INT_TAG, "ID", is_property=True),
        ]

    def test_exactly_one_identifier(self, player_schema: TableSchema) -> None:
        """Introspection yields exactly one integer ID property."""
        identifiers = [f for f in player_schema.fields if f.field_name == "ID"]

        assert len(identifiers) == 1
        assert player_schema.identifier_field == TableField(INT_TAG, "ID", is_property=True)

    def test_not_storable(self) -> None:
        """Types without ID property cannot be introspected."""
        with pytest.raises(NotStorableError):
            TableSchema.from_type(Unstorable)


@pytest.mark.unit
class TestTableSchemaFields:
    """Tests for field management."""

    def test_contains_field(self, player_schema: TableSchema) -> None:
        """Membership by name only or by full signature."""
        renamed_type = TableField(INT_TAG, "name")

        assert player_schema.contains_field(TableField(STR_TAG, "name"))
        assert player_schema.contains_field(renamed_type, by_name_only=True)
        assert not player_schema.contains_field(renamed_type)

    def test_add_field(self, player_schema: TableSchema) -> None:
        """New fields are appended."""
        level = TableField(INT_TAG, "level")
        player_schema.add_field(level)

        assert player_schema.fields[-1] == level
        assert player_schema.get_field_by_name("level") == level

    def test_add_duplicate_field(self, player_schema: TableSchema) -> None:
        """A second field with the same name is rejected."""
        with pytest.raises(DuplicateFieldError):
            player_schema.add_field(TableField(INT_TAG, "name"))

    def test_add_field_replace(self, player_schema: TableSchema) -> None:
        """replace=True swaps a same-named field."""
        player_schema.add_field(TableField(INT_TAG, "name"), replace=True)

        assert player_schema.get_field_by_name("name") == TableField(INT_TAG, "name")
        assert player_schema.field_names.count("name") == 1

    def test_remove_field(self, player_schema: TableSchema) -> None:
        """Removal is by name and returns the removed field."""
        removed = player_schema.remove_field(TableField(INT_TAG, "score", is_property=True))

        assert removed == TableField(INT_TAG, "score")
        assert player_schema.get_field_by_name("score") is None

    def test_remove_missing_field(self, player_schema: TableSchema) -> None:
        """Removing an unknown field fails."""
        with pytest.raises(FieldNotFoundError):
            player_schema.remove_field("level")

    def test_add_then_remove_restores_fields(self, player_schema: TableSchema) -> None:
        """Adding then removing a field leaves the field set unchanged."""
        before = list(player_schema.fields)
        level = TableField(INT_TAG, "level")

        player_schema.add_field(level)
        player_schema.remove_field(level)

        assert player_schema.fields == before

    def test_get_field_by_name_absent(self, player_schema: TableSchema) -> None:
        """Unknown names yield None."""
        assert player_schema.get_field_by_name("level") is None


@pytest.mark.unit
class TestTableSchemaDocuments:
    """Tests for serialization and cloning."""

    def test_round_trip(self, player_schema: TableSchema) -> None:
        """from_document(to_document()) gives an equal schema."""
        document = player_schema.to_document()

        assert document["itemType"] == "Player"
        assert document["fields"][0] == {"fieldType": "str", "fieldName": "name", "isProperty": False}
        assert TableSchema.from_document(document) == player_schema

    def test_rehydration_is_verbatim(self) -> None:
        """Stored schemas are not checked against live types."""
        document = {
            "itemType": "Gone",
            "fields": [{"fieldType": "Whatever", "fieldName": "x", "isProperty": True}],
        }

        schema = TableSchema.from_document(document)

        assert schema.item_type == "Gone"
        assert schema.fields == [TableField(TypeTag("Whatever"), "x", is_property=True)]
        assert schema.identifier_field is None

    @pytest.mark.parametrize(
        "document",
        [{}, {"itemType": "Player"}, {"itemType": 1, "fields": []}, {"itemType": "P", "fields": {}}],
    )
    def test_invalid_documents(self, document: dict) -> None:
        """Malformed documents raise CorruptDocumentError."""
        with pytest.raises(CorruptDocumentError):
            TableSchema.from_document(document)

    def test_clone_is_independent(self, player_schema: TableSchema) -> None:
        """Changing a clone leaves the source schema untouched."""
        clone = player_schema.clone()
        clone.add_field(TableField(INT_TAG, "level"))

        assert clone != player_schema
        assert player_schema.get_field_by_name("level") is None


@pytest.mark.unit
class TestTableSchemaDiff:
    """Tests for TableSchema.diff."""

    def test_identical(self, player_schema: TableSchema) -> None:
        """A schema does not differ from itself."""
        diff = player_schema.diff(TableSchema.from_type(Player))

        assert diff.is_empty
        assert len(diff.shared) == 3

    def test_missing_and_stale(self, player_schema: TableSchema) -> None:
        """Fields are reported missing or stale by full signature."""
        stored = player_schema.clone()
        stored.remove_field("score")
        stored.add_field(TableField(INT_TAG, "name"), replace=True)
        stored.add_field(TableField(STR_TAG, "nickname"))

        diff = stored.diff(player_schema)

        assert set(diff.missing) == {TableField(STR_TAG, "name"), TableField(INT_TAG, "score")}
        assert set(diff.stale) == {TableField(INT_TAG, "name"), TableField(STR_TAG, "nickname")}
        assert diff.shared == (TableField(INT_TAG, "ID", is_property=True),)
        assert not diff.is_empty
