"""Unit tests for domain value objects - identifiers and table fields."""

from __future__ import annotations

import pytest

from document_store.domain.errors import CorruptDocumentError, CorruptFileError
from document_store.domain.value_objects import (
    ID_FIELD_NAME,
    INT_TAG,
    LINK_KEY_SUFFIX,
    STR_TAG,
    UNSET_ID,
    FieldKind,
    RecordId,
    TableField,
    TypeTag,
)


class TestIdentifiers:
    """Tests for identifier types and sentinels."""

    def test_record_id_is_int(self) -> None:
        """RecordId is a plain int at runtime."""
        record_id = RecordId(7)
        assert record_id == 7
        assert isinstance(record_id, int)

    def test_unset_sentinel(self) -> None:
        """UNSET_ID is 0."""
        assert UNSET_ID == 0

    def test_naming_rules(self) -> None:
        """Identifier member and link suffix names."""
        assert ID_FIELD_NAME == "ID"
        assert LINK_KEY_SUFFIX == "_ID"


@pytest.mark.unit
class TestTableField:
    """Tests for TableField."""

    def test_same_field_compares_names_only(self) -> None:
        """Fields with the same name are the same field."""
        plain = TableField(STR_TAG, "name")
        prop = TableField(INT_TAG, "name", is_property=True)

        assert plain.same_field(prop)
        assert plain != prop

    def test_identical_fields_are_equal(self) -> None:
        """Fields matching name, type and kind are equal."""
        assert TableField(STR_TAG, "name") == TableField(TypeTag("str"), "name", False)
        assert hash(TableField(STR_TAG, "name")) == hash(TableField(STR_TAG, "name"))

    def test_kind(self) -> None:
        """Kind follows the is_property flag."""
        assert TableField(STR_TAG, "name").kind is FieldKind.PLAIN_FIELD
        assert TableField(INT_TAG, "ID", is_property=True).kind is FieldKind.ACCESSOR_PROPERTY

    def test_empty_name_rejected(self) -> None:
        """A field needs a name."""
        with pytest.raises(ValueError):
            TableField(STR_TAG, "")

    def test_immutable(self) -> None:
        """Fields cannot be modified."""
        table_field = TableField(STR_TAG, "name")
        with pytest.raises(AttributeError):
            table_field.field_name = "other"  # type: ignore[misc]

    def test_storage_key(self) -> None:
        """Linked fields are stored under <name>_ID."""
        owner = TableField(TypeTag("Player"), "owner")
        assert owner.storage_key() == "owner"
        assert owner.storage_key(linked=True) == "owner_ID"

    def test_document_shape(self) -> None:
        """Serialized fields use the persisted key names."""
        table_field = TableField(INT_TAG, "score", is_property=True)

        assert table_field.to_document() == {
            "fieldType": "int",
            "fieldName": "score",
            "isProperty": True,
        }
        assert TableField.from_document(table_field.to_document()) == table_field

    @pytest.mark.parametrize(
        "document",
        [
            {"fieldType": "int", "fieldName": "score"},
            {"fieldType": "int", "fieldName": "", "isProperty": False},
            {"fieldType": 3, "fieldName": "score", "isProperty": False},
            {"fieldType": "int", "fieldName": "score", "isProperty": "yes"},
            ["int", "score", False],
        ],
    )
    def test_invalid_documents(self, document: object) -> None:
        """Malformed documents raise CorruptDocumentError."""
        with pytest.raises(CorruptDocumentError):
            TableField.from_document(document)  # type: ignore[arg-type]

    def test_corrupt_document_is_storage_error(self) -> None:
        """CorruptDocumentError is caught as CorruptFileError."""
        with pytest.raises(CorruptFileError):
            TableField.from_document({})
