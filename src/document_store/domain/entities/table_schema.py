"""Table schema entity: the persisted field list of one record type.

A TableSchema is created either by introspecting a live record type
(``from_type``) or by rehydrating a stored document (``from_document``).
Historical schemas may describe types that no longer exist in the same
shape, so rehydration never validates against live types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping

from document_store.domain.entities.record import describe_record
from document_store.domain.errors import (
    CorruptDocumentError,
    DuplicateFieldError,
    FieldNotFoundError,
)
from document_store.domain.value_objects import (
    ID_FIELD_NAME,
    FieldKind,
    TableField,
    TypeTag,
)


@dataclass(frozen=True)
class TableSchemaDiff:
    """Comparison of a table schema against a reference field list.

    Attributes:
        shared: Fields identical in both.
        missing: Reference fields with no identical counterpart here.
        stale: Fields here with no identical counterpart in the reference.
    """

    shared: tuple[TableField, ...] = ()
    missing: tuple[TableField, ...] = ()
    stale: tuple[TableField, ...] = ()

    @property
    def is_empty(self) -> bool:
        """True when both field lists are identical (order aside)."""
        return not self.missing and not self.stale


@dataclass
class TableSchema:
    """Ordered set of persisted fields for one record type.

    Invariants:
        - field names are unique
        - a schema built by ``from_type`` holds exactly one ``ID`` field of
          property kind and integer type
    """

    item_type: TypeTag
    fields: list[TableField] = field(default_factory=list)

    @classmethod
    def from_type(cls, record_type: type) -> TableSchema:
        """Introspect a live record type.

        The ``ID`` property is always included; every other member is
        included only when marked persisted.

        Raises:
            NotStorableError: If the type is not storable.
        """
        descriptor = describe_record(record_type)
        return cls(
            item_type=descriptor.tag,
            fields=[
                TableField(
                    field_type=member.type_tag,
                    field_name=member.name,
                    is_property=member.kind is FieldKind.ACCESSOR_PROPERTY,
                )
                for member in descriptor.members
            ],
        )

    @classmethod
    def from_document(cls, data: Mapping[str, Any]) -> TableSchema:
        """Rehydrate a stored table schema verbatim.

        Raises:
            CorruptDocumentError: If the document does not have the
                ``{itemType, fields}`` shape.
        """
        try:
            item_type = data["itemType"]
            fields_data = data["fields"]
        except (KeyError, TypeError) as e:
            raise CorruptDocumentError(f"Invalid table schema document: {data!r}") from e

        if not isinstance(item_type, str) or not isinstance(fields_data, list):
            raise CorruptDocumentError(f"Invalid table schema document: {data!r}")

        return cls(
            item_type=TypeTag(item_type),
            fields=[TableField.from_document(f) for f in fields_data],
        )

    def to_document(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible mapping."""
        return {
            "itemType": self.item_type,
            "fields": [f.to_document() for f in self.fields],
        }

    def clone(self) -> TableSchema:
        """Independent copy; fields are immutable so only the list is copied."""
        return TableSchema(item_type=self.item_type, fields=list(self.fields))

    @property
    def identifier_field(self) -> TableField | None:
        """The ``ID`` field, if present."""
        return self.get_field_by_name(ID_FIELD_NAME)

    def contains_field(self, table_field: TableField, by_name_only: bool = False) -> bool:
        """Check membership by name only, or by name, type and kind."""
        for existing in self.fields:
            if by_name_only and existing.same_field(table_field):
                return True
            if not by_name_only and existing == table_field:
                return True
        return False

    def add_field(self, table_field: TableField, replace: bool = False) -> None:
        """Append a field.

        Args:
            table_field: The field to add.
            replace: Remove a same-named field first instead of failing.

        Raises:
            DuplicateFieldError: If a same-named field exists and
                ``replace`` is False.
        """
        if self.contains_field(table_field, by_name_only=True):
            if not replace:
                raise DuplicateFieldError(
                    f"Table of type {self.item_type} already contains a field named "
                    f"{table_field.field_name}"
                )
            self.remove_field(table_field)
        self.fields.append(table_field)

    def remove_field(self, table_field: TableField | str) -> TableField:
        """Remove the field with the same name and return it.

        Raises:
            FieldNotFoundError: If no field has that name.
        """
        name = table_field if isinstance(table_field, str) else table_field.field_name
        for index, existing in enumerate(self.fields):
            if existing.field_name == name:
                return self.fields.pop(index)
        raise FieldNotFoundError(
            f"Table of type {self.item_type} doesn't contain a field named {name}"
        )

    def get_field_by_name(self, name: str) -> TableField | None:
        """Find a field by name; ``None`` when absent."""
        for existing in self.fields:
            if existing.field_name == name:
                return existing
        return None

    def diff(self, reference: TableSchema) -> TableSchemaDiff:
        """Compare this schema with a reference, typically a fresh introspection."""
        return TableSchemaDiff(
            shared=tuple(f for f in self.fields if reference.contains_field(f)),
            missing=tuple(f for f in reference.fields if not self.contains_field(f)),
            stale=tuple(f for f in self.fields if not reference.contains_field(f)),
        )

    @property
    def field_names(self) -> list[str]:
        """Names of all fields in order."""
        return [f.field_name for f in self.fields]

    def __iter__(self) -> Iterator[TableField]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)
