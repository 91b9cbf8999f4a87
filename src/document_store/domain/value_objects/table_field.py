"""Table field descriptor.

A TableField names one persisted attribute of a record type: its type tag,
its name, and whether it is reached as a plain attribute or through a
property.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from document_store.domain.errors import CorruptDocumentError
from document_store.domain.value_objects.identifiers import LINK_KEY_SUFFIX, TypeTag


class FieldKind(Enum):
    """How a persisted member is reached on a record."""

    PLAIN_FIELD = "plainField"
    ACCESSOR_PROPERTY = "accessorProperty"


@dataclass(frozen=True, slots=True)
class TableField:
    """A single persisted attribute descriptor.

    Two fields are the *same* field when their names match and *identical*
    when type and kind match too. ``==`` checks identity of all three
    members; use ``same_field`` for the name-only comparison.

    Example:
        >>> name = TableField(TypeTag("str"), "name", is_property=False)
        >>> name.same_field(TableField(TypeTag("int"), "name", is_property=True))
        True
    """

    field_type: TypeTag
    field_name: str
    is_property: bool = False

    def __post_init__(self) -> None:
        """Validate the field descriptor."""
        if not self.field_name:
            raise ValueError("field_name must be a non-empty string")

    @property
    def kind(self) -> FieldKind:
        """Kind of member backing this field."""
        return FieldKind.ACCESSOR_PROPERTY if self.is_property else FieldKind.PLAIN_FIELD

    def same_field(self, other: TableField) -> bool:
        """Check whether both descriptors name the same field."""
        return self.field_name == other.field_name

    def storage_key(self, linked: bool = False) -> str:
        """Document key under which this field is stored."""
        if linked:
            return self.field_name + LINK_KEY_SUFFIX
        return self.field_name

    def to_document(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible mapping."""
        return {
            "fieldType": self.field_type,
            "fieldName": self.field_name,
            "isProperty": self.is_property,
        }

    @classmethod
    def from_document(cls, data: Mapping[str, Any]) -> TableField:
        """Deserialize from a mapping written by ``to_document``.

        Raises:
            CorruptDocumentError: If a key is missing or has the wrong type.
        """
        try:
            field_type = data["fieldType"]
            field_name = data["fieldName"]
            is_property = data["isProperty"]
        except (KeyError, TypeError) as e:
            raise CorruptDocumentError(f"Invalid table field document: {data!r}") from e

        if not isinstance(field_type, str) or not isinstance(field_name, str) or not field_name:
            raise CorruptDocumentError(f"Invalid table field document: {data!r}")
        if not isinstance(is_property, bool):
            raise CorruptDocumentError(f"isProperty must be a boolean in {data!r}")

        return cls(
            field_type=TypeTag(field_type),
            field_name=field_name,
            is_property=is_property,
        )

    def __repr__(self) -> str:
        return f"TableField({self.field_name}: {self.field_type}, {self.kind.value})"
