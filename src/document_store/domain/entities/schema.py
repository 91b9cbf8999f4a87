"""Schema entity: one named version of the table schemas.

A Schema is a snapshot of which record types and fields are persisted under
a given application version. Deriving a new version clones every table
schema, so editing the new version never alters the one it came from.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from document_store.domain.entities.record import record_tag
from document_store.domain.entities.table_schema import TableSchema, TableSchemaDiff
from document_store.domain.errors import (
    CorruptDocumentError,
    DuplicateTableError,
    TableNotFoundError,
)
from document_store.domain.value_objects import TypeTag


@dataclass(frozen=True)
class SchemaDiff:
    """Table-by-table comparison of two schema versions."""

    added_tables: tuple[TypeTag, ...] = ()
    removed_tables: tuple[TypeTag, ...] = ()
    changed_tables: dict[TypeTag, TableSchemaDiff] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        """True when both versions persist the same tables and fields."""
        return not (self.added_tables or self.removed_tables or self.changed_tables)


def _tag_of(item_type: type | str) -> TypeTag:
    if isinstance(item_type, str):
        return TypeTag(item_type)
    return record_tag(item_type)


class Schema:
    """Named collection of table schemas, at most one per item type.

    Example:
        >>> schema = Schema("1.0")
        >>> schema.add_table_schema(TableSchema.from_type(Player))
        >>> schema.get_table_schema(Player).item_type
        'Player'
    """

    def __init__(
        self,
        version: str,
        table_schemas: Iterable[TableSchema] | None = None,
    ) -> None:
        """Initialize the schema.

        Args:
            version: Version string naming this schema.
            table_schemas: Initial table schemas; must not repeat an item type.

        Raises:
            DuplicateTableError: If two table schemas share an item type.
        """
        self._version = version
        self._table_schemas: list[TableSchema] = []
        for table_schema in table_schemas or ():
            self.add_table_schema(table_schema)

    @property
    def version(self) -> str:
        """Version string of this schema."""
        return self._version

    @property
    def table_schemas(self) -> tuple[TableSchema, ...]:
        """Table schemas in insertion order."""
        return tuple(self._table_schemas)

    def derive(self, version: str) -> Schema:
        """Start a new version whose tables are independent clones of these."""
        return Schema(version, [ts.clone() for ts in self._table_schemas])

    def add_table_schema(self, table_schema: TableSchema) -> None:
        """Register a table schema.

        Raises:
            DuplicateTableError: If a table schema for that item type exists.
        """
        if self.get_table_schema(table_schema.item_type) is not None:
            raise DuplicateTableError(
                f"Schema {self._version} already contains a table of type {table_schema.item_type}"
            )
        self._table_schemas.append(table_schema)

    def get_table_schema(self, item_type: type | str) -> TableSchema | None:
        """Find the table schema of a record type or tag; ``None`` when absent."""
        tag = _tag_of(item_type)
        for table_schema in self._table_schemas:
            if table_schema.item_type == tag:
                return table_schema
        return None

    def remove_table_schema(self, table_schema: TableSchema | type | str) -> TableSchema:
        """Remove a table schema and return it.

        Raises:
            TableNotFoundError: If the schema holds no such table.
        """
        if isinstance(table_schema, TableSchema):
            target: TableSchema | None = next(
                (ts for ts in self._table_schemas if ts is table_schema), None
            )
            tag = table_schema.item_type
        else:
            tag = _tag_of(table_schema)
            target = self.get_table_schema(tag)

        if target is None:
            raise TableNotFoundError(f"Schema {self._version} does not contain a table of type {tag}")
        self._table_schemas.remove(target)
        return target

    def rebuild_table_schema(self, record_type: type) -> TableSchema:
        """Replace a table schema with a fresh introspection of the live type.

        The replacement is wholesale: manual field additions or removals are
        lost. The table keeps its position.

        Raises:
            TableNotFoundError: If the schema holds no table for that type.
            NotStorableError: If the type is not storable.
        """
        tag = record_tag(record_type)
        for index, table_schema in enumerate(self._table_schemas):
            if table_schema.item_type == tag:
                rebuilt = TableSchema.from_type(record_type)
                self._table_schemas[index] = rebuilt
                return rebuilt
        raise TableNotFoundError(f"No table of type {tag} found in schema {self._version}")

    def diff(self, other: Schema) -> SchemaDiff:
        """Compare ``other`` (e.g. a newer version) against this schema."""
        mine = {ts.item_type: ts for ts in self._table_schemas}
        theirs = {ts.item_type: ts for ts in other.table_schemas}

        changed: dict[TypeTag, TableSchemaDiff] = {}
        for tag, table_schema in mine.items():
            if tag in theirs:
                table_diff = table_schema.diff(theirs[tag])
                if not table_diff.is_empty:
                    changed[tag] = table_diff

        return SchemaDiff(
            added_tables=tuple(tag for tag in theirs if tag not in mine),
            removed_tables=tuple(tag for tag in mine if tag not in theirs),
            changed_tables=changed,
        )

    def to_document(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible mapping."""
        return {
            "version": self._version,
            "tableSchemas": [ts.to_document() for ts in self._table_schemas],
        }

    @classmethod
    def from_document(cls, data: Mapping[str, Any]) -> Schema:
        """Rehydrate a stored schema version.

        Raises:
            CorruptDocumentError: If the document does not have the
                ``{version, tableSchemas}`` shape.
            DuplicateTableError: If the document repeats an item type.
        """
        try:
            version = data["version"]
            tables_data = data["tableSchemas"]
        except (KeyError, TypeError) as e:
            raise CorruptDocumentError(f"Invalid schema document: {data!r}") from e

        if not isinstance(version, str) or not isinstance(tables_data, list):
            raise CorruptDocumentError(f"Invalid schema document: {data!r}")

        return cls(version, [TableSchema.from_document(t) for t in tables_data])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Schema):
            return NotImplemented
        return self._version == other._version and self._table_schemas == other._table_schemas

    __hash__ = None  # type: ignore[assignment]

    def __len__(self) -> int:
        return len(self._table_schemas)

    def __repr__(self) -> str:
        tables = ", ".join(ts.item_type for ts in self._table_schemas)
        return f"Schema(version={self._version!r}, tables=[{tables}])"
