"""Record codec: records to table documents and back.

The codec walks the field list of a table schema, never the live type, so a
table written under one schema version stays readable after the record
class has changed:

- scalar fields are stored under their name, as strings (see ``ValueCodec``);
- ``ID`` is stored as a JSON integer;
- linked fields, whose type tag names a registered record type, are stored
  as ``<name>_ID`` holding the linked record's identifier (``0`` = unset).

Reading is tolerant. Document keys the schema does not name are ignored.
A schema field that is absent, null, unparsable or unknown to the live type
is skipped, reported as a ``FieldDiagnostic``, and the rest of the record is
still populated.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping

from document_store.domain.entities.record import RecordFactory, read_member, write_member
from document_store.domain.entities.table_schema import TableSchema
from document_store.domain.errors import (
    LinkUnavailableError,
    TableNotFoundError,
    UnknownTypeError,
    ValueEncodingError,
)
from document_store.domain.services.type_registry import TypeRegistry
from document_store.domain.services.value_codec import UnsupportedTypeError, ValueCodec
from document_store.domain.value_objects import (
    ID_FIELD_NAME,
    UNSET_ID,
    RecordId,
    TableField,
    TypeTag,
)
from document_store.ports.inbound.record_linker import IdentityMap, RecordLinker


class DiagnosticReason(str, Enum):
    """Why a field was skipped."""

    MISSING = "missing"  # key absent or null
    UNPARSABLE = "unparsable"
    UNSUPPORTED_TYPE = "unsupported_type"
    MISSING_MEMBER = "missing_member"  # live type has no such member
    DANGLING_LINK = "dangling_link"
    LINK_UNAVAILABLE = "link_unavailable"


@dataclass(frozen=True, slots=True)
class FieldDiagnostic:
    """One field skipped while reading or writing a record."""

    type_tag: TypeTag
    record_id: int
    field_name: str
    reason: DiagnosticReason
    detail: str = ""

    def __str__(self) -> str:
        text = f"{self.type_tag}#{self.record_id}.{self.field_name}: {self.reason.value}"
        return f"{text} ({self.detail})" if self.detail else text


DiagnosticSink = Callable[[FieldDiagnostic], None]


def _discard(diagnostic: FieldDiagnostic) -> None:
    pass


class RecordCodec:
    """Serializer bound to one table schema.

    Args:
        table_schema: Field list driving both directions.
        factory: Zero-argument callable building an empty record.
        registry: Registered record types; decides which fields are links.
        linker: Resolves and creates linked records; optional for tables
            without links.
        value_codec: Scalar converter; a default one when omitted.
        on_diagnostic: Called once per skipped field.
    """

    def __init__(
        self,
        table_schema: TableSchema,
        factory: RecordFactory,
        registry: TypeRegistry,
        linker: RecordLinker | None = None,
        value_codec: ValueCodec | None = None,
        on_diagnostic: DiagnosticSink | None = None,
    ) -> None:
        self._schema = table_schema
        self._factory = factory
        self._registry = registry
        self._linker = linker
        self._values = value_codec or ValueCodec()
        self._on_diagnostic = on_diagnostic or _discard

    @property
    def table_schema(self) -> TableSchema:
        return self._schema

    @property
    def linker(self) -> RecordLinker | None:
        return self._linker

    @linker.setter
    def linker(self, linker: RecordLinker | None) -> None:
        self._linker = linker

    def is_link(self, table_field: TableField) -> bool:
        """Check whether a field holds a reference to another record."""
        return table_field.field_name != ID_FIELD_NAME and self._registry.contains(
            table_field.field_type
        )

    def storage_key(self, table_field: TableField) -> str:
        """Document key of a field."""
        return table_field.storage_key(linked=self.is_link(table_field))

    # Writing

    def encode(self, record: Any) -> dict[str, Any]:
        """Serialize a record into a table document.

        Unsaved linked records are created through the linker first.

        Raises:
            LinkUnavailableError: If a linked record needs an identifier and
                no linker is set.
            ValueEncodingError: If a scalar does not convert to its field type.
        """
        document: dict[str, Any] = {}
        record_id = int(record.ID)

        for table_field in self._schema.fields:
            key = self.storage_key(table_field)
            try:
                value = read_member(record, table_field.field_name, table_field.is_property)
            except AttributeError as e:
                self._report(record_id, table_field, DiagnosticReason.MISSING_MEMBER, str(e))
                document[key] = None
                continue

            if table_field.field_name == ID_FIELD_NAME:
                document[key] = int(value)
            elif self.is_link(table_field):
                document[key] = self._link_id(value)
            else:
                try:
                    document[key] = self._values.encode(value, table_field.field_type)
                except ValueEncodingError as e:
                    raise ValueEncodingError(
                        f"{self._schema.item_type}#{record_id}.{table_field.field_name}: {e}"
                    ) from e

        return document

    def _link_id(self, linked: Any) -> int:
        if linked is None:
            return UNSET_ID
        if int(linked.ID) == UNSET_ID:
            if self._linker is None:
                raise LinkUnavailableError(
                    f"Cannot store an unsaved {type(linked).__name__} link without a linker"
                )
            return int(self._linker.create_linked(linked))
        return int(linked.ID)

    # Reading

    def decode(self, document: Mapping[str, Any], identity_map: IdentityMap | None = None) -> Any:
        """Build a record from a table document.

        The record is put in ``identity_map`` under its ``(tag, ID)`` before
        its links are resolved, so a link back to it yields this instance.
        A link whose type has no table in the active schema, or is no longer
        registered, is skipped with a ``link_unavailable`` diagnostic.
        """
        if identity_map is None:
            identity_map = {}

        record = self._factory()
        tag = self._schema.item_type
        record_id = self._decode_id(record, document)
        if record_id != UNSET_ID:
            identity_map[(tag, RecordId(record_id))] = record

        for table_field in self._schema.fields:
            if table_field.field_name == ID_FIELD_NAME:
                continue
            if self.is_link(table_field):
                self._decode_link(record, record_id, table_field, document, identity_map)
            else:
                self._decode_scalar(record, record_id, table_field, document)

        return record

    def _decode_id(self, record: Any, document: Mapping[str, Any]) -> int:
        id_field = self._schema.identifier_field
        raw = document.get(ID_FIELD_NAME)
        if id_field is None:
            return UNSET_ID
        if raw is None:
            self._report(UNSET_ID, id_field, DiagnosticReason.MISSING)
            return UNSET_ID
        try:
            record_id = int(raw)
        except (TypeError, ValueError) as e:
            self._report(UNSET_ID, id_field, DiagnosticReason.UNPARSABLE, str(e))
            return UNSET_ID
        self._write(record, record_id, id_field, record_id)
        return record_id

    def _decode_scalar(
        self,
        record: Any,
        record_id: int,
        table_field: TableField,
        document: Mapping[str, Any],
    ) -> None:
        raw = document.get(table_field.field_name)
        if raw is None:
            self._report(record_id, table_field, DiagnosticReason.MISSING)
            return
        try:
            value = self._values.decode(raw, table_field.field_type)
        except UnsupportedTypeError as e:
            self._report(record_id, table_field, DiagnosticReason.UNSUPPORTED_TYPE, str(e))
            return
        except ValueError as e:
            self._report(record_id, table_field, DiagnosticReason.UNPARSABLE, str(e))
            return
        self._write(record, record_id, table_field, value)

    def _decode_link(
        self,
        record: Any,
        record_id: int,
        table_field: TableField,
        document: Mapping[str, Any],
        identity_map: IdentityMap,
    ) -> None:
        raw = document.get(self.storage_key(table_field))
        if raw is None:
            self._report(record_id, table_field, DiagnosticReason.MISSING)
            return
        try:
            linked_id = RecordId(int(raw))
        except (TypeError, ValueError) as e:
            self._report(record_id, table_field, DiagnosticReason.UNPARSABLE, str(e))
            return
        if linked_id == UNSET_ID:
            return

        linked_tag = table_field.field_type
        linked = identity_map.get((linked_tag, linked_id))
        if linked is None:
            if self._linker is None:
                self._report(record_id, table_field, DiagnosticReason.LINK_UNAVAILABLE)
                return
            try:
                linked = self._linker.resolve_link(linked_tag, linked_id, identity_map)
            except (TableNotFoundError, UnknownTypeError) as e:
                self._report(record_id, table_field, DiagnosticReason.LINK_UNAVAILABLE, str(e))
                return
        if linked is None:
            self._report(
                record_id,
                table_field,
                DiagnosticReason.DANGLING_LINK,
                f"no {linked_tag} with ID {linked_id}",
            )
        self._write(record, record_id, table_field, linked)

    def _write(self, record: Any, record_id: int, table_field: TableField, value: Any) -> None:
        try:
            write_member(record, table_field.field_name, table_field.is_property, value)
        except AttributeError as e:
            self._report(record_id, table_field, DiagnosticReason.MISSING_MEMBER, str(e))

    def _report(
        self,
        record_id: int,
        table_field: TableField,
        reason: DiagnosticReason,
        detail: str = "",
    ) -> None:
        self._on_diagnostic(
            FieldDiagnostic(
                type_tag=self._schema.item_type,
                record_id=record_id,
                field_name=table_field.field_name,
                reason=reason,
                detail=detail,
            )
        )
