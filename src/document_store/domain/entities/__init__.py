"""Domain entities for the document store.

Entities are objects with identity that have a lifecycle. Unlike value objects,
two entities with the same attributes may not be equal if they have different
identities.

Exports:
    Record contract:
        - Record: Base class providing the integer ``ID`` property
        - persisted, persisted_property: Persist markers
        - RecordDescriptor, MemberDescriptor: Cached per-type introspection
        - describe_record, record_tag, type_tag: Introspection helpers
        - read_member, write_member: Kind-aware member access

    Table schemas:
        - TableSchema: Ordered persisted fields of one record type
        - TableSchemaDiff: Shared / missing / stale fields

    Schemas:
        - Schema: One named version of the table schemas
        - SchemaDiff: Table-by-table comparison of two versions
"""

from document_store.domain.entities.record import (
    MemberDescriptor,
    Record,
    RecordDescriptor,
    RecordFactory,
    describe_record,
    is_record_type,
    persisted,
    persisted_property,
    read_member,
    record_tag,
    type_tag,
    write_member,
)
from document_store.domain.entities.schema import Schema, SchemaDiff
from document_store.domain.entities.table_schema import TableSchema, TableSchemaDiff

__all__ = [
    # Record contract
    "Record",
    "RecordFactory",
    "persisted",
    "persisted_property",
    "MemberDescriptor",
    "RecordDescriptor",
    "describe_record",
    "is_record_type",
    "record_tag",
    "type_tag",
    "read_member",
    "write_member",
    # Table schemas
    "TableSchema",
    "TableSchemaDiff",
    # Schemas
    "Schema",
    "SchemaDiff",
]
