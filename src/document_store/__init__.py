"""
Document Store - Embedded document store with versioned schemas

Persists typed records as JSON documents, one file per record type, and
tracks the persisted shape of every record type in schema versions that
stay readable after the record classes have changed.
"""

__version__ = "0.1.0"

from document_store.application import DocumentDatabase, SchemaBuilder, Table
from document_store.domain.entities import (
    Record,
    Schema,
    TableSchema,
    persisted,
    persisted_property,
)
from document_store.domain.errors import (
    DocumentStoreError,
    SchemaError,
    StorageError,
)
from document_store.domain.services import (
    FieldDiagnostic,
    TypeRegistry,
    storable,
)
from document_store.domain.value_objects import TableField

__all__ = [
    "__version__",
    "DocumentDatabase",
    "SchemaBuilder",
    "Table",
    "Record",
    "Schema",
    "TableSchema",
    "TableField",
    "persisted",
    "persisted_property",
    "FieldDiagnostic",
    "TypeRegistry",
    "storable",
    "DocumentStoreError",
    "SchemaError",
    "StorageError",
]
