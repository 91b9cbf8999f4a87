"""Application layer for the document store.

The application layer orchestrates domain logic to fulfill use cases:
managing schema versions, reading and writing tables, and wiring tables
together into one database.

Exports:
    SchemaBuilder:
        - SchemaBuilder: Version catalog with one active schema
    Table:
        - Table: Documents of one record type backed by one file
        - table_file_name: File naming rule of table files
    DocumentDatabase:
        - DocumentDatabase: Main entry point for the document store
"""

from document_store.application.database import DocumentDatabase
from document_store.application.schema_builder import SchemaBuilder
from document_store.application.table import Table, table_file_name

__all__ = [
    "DocumentDatabase",
    "SchemaBuilder",
    "Table",
    "table_file_name",
]
