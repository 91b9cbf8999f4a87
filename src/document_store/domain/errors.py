"""Error taxonomy of the document store.

Schema errors signal structural or programming mistakes in schema
management and always reach the caller. Storage errors signal missing or
unreadable files. Failures to read a single field of a single record are
not errors at all: they are recorded as diagnostics (see
``document_store.domain.services.record_codec``).
"""

from __future__ import annotations


class DocumentStoreError(Exception):
    """Base class for every error raised by the document store."""


# Schema errors


class SchemaError(DocumentStoreError):
    """Invalid schema operation."""


class NotStorableError(SchemaError):
    """Type lacks an integer ``ID`` property or a zero-argument constructor."""


class DuplicateFieldError(SchemaError):
    """A table schema already holds a field with that name."""


class FieldNotFoundError(SchemaError):
    """A table schema holds no field with that name."""


class DuplicateTableError(SchemaError):
    """A schema already holds a table schema for that item type."""


class TableNotFoundError(SchemaError):
    """No table (schema) exists for that item type."""


class VersionAlreadyExistsError(SchemaError):
    """A schema version with that name already exists."""


class VersionNotFoundError(SchemaError):
    """No schema version file exists with that name."""


class UnknownTypeError(SchemaError):
    """A stored type tag has no registered record factory."""


# Storage errors


class StorageError(DocumentStoreError):
    """Persisted data could not be read or written."""


class CorruptFileError(StorageError):
    """A file exists but its content does not parse."""


class CorruptDocumentError(CorruptFileError):
    """A parsed document does not have the expected shape."""


class StorageNotFoundError(StorageError):
    """A required file or folder does not exist."""


class LinkUnavailableError(StorageError):
    """A linked record needs an identifier but no linker is wired in."""


class ValueEncodingError(StorageError):
    """A value cannot be written as the type of its field."""


# Lifecycle errors


class DatabaseAlreadyLoadedError(DocumentStoreError):
    """``load()`` was called on a database that is already loaded."""
