"""Document Database - unified entry point for the document store.

This module provides the DocumentDatabase class that wires the schema
builder, the type registry and one Table per table schema of the active
schema, and resolves links between those tables.

Usage:
    from document_store import DocumentDatabase, storable

    db = DocumentDatabase()
    db.load()

    players = db.get_table(Player)
    players.create_item(Player(name="Ann"))
    players.save()

Load Sequence:
    1. Create the database, schemas and tables folders when missing.
    2. Read the database file, which pins the version last run on.
    3. Build the SchemaBuilder (activates the latest version). Unless
       ``versioning.auto_update`` is set, the pinned version is activated
       instead.
    4. A schema version that has never been saved and holds no table gets
       one table per registered type and is saved.
    5. Build one Table per table schema; each stored type tag must be
       registered (``UnknownTypeError`` otherwise).
    6. Write the database file with the active version, then load every
       table file.
"""

from __future__ import annotations

from typing import Any

from document_store.application.schema_builder import SchemaBuilder
from document_store.application.table import Table
from document_store.domain.entities import Schema, TableSchema, TableSchemaDiff, record_tag
from document_store.domain.errors import (
    CorruptFileError,
    DatabaseAlreadyLoadedError,
    TableNotFoundError,
)
from document_store.domain.services import TypeRegistry, ValueCodec
from document_store.domain.value_objects import RecordId, TypeTag
from document_store.infrastructure.config import Config
from document_store.infrastructure.container import Container, get_container
from document_store.infrastructure.logging import get_logger
from document_store.infrastructure.metrics import MetricsRegistry
from document_store.infrastructure.tracing import trace_span
from document_store.ports.inbound import IdentityMap
from document_store.ports.outbound import DocumentStorage

CURRENT_VERSION_KEY = "currentVersion"

logger = get_logger(__name__)


class DocumentDatabase:
    """Database facade owning the schema builder and the tables.

    Implements the RecordLinker port: every table resolves and creates
    linked records through the database that built it.

    Thread Safety:
        None. One logical writer is assumed.
    """

    def __init__(
        self,
        config: Config | None = None,
        registry: TypeRegistry | None = None,
        storage: DocumentStorage | None = None,
        metrics: MetricsRegistry | None = None,
        value_codec: ValueCodec | None = None,
        container: Container | None = None,
    ) -> None:
        """Initialize the database. Nothing is read until ``load``.

        Collaborators not passed explicitly are resolved from ``container``
        (default: the global container).

        Args:
            config: Configuration.
            registry: Record types of this database; the global container
                provides the types decorated with ``@storable``.
            storage: Document storage backend; JSON files by default.
            metrics: Metrics registry.
            value_codec: Scalar converter shared by every table.
            container: Source of the collaborators not passed.
        """
        container = container or get_container()
        self._config = config if config is not None else container.resolve(Config)
        self._registry = registry if registry is not None else container.resolve(TypeRegistry)
        self._storage = (
            storage if storage is not None else container.resolve(DocumentStorage)  # type: ignore[type-abstract]
        )
        self._metrics = metrics if metrics is not None else container.resolve(MetricsRegistry)
        self._value_codec = (
            value_codec if value_codec is not None else container.resolve(ValueCodec)
        )

        self._schema_builder: SchemaBuilder | None = None
        self._tables: dict[TypeTag, Table[Any]] = {}
        self._current_version: str | None = None
        self._loaded = False

    @property
    def config(self) -> Config:
        return self._config

    @property
    def registry(self) -> TypeRegistry:
        return self._registry

    @property
    def storage(self) -> DocumentStorage:
        return self._storage

    @property
    def is_loaded(self) -> bool:
        """Check if the database is loaded."""
        return self._loaded

    @property
    def current_version(self) -> str | None:
        """Version of the active schema, once loaded."""
        return self._current_version

    @property
    def schema_builder(self) -> SchemaBuilder:
        if self._schema_builder is None:
            raise RuntimeError("Database not loaded")
        return self._schema_builder

    @property
    def active_schema(self) -> Schema:
        return self.schema_builder.active_schema

    @property
    def tables(self) -> tuple[Table[Any], ...]:
        return tuple(self._tables.values())

    # Lifecycle

    def load(self) -> None:
        """Load the schema and every table.

        Raises:
            DatabaseAlreadyLoadedError: If already loaded; use ``reload``.
            UnknownTypeError: If a stored type tag is not registered.
            VersionNotFoundError: If the pinned version has no file.
            CorruptFileError: If a schema, table or database file is corrupt.
        """
        if self._loaded:
            raise DatabaseAlreadyLoadedError("Database already loaded, call reload() to refresh")

        storage_config = self._config.storage
        versioning = self._config.versioning

        with trace_span("database.load", {"database.dir": str(storage_config.database_dir)}):
            for directory in (
                storage_config.database_dir,
                storage_config.schemas_dir,
                storage_config.tables_dir,
            ):
                self._storage.ensure_directory(directory)

            pinned_version = self._read_database_file()

            builder = SchemaBuilder(
                storage_config,
                versioning.app_version,
                self._storage,
                metrics=self._metrics,
            )
            if not versioning.auto_update and pinned_version:
                builder.load_schema(pinned_version)

            if versioning.bootstrap_schema:
                self._bootstrap_schema(builder)

            self._schema_builder = builder
            self._current_version = builder.active_schema.version
            self._tables = {
                table_schema.item_type: self._build_table(table_schema)
                for table_schema in builder.active_schema.table_schemas
            }

            self.save()

            for table in self._tables.values():
                table.load()

        self._loaded = True
        logger.info(
            "database_loaded",
            version=self._current_version,
            pinned_version=pinned_version,
            tables=len(self._tables),
        )

    def reload(self) -> None:
        """Drop every in-memory table and load again from disk."""
        self._loaded = False
        self._tables = {}
        self._schema_builder = None
        self.load()

    def _read_database_file(self) -> str | None:
        path = self._config.storage.database_file
        if not self._storage.exists(path):
            return None
        data = self._storage.read(path)
        if data is None:
            return None
        if not isinstance(data, dict):
            raise CorruptFileError(f"Invalid database file {path}")
        version = data.get(CURRENT_VERSION_KEY)
        if version is not None and not isinstance(version, str):
            raise CorruptFileError(f"{CURRENT_VERSION_KEY} must be a string in {path}")
        return version

    def _bootstrap_schema(self, builder: SchemaBuilder) -> None:
        schema = builder.active_schema
        if len(schema) or self._storage.exists(builder.path_for_version(schema.version)):
            return
        for record_type in self._registry.record_types:
            schema.add_table_schema(TableSchema.from_type(record_type))
        builder.save_active_schema()
        logger.info(
            "schema_bootstrapped",
            version=schema.version,
            tables=[ts.item_type for ts in schema.table_schemas],
        )

    def _build_table(self, table_schema: TableSchema) -> Table[Any]:
        record_type = self._registry.resolve(table_schema.item_type)
        return Table(
            record_type,
            table_schema,
            self._storage,
            self._config.storage,
            self._registry,
            linker=self,
            metrics=self._metrics,
            value_codec=self._value_codec,
            batch_size=self._config.query.batch_size,
        )

    def save(self) -> None:
        """Write the database file pinning the active version."""
        self._storage.write(
            self._config.storage.database_file,
            {CURRENT_VERSION_KEY: self._current_version},
        )

    def save_tables(self) -> None:
        """Write every table file."""
        for table in self._tables.values():
            table.save()

    # Tables

    def get_table(self, item_type: type | str) -> Table[Any]:
        """Table of a record type or type tag.

        Raises:
            TableNotFoundError: If the active schema has no such table.
        """
        tag = TypeTag(item_type) if isinstance(item_type, str) else record_tag(item_type)
        table = self._tables.get(tag)
        if table is None:
            raise TableNotFoundError(f"No table of type {tag} found in database")
        return table

    def has_table(self, item_type: type | str) -> bool:
        tag = TypeTag(item_type) if isinstance(item_type, str) else record_tag(item_type)
        return tag in self._tables

    def diff_schema(self) -> dict[TypeTag, TableSchemaDiff]:
        """Tables of the active schema that differ from their live types."""
        return self.schema_builder.diff_active_against_live(self._registry)

    # RecordLinker

    def resolve_link(
        self,
        tag: TypeTag,
        record_id: RecordId,
        identity_map: IdentityMap,
    ) -> Any | None:
        cached = identity_map.get((tag, record_id))
        if cached is not None:
            return cached
        return self.get_table(tag).get_one_by_id(record_id, identity_map)

    def create_linked(self, record: Any) -> RecordId:
        table = self.get_table(type(record))
        record_id = table.create_item(record)
        table.save()
        logger.debug("linked_record_created", table=str(table.tag), record_id=record_id)
        return record_id

    def __repr__(self) -> str:
        state = "loaded" if self._loaded else "not loaded"
        return f"DocumentDatabase(version={self._current_version!r}, tables={len(self._tables)}, {state})"
