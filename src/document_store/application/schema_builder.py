"""Schema builder: the version catalog of one database.

The builder owns the schema-version files of the ``Schemas`` folder and
exactly one *active* Schema, the version governing reads and writes.

Start-up:
    1. The schemas folder must exist (``StorageNotFoundError`` otherwise).
    2. If version files exist, the lexicographically greatest version is
       loaded.
    3. Otherwise an empty schema is created for the application version.
       It is not written until ``save_active_schema`` is called, but it is
       listed in ``available_versions`` right away.

Version Ordering:
    ``last_version`` is the plain string maximum, so ``"1.10" < "1.9"``.
    Pad numeric components (``"1.09"``) when more than nine minor versions
    are expected.
"""

from __future__ import annotations

from pathlib import Path

from document_store.domain.entities import Schema, TableSchema, TableSchemaDiff
from document_store.domain.errors import (
    StorageNotFoundError,
    VersionAlreadyExistsError,
    VersionNotFoundError,
)
from document_store.domain.services import TypeRegistry
from document_store.domain.value_objects import TypeTag
from document_store.infrastructure.config import StorageConfig
from document_store.infrastructure.logging import get_logger
from document_store.infrastructure.metrics import MetricsRegistry, get_metrics
from document_store.infrastructure.tracing import trace_span
from document_store.ports.outbound import DocumentStorage

JSON_SUFFIX = ".json"

logger = get_logger(__name__)


class SchemaBuilder:
    """Catalog of schema versions with one active Schema.

    Example:
        builder = SchemaBuilder(config.storage, "1.1", JsonFileStorage())
        builder.create_schema_for_current_version()   # derives from 1.0
        builder.active_schema.get_table_schema(Player).add_field(score)
        builder.save_active_schema()
    """

    def __init__(
        self,
        storage_config: StorageConfig,
        app_version: str,
        storage: DocumentStorage,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Initialize the builder and activate a schema.

        Args:
            storage_config: Folder layout and file naming.
            app_version: Version new schemas are created for.
            storage: Document storage backend.
            metrics: Metrics registry (default: the global one).

        Raises:
            StorageNotFoundError: If the schemas folder does not exist.
            CorruptFileError: If the latest version file does not parse.
        """
        self._path = storage_config.schemas_dir
        self._prefix = storage_config.schema_file_prefix
        self._app_version = app_version
        self._storage = storage
        self._metrics = metrics or get_metrics()

        self._available_versions: list[str] = []
        self._active_schema: Schema | None = None

        if not self._storage.is_directory(self._path):
            raise StorageNotFoundError(f"Schemas folder {self._path} does not exist")

        self.reload_available_versions()

        if self._available_versions:
            self.load_schema(self.last_version)
        else:
            self.create_schema_for_current_version()

    @property
    def path(self) -> Path:
        """The schemas folder."""
        return self._path

    @property
    def app_version(self) -> str:
        return self._app_version

    @property
    def available_versions(self) -> list[str]:
        """Versions with a file on disk, plus the active one."""
        return list(self._available_versions)

    @property
    def active_schema(self) -> Schema:
        if self._active_schema is None:
            raise RuntimeError("No schema is active")
        return self._active_schema

    @property
    def last_version(self) -> str:
        """Greatest available version string (lexicographic)."""
        return max(self._available_versions)

    def reload_available_versions(self) -> list[str]:
        """Rescan the schemas folder.

        The active version is always listed, even before it is saved.
        """
        versions: list[str] = []
        for file_path in self._storage.list_documents(self._path, self._prefix):
            version = file_path.name[len(self._prefix) : -len(JSON_SUFFIX)]
            if version:
                versions.append(version)

        if self._active_schema is not None and self._active_schema.version not in versions:
            versions.append(self._active_schema.version)

        self._available_versions = versions
        return self.available_versions

    def path_for_version(self, version: str) -> Path:
        """File of a schema version."""
        return self._path / f"{self._prefix}{version}{JSON_SUFFIX}"

    def is_version_existing(self, version: str) -> bool:
        """Check whether a version is in the catalog."""
        return version in self._available_versions

    def read_version(self, version: str) -> Schema:
        """Read a version file without activating it.

        Raises:
            VersionNotFoundError: If the version has no file.
            CorruptFileError: If the file does not parse as a schema.
        """
        path = self.path_for_version(version)
        if not self._storage.exists(path):
            raise VersionNotFoundError(f"No schema file for version {version} at {path}")

        with trace_span("schema.load", {"schema.version": version}):
            schema = Schema.from_document(self._storage.read(path))

        self._metrics.schema_loads_total.inc()
        return schema

    def load_schema(self, version: str) -> Schema:
        """Activate a stored version; no-op if it is already active.

        Raises:
            VersionNotFoundError: If the version has no file.
            CorruptFileError: If the file does not parse as a schema.
        """
        if self._active_schema is not None and self._active_schema.version == version:
            return self._active_schema

        self._active_schema = self.read_version(version)
        self.reload_available_versions()

        logger.info(
            "schema_loaded",
            version=version,
            tables=len(self._active_schema),
        )
        return self._active_schema

    def create_schema_for_current_version(self, from_version: str | None = None) -> Schema:
        """Create and activate the schema of the application version.

        The new schema starts as a clone of ``from_version``, which defaults
        to the latest version when any exists. Nothing is written.

        Raises:
            VersionAlreadyExistsError: If the application version already
                has a schema.
            VersionNotFoundError: If ``from_version`` has no file.
        """
        if from_version is None and self._available_versions:
            from_version = self.last_version

        if self.is_version_existing(self._app_version):
            raise VersionAlreadyExistsError(
                f"Impossible to create a schema for version {self._app_version}, it already exists"
            )

        if from_version is not None:
            source = self.load_schema(from_version)
            self._active_schema = source.derive(self._app_version)
        else:
            self._active_schema = Schema(self._app_version)

        self.reload_available_versions()
        self._metrics.schema_versions_created_total.inc()

        logger.info(
            "schema_version_created",
            version=self._app_version,
            from_version=from_version,
        )
        return self._active_schema

    def save_active_schema(self) -> None:
        """Write the active schema, replacing its file."""
        self.save_schema(self.active_schema)

    def save_schema(self, schema: Schema) -> None:
        """Write a schema to the file of its version, replacing it."""
        path = self.path_for_version(schema.version)

        with trace_span("schema.save", {"schema.version": schema.version}):
            self._storage.write(path, schema.to_document())

        self._metrics.schema_saves_total.inc()
        self.reload_available_versions()

        logger.info("schema_saved", version=schema.version, path=str(path))

    def diff_active_against_live(self, registry: TypeRegistry) -> dict[TypeTag, TableSchemaDiff]:
        """Compare every table of the active schema with its live type.

        Tables whose tag is not registered are left out; stored versions
        may describe types that no longer exist.

        Returns:
            Diffs by item type, for tables that differ from their live type.
        """
        diffs: dict[TypeTag, TableSchemaDiff] = {}
        for table_schema in self.active_schema.table_schemas:
            if not registry.contains(table_schema.item_type):
                continue
            live = TableSchema.from_type(registry.resolve(table_schema.item_type))
            diff = table_schema.diff(live)
            if not diff.is_empty:
                diffs[table_schema.item_type] = diff
        return diffs
