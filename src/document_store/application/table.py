"""Table: the documents of one record type.

A table holds the raw documents of one record type in memory, decodes them
into records on demand, and writes them back to its table file as a whole.

File Format (``Tables/<Tag><suffix>.json``):
    {
        "currentID": 2,
        "datas": [
            {"ID": 1, "name": "Ann", "score": "12", "guild_ID": 3},
            ...
        ]
    }

``currentID`` is the highest identifier issued so far. ``create_item`` hands
out ``currentID + 1``, so identifiers are never reused, not even after the
record holding the highest one has been removed.

Persistence is explicit: ``save_item``, ``create_item`` and ``remove_item``
only change the in-memory documents; ``save`` writes the file.

Example:
    table.load()
    player = Player(name="Ann")
    table.create_item(player)          # player.ID == 1
    table.save()
    table.get_one(lambda d: d["name"] == "Ann")
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Generic, Iterable, Iterator, Mapping, TypeVar

from document_store.domain.entities import TableSchema, describe_record
from document_store.domain.errors import CorruptFileError, DocumentStoreError
from document_store.domain.services import (
    FieldDiagnostic,
    RecordCodec,
    TypeRegistry,
    ValueCodec,
)
from document_store.domain.value_objects import ID_FIELD_NAME, UNSET_ID, RecordId, TypeTag
from document_store.infrastructure.config import StorageConfig
from document_store.infrastructure.logging import get_logger
from document_store.infrastructure.metrics import MetricsRegistry, get_metrics
from document_store.infrastructure.tracing import trace_span
from document_store.ports.inbound import Fillable, IdentityMap, RecordLinker
from document_store.ports.outbound import DocumentStorage

T = TypeVar("T")

Document = dict[str, Any]
Predicate = Callable[[Mapping[str, Any]], bool]

CURRENT_ID_KEY = "currentID"
DATAS_KEY = "datas"
JSON_SUFFIX = ".json"

DEFAULT_BATCH_SIZE = 64


def _document_id(document: Mapping[str, Any]) -> int:
    raw = document.get(ID_FIELD_NAME)
    if raw is None:
        return UNSET_ID
    try:
        return int(raw)
    except (TypeError, ValueError):
        return UNSET_ID


def _stored_form(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    return str(value)


def table_file_name(tag: str, suffix: str) -> str:
    """File name of the table of ``tag``: dots removed, suffix appended."""
    return f"{tag.replace('.', '')}{suffix}{JSON_SUFFIX}"


class Table(Generic[T]):
    """In-memory documents of one record type backed by one file.

    Attributes:
        current_id: Highest identifier issued so far.
        diagnostics: Fields skipped while reading or writing records since
            the last ``clear_diagnostics``.

    Thread Safety:
        None. One writer per table is assumed; callers needing concurrent
        access must hold their own lock.
    """

    def __init__(
        self,
        record_type: type[T],
        table_schema: TableSchema,
        storage: DocumentStorage,
        storage_config: StorageConfig,
        registry: TypeRegistry,
        linker: RecordLinker | None = None,
        metrics: MetricsRegistry | None = None,
        value_codec: ValueCodec | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        """Initialize the table. Nothing is read until ``load``.

        Args:
            record_type: Class of the records.
            table_schema: Field list of the active schema for this type.
            storage: Document storage backend.
            storage_config: Folder layout and file naming.
            registry: Registered record types; decides which fields are links.
            linker: Resolves and creates linked records.
            metrics: Metrics registry (default: the global one).
            value_codec: Scalar converter (default: a fresh ``ValueCodec``).
            batch_size: Default batch size of incremental scans.

        Raises:
            NotStorableError: If ``record_type`` is not storable.
        """
        descriptor = describe_record(record_type)

        self._record_type = record_type
        self._schema = table_schema
        self._storage = storage
        self._path = storage_config.tables_dir / table_file_name(
            table_schema.item_type, storage_config.table_file_suffix
        )
        self._metrics = metrics or get_metrics()
        self._batch_size = batch_size
        self._label = str(table_schema.item_type)

        self._documents: list[Document] = []
        self._loaded = False
        self.current_id = UNSET_ID
        self.diagnostics: list[FieldDiagnostic] = []

        self._logger = get_logger(__name__, table=self._label)
        factory = registry.factory(descriptor.tag) if registry.contains(descriptor.tag) else record_type
        self._codec = RecordCodec(
            table_schema,
            factory=factory,
            registry=registry,
            linker=linker,
            value_codec=value_codec,
            on_diagnostic=self._record_diagnostic,
        )

    # Properties

    @property
    def item_type(self) -> type[T]:
        """Class of the records held by this table."""
        return self._record_type

    @property
    def tag(self) -> TypeTag:
        return self._schema.item_type

    @property
    def schema(self) -> TableSchema:
        return self._schema

    @property
    def path(self) -> Path:
        """The table file."""
        return self._path

    @property
    def documents(self) -> list[Document]:
        """Raw documents in file order; mutate through the table only."""
        return self._documents

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def linker(self) -> RecordLinker | None:
        return self._codec.linker

    @linker.setter
    def linker(self, linker: RecordLinker | None) -> None:
        self._codec.linker = linker

    def __len__(self) -> int:
        return len(self._documents)

    # File I/O

    def load(self) -> None:
        """Read the table file.

        A missing file is not an error: the table starts empty and the empty
        file is written.

        Raises:
            CorruptFileError: If the file does not parse as a table.
        """
        with trace_span("table.load", {"table": self._label}):
            if not self._storage.exists(self._path):
                self.current_id = UNSET_ID
                self._documents = []
                self._loaded = True
                self.save()
                status = "initialized"
            else:
                self._read_file()
                self._loaded = True
                status = "loaded"

        self._metrics.table_loads_total.labels(table=self._label, status=status).inc()
        self._metrics.table_documents.labels(table=self._label).set(len(self._documents))
        self._logger.info(
            "table_loaded",
            status=status,
            documents=len(self._documents),
            current_id=self.current_id,
        )

    def _read_file(self) -> None:
        data = self._storage.read(self._path)
        try:
            current_id = data[CURRENT_ID_KEY]
            documents = data[DATAS_KEY]
        except (KeyError, TypeError) as e:
            raise CorruptFileError(f"Invalid table file {self._path}") from e

        if not isinstance(current_id, int) or isinstance(current_id, bool):
            raise CorruptFileError(f"{CURRENT_ID_KEY} must be an integer in {self._path}")
        if not isinstance(documents, list) or not all(isinstance(d, dict) for d in documents):
            raise CorruptFileError(f"{DATAS_KEY} must be a list of objects in {self._path}")

        self.current_id = current_id
        self._documents = documents

    def save(self) -> None:
        """Write the whole table file."""
        with trace_span("table.save", {"table": self._label, "documents": len(self._documents)}):
            with self._metrics.table_save_latency_seconds.labels(table=self._label).time():
                self._storage.write(
                    self._path,
                    {CURRENT_ID_KEY: self.current_id, DATAS_KEY: self._documents},
                )

        self._metrics.table_saves_total.labels(table=self._label).inc()
        self._logger.debug("table_saved", documents=len(self._documents))

    # Queries

    def _apply_filter(self, predicate: Predicate | None) -> Iterator[Document]:
        for document in self._documents:
            if predicate is None or predicate(document):
                yield document

    def id_exists(self, record_id: int) -> bool:
        """Check whether a document holds ``record_id``."""
        return any(_document_id(d) == record_id for d in self._documents)

    def is_unique(self, key: str, value: Any) -> bool:
        """Check that no document stores ``value`` under ``key``.

        Values are compared in their stored form, so scalars are matched by
        their string representation.
        """
        stored = _stored_form(value)
        return not any(key in d and _stored_form(d[key]) == stored for d in self._documents)

    def load_item(self, document: Mapping[str, Any], identity_map: IdentityMap | None = None) -> T:
        """Decode one document into a record."""
        return self._codec.decode(document, identity_map)

    def get_one(self, predicate: Predicate, identity_map: IdentityMap | None = None) -> T | None:
        """First record whose document matches ``predicate``, or ``None``."""
        for document in self._apply_filter(predicate):
            return self.load_item(document, identity_map)
        return None

    def get_one_by_id(self, record_id: int, identity_map: IdentityMap | None = None) -> T | None:
        """The record with identifier ``record_id``, or ``None``."""
        return self.get_one(lambda d: _document_id(d) == record_id, identity_map)

    def get_many(
        self,
        predicate: Predicate | None = None,
        identity_map: IdentityMap | None = None,
    ) -> list[T]:
        """Every record whose document matches ``predicate``, in file order."""
        if identity_map is None:
            identity_map = {}
        return [self.load_item(d, identity_map) for d in self._apply_filter(predicate)]

    def iter_batches(
        self,
        predicate: Predicate | None = None,
        batch_size: int | None = None,
    ) -> Iterator[list[T]]:
        """Decode matching records lazily, one batch at a time.

        The scan runs over a snapshot of the documents taken by this call;
        changes made between batches are not seen. A new call starts a new
        scan. Records of one scan share an identity map.

        Raises:
            ValueError: If ``batch_size`` is below 1.
        """
        size = self._batch_size if batch_size is None else batch_size
        if size < 1:
            raise ValueError("batch_size must be at least 1")
        return self._scan(list(self._documents), predicate, size)

    def _scan(
        self,
        snapshot: list[Document],
        predicate: Predicate | None,
        size: int,
    ) -> Iterator[list[T]]:
        identity_map: IdentityMap = {}
        batch: list[T] = []
        for document in snapshot:
            if predicate is not None and not predicate(document):
                continue
            batch.append(self.load_item(document, identity_map))
            if len(batch) >= size:
                self._metrics.scan_batches_total.labels(table=self._label).inc()
                yield batch
                batch = []
        if batch:
            self._metrics.scan_batches_total.labels(table=self._label).inc()
            yield batch

    def fill(
        self,
        container: Fillable[T],
        predicate: Predicate | None = None,
    ) -> int:
        """Hand every matching record to ``container`` in one batch.

        Returns:
            The number of records added.
        """
        items = self.get_many(predicate)
        container.add_items(items)
        return len(items)

    def fill_incrementally(
        self,
        container: Fillable[T],
        predicate: Predicate | None = None,
        batch_size: int | None = None,
    ) -> Iterator[int]:
        """Hand matching records to ``container`` batch by batch.

        Yields the running count after each batch, so a host loop can decide
        when to resume.
        """
        count = 0
        for batch in self.iter_batches(predicate, batch_size):
            container.add_items(batch)
            count += len(batch)
            yield count

    # Mutations

    def create_item(self, record: T) -> RecordId:
        """Assign the next identifier to ``record`` and store it.

        Returns:
            The new identifier.

        Raises:
            ValueEncodingError: If a value does not convert to its field
                type; the record is left with ``ID == 0``.
        """
        self.current_id += 1
        record_id = self.current_id
        record.ID = record_id  # type: ignore[attr-defined]
        try:
            self._store(record)
        except DocumentStoreError:
            record.ID = UNSET_ID  # type: ignore[attr-defined]
            # linked records created meanwhile keep their identifiers
            if self.current_id == record_id:
                self.current_id -= 1
            raise
        self._metrics.records_created_total.labels(table=self._label).inc()
        return RecordId(record_id)

    def save_item(self, record: T, authorize_creation: bool = True) -> RecordId:
        """Store ``record``, replacing any document with the same identifier.

        A record without identifier is created when ``authorize_creation``
        is set and refused otherwise.

        Returns:
            The identifier of the stored record, ``0`` if it was refused.

        Raises:
            LinkUnavailableError: If a linked record needs an identifier and
                no linker is set.
        """
        record_id = int(record.ID)  # type: ignore[attr-defined]
        if record_id == UNSET_ID:
            if authorize_creation:
                return self.create_item(record)
            self._logger.warning("item_creation_refused", reason="record has no ID")
            return RecordId(UNSET_ID)

        self._store(record)
        return RecordId(record_id)

    def save_items(self, records: Iterable[T], authorize_creation: bool = True) -> list[RecordId]:
        """``save_item`` over many records."""
        return [self.save_item(r, authorize_creation) for r in records]

    def _store(self, record: T) -> None:
        document = self._codec.encode(record)
        record_id = _document_id(document)

        self._documents = [d for d in self._documents if _document_id(d) != record_id]
        self._documents.append(document)

        if record_id > self.current_id:
            self.current_id = record_id

        self._metrics.records_written_total.labels(table=self._label).inc()
        self._metrics.table_documents.labels(table=self._label).set(len(self._documents))

    def remove_item(self, record_or_id: T | int) -> bool:
        """Remove the document of a record or identifier.

        ``current_id`` is left untouched so the identifier is never reissued.

        Returns:
            Whether a document was removed.
        """
        if isinstance(record_or_id, int):
            record_id = record_or_id
        else:
            record_id = int(record_or_id.ID)  # type: ignore[attr-defined]

        before = len(self._documents)
        self._documents = [d for d in self._documents if _document_id(d) != record_id]
        removed = before - len(self._documents)

        if removed:
            self._metrics.records_removed_total.labels(table=self._label).inc(removed)
            self._metrics.table_documents.labels(table=self._label).set(len(self._documents))
        return removed > 0

    # Diagnostics

    def _record_diagnostic(self, diagnostic: FieldDiagnostic) -> None:
        self.diagnostics.append(diagnostic)
        self._metrics.field_diagnostics_total.labels(
            table=self._label, reason=diagnostic.reason.value
        ).inc()
        self._logger.info(
            "field_skipped",
            record_id=diagnostic.record_id,
            field=diagnostic.field_name,
            reason=diagnostic.reason.value,
            detail=diagnostic.detail or None,
        )

    def clear_diagnostics(self) -> list[FieldDiagnostic]:
        """Return and forget the recorded diagnostics."""
        diagnostics, self.diagnostics = self.diagnostics, []
        return diagnostics

    def __repr__(self) -> str:
        return f"Table({self._label}, documents={len(self._documents)}, current_id={self.current_id})"
