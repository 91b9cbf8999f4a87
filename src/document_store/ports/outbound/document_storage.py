"""Document Storage port for whole-document persistence.

This outbound port defines the contract for reading and writing JSON
documents. Every write replaces the whole document; there is no partial
update, no atomic rename and no fsync. A crash in the middle of a write can
leave a corrupt file behind, which the next read reports as
``CorruptFileError``.

Documents are addressed by path so the same contract serves the on-disk
layout (``Schemas/``, ``Tables/``, the database file) and in-memory test
doubles.
"""

from __future__ import annotations

from abc import abstractmethod
from pathlib import Path
from typing import Any, Protocol


class DocumentStorage(Protocol):
    """Protocol for whole-document I/O.

    Thread Safety:
        Not required. Concurrent writers to the same path are not
        arbitrated.
    """

    @abstractmethod
    def read(self, path: Path) -> Any:
        """Read and parse a document.

        Args:
            path: Location of the document.

        Returns:
            The parsed JSON value.

        Raises:
            StorageNotFoundError: If nothing is stored at ``path``.
            CorruptFileError: If the content does not parse.
        """
        ...

    @abstractmethod
    def write(self, path: Path, document: Any) -> None:
        """Serialize a document, replacing anything stored at ``path``.

        Raises:
            StorageError: If the write fails.
        """
        ...

    @abstractmethod
    def exists(self, path: Path) -> bool:
        """Check whether a document is stored at ``path``."""
        ...

    @abstractmethod
    def is_directory(self, path: Path) -> bool:
        """Check whether ``path`` is an existing folder."""
        ...

    @abstractmethod
    def ensure_directory(self, path: Path) -> None:
        """Create a folder and its parents when missing."""
        ...

    @abstractmethod
    def list_documents(self, directory: Path, prefix: str = "") -> list[Path]:
        """List the JSON documents of a folder whose name starts with ``prefix``.

        Returns:
            Paths sorted by name.

        Raises:
            StorageNotFoundError: If the folder does not exist.
        """
        ...
