"""In-memory implementation of the DocumentStorage port.

Documents are kept as their JSON text so reads return fresh objects and
behave like the file adapter: unparsable text raises ``CorruptFileError``.
Useful for tests and for throwaway databases.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from document_store.domain.errors import CorruptFileError, StorageNotFoundError

JSON_SUFFIX = ".json"


class MemoryDocumentStorage:
    """Dictionary-backed implementation of the DocumentStorage protocol."""

    def __init__(self) -> None:
        self._files: dict[Path, str] = {}
        self._directories: set[Path] = set()

    def read(self, path: Path) -> Any:
        path = Path(path)
        if path not in self._files:
            raise StorageNotFoundError(f"No document at {path}")
        try:
            return json.loads(self._files[path])
        except json.JSONDecodeError as e:
            raise CorruptFileError(f"Cannot parse {path}: {e}") from e

    def write(self, path: Path, document: Any) -> None:
        path = Path(path)
        if path.parent not in self._directories:
            raise StorageNotFoundError(f"Folder of {path} does not exist")
        self._files[path] = json.dumps(document)

    def write_raw(self, path: Path, text: str) -> None:
        """Store raw text at ``path``, e.g. to simulate a corrupt file."""
        path = Path(path)
        self.ensure_directory(path.parent)
        self._files[path] = text

    def exists(self, path: Path) -> bool:
        return Path(path) in self._files

    def is_directory(self, path: Path) -> bool:
        return Path(path) in self._directories

    def ensure_directory(self, path: Path) -> None:
        path = Path(path)
        self._directories.add(path)
        self._directories.update(path.parents)

    def list_documents(self, directory: Path, prefix: str = "") -> list[Path]:
        directory = Path(directory)
        if directory not in self._directories:
            raise StorageNotFoundError(f"Folder {directory} does not exist")
        return sorted(
            path
            for path in self._files
            if path.parent == directory
            and path.suffix == JSON_SUFFIX
            and path.name.startswith(prefix)
        )
