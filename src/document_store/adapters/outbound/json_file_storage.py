"""JSON file implementation of the DocumentStorage port.

Each document is one UTF-8 JSON file. Writes open the file in ``"w"`` mode
and dump the whole document, so a file is always replaced as a whole;
nothing is renamed atomically and nothing is fsynced.

Directory Layout (see ``StorageConfig``):
    <database_dir>/
        database.json               {"currentVersion": "1.1"}
        Schemas/schema_v1.0.json    one file per schema version
        Tables/Player_table.json    one file per record type
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from document_store.domain.errors import CorruptFileError, StorageError, StorageNotFoundError

JSON_SUFFIX = ".json"


class JsonFileStorage:
    """File-based implementation of the DocumentStorage protocol.

    Attributes:
        indent: Indentation of written files; ``None`` writes compact JSON.
    """

    def __init__(self, indent: int | None = 2, encoding: str = "utf-8") -> None:
        """Initialize the storage.

        Args:
            indent: JSON indentation (default 2).
            encoding: Text encoding of every file.
        """
        self.indent = indent
        self._encoding = encoding

    def read(self, path: Path) -> Any:
        path = Path(path)
        try:
            with open(path, "r", encoding=self._encoding) as f:
                return json.load(f)
        except FileNotFoundError as e:
            raise StorageNotFoundError(f"No document at {path}") from e
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise CorruptFileError(f"Cannot parse {path}: {e}") from e

    def write(self, path: Path, document: Any) -> None:
        path = Path(path)
        try:
            with open(path, "w", encoding=self._encoding) as f:
                json.dump(document, f, indent=self.indent, ensure_ascii=False)
        except FileNotFoundError as e:
            raise StorageNotFoundError(f"Folder of {path} does not exist") from e
        except OSError as e:
            raise StorageError(f"Cannot write {path}: {e}") from e

    def exists(self, path: Path) -> bool:
        return Path(path).is_file()

    def is_directory(self, path: Path) -> bool:
        return Path(path).is_dir()

    def ensure_directory(self, path: Path) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    def list_documents(self, directory: Path, prefix: str = "") -> list[Path]:
        directory = Path(directory)
        if not directory.is_dir():
            raise StorageNotFoundError(f"Folder {directory} does not exist")
        return sorted(
            entry
            for entry in directory.iterdir()
            if entry.is_file() and entry.suffix == JSON_SUFFIX and entry.name.startswith(prefix)
        )
