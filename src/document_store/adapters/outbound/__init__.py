"""Outbound adapters - implementations of outbound ports.

These adapters implement external dependencies such as reading and
writing JSON documents.
"""

from document_store.adapters.outbound.json_file_storage import JsonFileStorage
from document_store.adapters.outbound.memory_storage import MemoryDocumentStorage

__all__ = [
    "JsonFileStorage",
    "MemoryDocumentStorage",
]
