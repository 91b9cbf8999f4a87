"""Adapters layer - concrete implementations of port interfaces.

Adapters provide the actual implementations:
- Outbound adapters: Implement external dependencies (file system, memory)
"""

from document_store.adapters.outbound import JsonFileStorage, MemoryDocumentStorage

__all__ = [
    # Outbound adapters
    "JsonFileStorage",
    "MemoryDocumentStorage",
]
