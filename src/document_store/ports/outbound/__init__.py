"""Outbound ports - interfaces for external dependencies.

Outbound ports define contracts for external systems that the
document store depends on, such as the file system.
"""

from document_store.ports.outbound.document_storage import DocumentStorage

__all__ = [
    "DocumentStorage",
]
