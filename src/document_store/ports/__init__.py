"""Ports layer - interface definitions following Hexagonal Architecture.

Ports are abstract interfaces (protocols) that define contracts:
- Inbound ports: APIs offered to clients (e.g., RecordLinker, Fillable)
- Outbound ports: Dependencies on external systems (e.g., DocumentStorage)

Adapters implement these ports with concrete functionality.
"""

from document_store.ports.inbound import Fillable, IdentityMap, ListFill, RecordLinker
from document_store.ports.outbound import DocumentStorage

__all__ = [
    # Inbound ports
    "Fillable",
    "IdentityMap",
    "ListFill",
    "RecordLinker",
    # Outbound ports
    "DocumentStorage",
]
