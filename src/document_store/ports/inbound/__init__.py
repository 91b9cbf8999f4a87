"""Inbound ports - API contracts for the document store.

Inbound ports define the interfaces that tables and the database
facade offer to each other and to callers.
"""

from document_store.ports.inbound.fillable import Fillable, ListFill
from document_store.ports.inbound.record_linker import IdentityMap, RecordLinker

__all__ = [
    # Fill queries
    "Fillable",
    "ListFill",
    # Links
    "IdentityMap",
    "RecordLinker",
]
