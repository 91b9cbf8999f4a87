"""Domain services for business logic.

Services implement domain logic that doesn't naturally fit within a
single entity: resolving type tags, converting scalar values, and
turning records into table documents and back.
"""

from document_store.domain.services.record_codec import (
    DiagnosticReason,
    FieldDiagnostic,
    RecordCodec,
)
from document_store.domain.services.type_registry import (
    TypeRegistry,
    get_default_registry,
    storable,
)
from document_store.domain.services.value_codec import UnsupportedTypeError, ValueCodec

__all__ = [
    "DiagnosticReason",
    "FieldDiagnostic",
    "RecordCodec",
    "TypeRegistry",
    "UnsupportedTypeError",
    "ValueCodec",
    "get_default_registry",
    "storable",
]
