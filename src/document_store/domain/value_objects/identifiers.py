"""Core identifiers and type tags for the document store.

These value objects keep record identifiers and type tags apart from plain
integers and strings at type-checking time.
"""

from __future__ import annotations

from typing import NewType


# Type-safe identifiers using NewType for zero-cost runtime abstraction

RecordId = NewType("RecordId", int)
"""Identifier of a record within its table. Issued monotonically, never reused."""

TypeTag = NewType("TypeTag", str)
"""Stable string naming a record type or a scalar type in persisted schemas."""

# Special sentinel values
UNSET_ID = RecordId(0)
"""Identifier of a record that was never saved, and of an unset link."""

ID_FIELD_NAME = "ID"
"""Name of the identifier member every storable record exposes."""

LINK_KEY_SUFFIX = "_ID"
"""Suffix of the document key holding a linked record's identifier."""

# Scalar type tags understood by the value codec
INT_TAG = TypeTag("int")
FLOAT_TAG = TypeTag("float")
BOOL_TAG = TypeTag("bool")
STR_TAG = TypeTag("str")
DATETIME_TAG = TypeTag("datetime")
DATE_TAG = TypeTag("date")
DECIMAL_TAG = TypeTag("decimal")
ANY_TAG = TypeTag("object")
