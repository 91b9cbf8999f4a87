"""Value objects for the document store domain.

Value objects are immutable types that represent domain concepts.
They have no identity - two value objects with the same attributes are equal.

Exports:
    Identifiers:
        - RecordId: Type-safe record identifier
        - TypeTag: Stable name of a persisted type
        - UNSET_ID, ID_FIELD_NAME, LINK_KEY_SUFFIX: Sentinels and naming rules
        - INT_TAG, FLOAT_TAG, ...: Scalar type tags

    Table fields:
        - TableField: Persisted attribute descriptor (type, name, kind)
        - FieldKind: Plain attribute or accessor property
"""

from document_store.domain.value_objects.identifiers import (
    ANY_TAG,
    BOOL_TAG,
    DATE_TAG,
    DATETIME_TAG,
    DECIMAL_TAG,
    FLOAT_TAG,
    ID_FIELD_NAME,
    INT_TAG,
    LINK_KEY_SUFFIX,
    STR_TAG,
    UNSET_ID,
    RecordId,
    TypeTag,
)
from document_store.domain.value_objects.table_field import FieldKind, TableField

__all__ = [
    # Identifiers
    "RecordId",
    "TypeTag",
    "UNSET_ID",
    "ID_FIELD_NAME",
    "LINK_KEY_SUFFIX",
    "ANY_TAG",
    "BOOL_TAG",
    "DATE_TAG",
    "DATETIME_TAG",
    "DECIMAL_TAG",
    "FLOAT_TAG",
    "INT_TAG",
    "STR_TAG",
    # Table fields
    "FieldKind",
    "TableField",
]
