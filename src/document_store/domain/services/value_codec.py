"""Scalar value codec.

Table files store every scalar as its string form, whatever its type:

    ======== ====================== ==========================
    tag      written as             read back from
    ======== ====================== ==========================
    int      ``"42"``               ``int(text)``
    float    ``"0.5"`` (repr)       ``float(text)``
    bool     ``"True"``/``"False"`` true/false/1/0, any case
    str      unchanged              unchanged
    datetime ISO-8601               ``datetime.fromisoformat``
    date     ISO-8601               ``date.fromisoformat``
    decimal  ``"1.10"``             ``Decimal(text)``
    object   ``str(value)``         the string itself
    ======== ====================== ==========================

``None`` is written as JSON ``null``. Values of a tag the codec does not know
are written with ``str()`` and cannot be read back.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Callable

from document_store.domain.errors import ValueEncodingError
from document_store.domain.value_objects import (
    ANY_TAG,
    BOOL_TAG,
    DATE_TAG,
    DATETIME_TAG,
    DECIMAL_TAG,
    FLOAT_TAG,
    INT_TAG,
    STR_TAG,
    TypeTag,
)


class UnsupportedTypeError(ValueError):
    """The codec has no reader for a type tag."""


_TRUE_TEXTS = frozenset({"true", "1"})
_FALSE_TEXTS = frozenset({"false", "0"})


def _parse_bool(text: str) -> bool:
    lowered = text.strip().lower()
    if lowered in _TRUE_TEXTS:
        return True
    if lowered in _FALSE_TEXTS:
        return False
    raise ValueError(f"Not a boolean: {text!r}")


def _parse_decimal(text: str) -> Decimal:
    try:
        return Decimal(text)
    except InvalidOperation as e:
        raise ValueError(f"Not a decimal: {text!r}") from e


@dataclass(frozen=True, slots=True)
class ScalarCodec:
    """Writer and reader pair for one scalar tag."""

    encode: Callable[[Any], str]
    decode: Callable[[str], Any]


class ValueCodec:
    """Converts scalar values to and from their stored string form."""

    def __init__(self) -> None:
        self._codecs: dict[TypeTag, ScalarCodec] = {
            INT_TAG: ScalarCodec(lambda v: str(int(v)), int),
            FLOAT_TAG: ScalarCodec(lambda v: repr(float(v)), float),
            BOOL_TAG: ScalarCodec(lambda v: "True" if v else "False", _parse_bool),
            STR_TAG: ScalarCodec(str, str),
            DATETIME_TAG: ScalarCodec(
                lambda v: v.isoformat(), datetime.datetime.fromisoformat
            ),
            DATE_TAG: ScalarCodec(lambda v: v.isoformat(), datetime.date.fromisoformat),
            DECIMAL_TAG: ScalarCodec(str, _parse_decimal),
            ANY_TAG: ScalarCodec(str, str),
        }

    def register(
        self,
        tag: str,
        encode: Callable[[Any], str],
        decode: Callable[[str], Any],
    ) -> None:
        """Add or replace the codec of a scalar tag."""
        self._codecs[TypeTag(tag)] = ScalarCodec(encode, decode)

    def supports(self, tag: str) -> bool:
        """Check whether values of ``tag`` can be read back."""
        return TypeTag(tag) in self._codecs

    def encode(self, value: Any, tag: str) -> str | None:
        """Write a value as its stored string form.

        Raises:
            ValueEncodingError: If the value does not convert to ``tag``.
        """
        if value is None:
            return None
        codec = self._codecs.get(TypeTag(tag))
        if codec is None:
            return str(value)
        try:
            return codec.encode(value)
        except (AttributeError, TypeError, ValueError, ArithmeticError) as e:
            raise ValueEncodingError(
                f"Cannot write {type(value).__name__} value {value!r} as {tag}"
            ) from e

    def decode(self, raw: Any, tag: str) -> Any:
        """Read a value back from its stored form.

        Raises:
            UnsupportedTypeError: If the tag has no reader.
            ValueError: If the stored text does not parse as ``tag``.
        """
        if raw is None:
            return None
        codec = self._codecs.get(TypeTag(tag))
        if codec is None:
            raise UnsupportedTypeError(f"No reader for values of type {tag!r}")
        # older files may hold native JSON numbers or booleans
        text = raw if isinstance(raw, str) else str(raw)
        return codec.decode(text)
