"""Unit tests for the scalar value codec."""

from __future__ import annotations

import datetime
from decimal import Decimal

import pytest

from document_store.domain.errors import ValueEncodingError
from document_store.domain.services import UnsupportedTypeError, ValueCodec


@pytest.fixture
def codec() -> ValueCodec:
    return ValueCodec()


@pytest.mark.unit
class TestValueCodecEncode:
    """Tests for writing scalars as strings."""

    def test_numbers(self, codec: ValueCodec) -> None:
        """Numbers are written as text."""
        assert codec.encode(42, "int") == "42"
        assert codec.encode(0.5, "float") == "0.5"
        assert codec.encode(Decimal("1.10"), "decimal") == "1.10"

    def test_bool(self, codec: ValueCodec) -> None:
        """Booleans are written capitalized."""
        assert codec.encode(True, "bool") == "True"
        assert codec.encode(False, "bool") == "False"

    def test_dates(self, codec: ValueCodec) -> None:
        """Dates and datetimes use ISO-8601."""
        assert codec.encode(datetime.date(2024, 3, 1), "date") == "2024-03-01"
        assert (
            codec.encode(datetime.datetime(2024, 3, 1, 12, 30), "datetime")
            == "2024-03-01T12:30:00"
        )

    def test_none(self, codec: ValueCodec) -> None:
        """None stays None whatever the tag."""
        assert codec.encode(None, "int") is None

    def test_unknown_tag_uses_str(self, codec: ValueCodec) -> None:
        """Values of unknown tags are written with str()."""
        assert codec.encode((1, 2), "tuple") == "(1, 2)"

    @pytest.mark.parametrize(
        "value,tag",
        [("yesterday", "datetime"), ("high", "int"), ("many", "float"), (3, "date")],
    )
    def test_value_of_wrong_type(self, codec: ValueCodec, value: object, tag: str) -> None:
        """Values that do not convert to their tag raise a store error."""
        with pytest.raises(ValueEncodingError, match=tag):
            codec.encode(value, tag)


@pytest.mark.unit
class TestValueCodecDecode:
    """Tests for reading scalars back."""

    def test_numbers(self, codec: ValueCodec) -> None:
        """Numbers parse back to their types."""
        assert codec.decode("42", "int") == 42
        assert codec.decode("0.5", "float") == 0.5
        assert codec.decode("1.10", "decimal") == Decimal("1.10")

    @pytest.mark.parametrize("text", ["True", "true", "1", " TRUE "])
    def test_bool_true(self, codec: ValueCodec, text: str) -> None:
        """Several spellings of true are accepted."""
        assert codec.decode(text, "bool") is True

    @pytest.mark.parametrize("text", ["False", "false", "0"])
    def test_bool_false(self, codec: ValueCodec, text: str) -> None:
        """Several spellings of false are accepted."""
        assert codec.decode(text, "bool") is False

    def test_dates(self, codec: ValueCodec) -> None:
        """ISO text parses back to dates."""
        assert codec.decode("2024-03-01", "date") == datetime.date(2024, 3, 1)
        assert codec.decode("2024-03-01T12:30:00", "datetime") == datetime.datetime(
            2024, 3, 1, 12, 30
        )

    def test_native_json_values(self, codec: ValueCodec) -> None:
        """Native JSON numbers and booleans are accepted too."""
        assert codec.decode(42, "int") == 42
        assert codec.decode(True, "bool") is True

    def test_strings_unchanged(self, codec: ValueCodec) -> None:
        """Strings and objects are read as stored."""
        assert codec.decode("hello", "str") == "hello"
        assert codec.decode("anything", "object") == "anything"

    @pytest.mark.parametrize(
        "raw,tag",
        [("abc", "int"), ("x", "float"), ("maybe", "bool"), ("1,5", "decimal"), ("soon", "date")],
    )
    def test_unparsable(self, codec: ValueCodec, raw: str, tag: str) -> None:
        """Bad text raises ValueError."""
        with pytest.raises(ValueError):
            codec.decode(raw, tag)

    def test_unsupported_tag(self, codec: ValueCodec) -> None:
        """Unknown tags cannot be read back."""
        with pytest.raises(UnsupportedTypeError):
            codec.decode("(1, 2)", "tuple")


@pytest.mark.unit
class TestValueCodecRegister:
    """Tests for custom scalar codecs."""

    def test_register(self, codec: ValueCodec) -> None:
        """Registered codecs are used in both directions."""
        codec.register(
            "point",
            lambda p: f"{p[0]};{p[1]}",
            lambda text: tuple(int(part) for part in text.split(";")),
        )

        assert codec.supports("point")
        assert codec.encode((1, 2), "point") == "1;2"
        assert codec.decode("1;2", "point") == (1, 2)

    def test_supports(self, codec: ValueCodec) -> None:
        """Built-in tags are supported, others are not."""
        assert codec.supports("int")
        assert not codec.supports("tuple")
