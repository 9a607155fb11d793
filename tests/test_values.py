"""Unit tests for column value conversion and SQL literal formatting."""
from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

import pytest

from pipedialect import LargeObjectSizeError, NumericMapping, UnsupportedValueTypeError
from pipedialect.convert import values
from pipedialect.convert.values import LiteralStyle, ValueConverter, bytea_literal, keyword_boolean
from pipedialect.schema import SchemaType, SqlType
from tests.helpers import column


class FakeLob:
    """Driver large-object handle that records its release."""

    def __init__(self, data: bytes | str, size: int | None = None) -> None:
        self.data = data
        self.length = len(data) if size is None else size
        self.closed = False

    def size(self) -> int:
        return self.length

    def read(self) -> bytes | str:
        return self.data

    def close(self) -> None:
        self.closed = True


def _convert(sql_type: SqlType, value, mapping=NumericMapping.NONE, **kwargs):
    converter = ValueConverter(mapping).column_converter(column(sql_type, **kwargs))
    assert converter is not None
    return converter(("ignored", value), 1)


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


class TestColumnConverter:
    def test_none_passes_through(self) -> None:
        assert _convert(SqlType.INTEGER, None) is None

    def test_boolean(self) -> None:
        assert _convert(SqlType.BOOLEAN, 1) is True
        assert _convert(SqlType.BOOLEAN, "f") is False

    def test_bit_bytes_are_big_endian(self) -> None:
        assert _convert(SqlType.BIT, b"\x01") == 1
        assert _convert(SqlType.BIGINT, b"\x01\x00") == 256

    def test_float(self) -> None:
        assert _convert(SqlType.REAL, Decimal("1.5")) == 1.5

    def test_decimal_is_quantised_to_column_scale(self) -> None:
        result = _convert(SqlType.DECIMAL, Decimal("12.345"), precision=10, scale=2)
        assert result == Decimal("12.35")
        assert str(result) == "12.35"
        assert str(_convert(SqlType.NUMERIC, 7, precision=5, scale=2)) == "7.00"

    def test_numeric_best_fit_reads_floats(self) -> None:
        result = _convert(
            SqlType.NUMERIC, Decimal("3.25"), NumericMapping.BEST_FIT, precision=10, scale=2
        )
        assert result == 3.25
        assert isinstance(result, float)

    def test_numeric_precision_only_reads_ints(self) -> None:
        result = _convert(SqlType.NUMERIC, Decimal("42"), NumericMapping.PRECISION_ONLY, precision=5)
        assert result == 42
        assert isinstance(result, int)

    def test_string_and_bytes(self) -> None:
        assert _convert(SqlType.VARCHAR, "abc") == "abc"
        assert _convert(SqlType.VARBINARY, bytearray(b"ab")) == b"ab"
        assert _convert(SqlType.VARBINARY, memoryview(b"ab")) == b"ab"

    def test_date(self) -> None:
        assert _convert(SqlType.DATE, date(2024, 3, 1)) == date(2024, 3, 1)
        assert _convert(SqlType.DATE, "2024-03-01") == date(2024, 3, 1)

    def test_time_from_timedelta(self) -> None:
        assert _convert(SqlType.TIME, timedelta(hours=1, minutes=2, seconds=3)) == time(1, 2, 3)

    def test_time_with_zone_is_utc(self) -> None:
        plus_two = timezone(timedelta(hours=2))
        assert _convert(SqlType.TIME, time(12, 30, tzinfo=plus_two)) == time(10, 30)

    def test_naive_timestamp_is_utc(self) -> None:
        result = _convert(SqlType.TIMESTAMP, datetime(2024, 3, 1, 12, 0))
        assert result == datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
        assert result.tzinfo is timezone.utc

    def test_aware_timestamp_is_converted(self) -> None:
        plus_two = timezone(timedelta(hours=2))
        result = _convert(SqlType.TIMESTAMP, datetime(2024, 3, 1, 12, 0, tzinfo=plus_two))
        assert result == datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)
        assert result.hour == 10

    def test_timestamp_string(self) -> None:
        result = _convert(SqlType.TIMESTAMP, "2024-03-01 12:00:00")
        assert result == datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

    def test_unsupported_type_has_no_converter(self) -> None:
        assert ValueConverter().column_converter(column(SqlType.ARRAY)) is None


class TestLargeObjects:
    def test_blob_is_read_and_released(self) -> None:
        lob = FakeLob(b"payload")
        assert _convert(SqlType.BLOB, lob) == b"payload"
        assert lob.closed

    def test_clob_is_decoded(self) -> None:
        lob = FakeLob(b"caf\xc3\xa9")
        assert _convert(SqlType.CLOB, lob) == "café"
        assert lob.closed

    def test_plain_values_are_accepted(self) -> None:
        assert _convert(SqlType.CLOB, "text") == "text"
        assert _convert(SqlType.BLOB, "text") == b"text"

    def test_oversized_lob_raises_and_is_released(self) -> None:
        lob = FakeLob(b"x", size=values.MAX_LOB_LENGTH + 1)
        with pytest.raises(LargeObjectSizeError) as info:
            _convert(SqlType.BLOB, lob)
        assert isinstance(info.value, OSError)
        assert "BLOBs longer than" in str(info.value)
        assert lob.closed

    def test_lob_released_when_read_fails(self) -> None:
        class BrokenLob(FakeLob):
            def read(self) -> bytes:
                raise RuntimeError("driver went away")

        lob = BrokenLob(b"")
        with pytest.raises(RuntimeError):
            _convert(SqlType.NCLOB, lob)
        assert lob.closed


# ---------------------------------------------------------------------------
# Write path
# ---------------------------------------------------------------------------


class TestFormatValue:
    @pytest.fixture()
    def converter(self) -> ValueConverter:
        return ValueConverter()

    def test_numbers_are_unquoted(self, converter: ValueConverter) -> None:
        assert converter.format_value(None, {}, SchemaType.INT32, 42) == "42"
        assert converter.format_value(None, {}, SchemaType.FLOAT64, 1.5) == "1.5"

    def test_decimal(self, converter: ValueConverter) -> None:
        params = {"scale": "2"}
        assert converter.format_value("decimal", params, SchemaType.BYTES, Decimal("12.50")) == "12.50"
        assert converter.format_value("decimal", params, SchemaType.BYTES, 12.5) == "12.5"

    def test_boolean_is_numeric(self, converter: ValueConverter) -> None:
        assert converter.format_value(None, {}, SchemaType.BOOLEAN, True) == "1"
        assert converter.format_value(None, {}, SchemaType.BOOLEAN, False) == "0"

    def test_string_quotes_are_doubled(self, converter: ValueConverter) -> None:
        assert converter.format_value(None, {}, SchemaType.STRING, "O'Brien") == "'O''Brien'"

    def test_bytes_hex_literal(self, converter: ValueConverter) -> None:
        assert converter.format_value(None, {}, SchemaType.BYTES, b"\xca\xfe") == "x'CAFE'"

    def test_temporal_literals_are_utc(self, converter: ValueConverter) -> None:
        plus_two = timezone(timedelta(hours=2))
        assert converter.format_value("date", {}, SchemaType.INT32, date(2024, 3, 1)) == "'2024-03-01'"
        assert (
            converter.format_value("time", {}, SchemaType.INT32, time(13, 4, 5, 678000))
            == "'13:04:05.678'"
        )
        stamp = datetime(2024, 3, 1, 12, 0, 0, 123456, tzinfo=plus_two)
        assert (
            converter.format_value("timestamp", {}, SchemaType.INT64, stamp)
            == "'2024-03-01 10:00:00.123'"
        )

    def test_unsupported_type_raises(self, converter: ValueConverter) -> None:
        with pytest.raises(UnsupportedValueTypeError, match="array"):
            converter.format_value(None, {}, SchemaType.ARRAY, [1, 2])

    def test_vendor_literal_style(self) -> None:
        converter = ValueConverter(literals=LiteralStyle(binary=bytea_literal, boolean=keyword_boolean))
        assert converter.format_value(None, {}, SchemaType.BYTES, b"\xca\xfe") == "'\\xcafe'::bytea"
        assert converter.format_value(None, {}, SchemaType.BOOLEAN, True) == "TRUE"
