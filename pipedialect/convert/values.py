"""Column value conversion in both directions.

Read path
---------
:meth:`ValueConverter.column_converter` returns a pure function
``(row, index) -> value`` that turns a driver value into its portable Python
form: ``bool``, ``int``, ``float``, ``Decimal`` (at the column scale),
``str``, ``bytes``, ``date``, ``time`` and UTC-aware ``datetime``.  Types
without a portable mapping get no converter; the schema side has already
warned about them.

Write path
----------
:meth:`ValueConverter.format_value` renders a portable value as a SQL
literal for DDL ``DEFAULT`` clauses.
"""
from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Any

from pipedialect.compile.rules import ExpressionRenderer
from pipedialect.config import NumericMapping
from pipedialect.convert.type_bridge import portable_schema
from pipedialect.errors import LargeObjectSizeError, UnsupportedValueTypeError
from pipedialect.schema.definitions import ColumnDefinition
from pipedialect.schema.types import FLOAT_TYPES, INTEGER_TYPES, LogicalType, SchemaType, SqlType

#: Largest BLOB/CLOB length that is materialised in memory.
MAX_LOB_LENGTH = 2**31 - 1

#: ``(row, index) -> portable value``
ColumnConverter = Callable[[Sequence[Any], int], Any]

_EPOCH = date(1970, 1, 1)

# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "t", "true", "y", "yes"}
    if isinstance(value, (bytes, bytearray)):
        return any(value)
    return bool(value)


def _to_int(value: Any) -> int:
    # BIT columns arrive as bytes from some drivers
    if isinstance(value, (bytes, bytearray)):
        return int.from_bytes(value, "big")
    return int(value)


def _to_str(value: Any) -> str:
    return value if isinstance(value, str) else str(value)


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def _to_date(value: Any) -> date:
    if isinstance(value, datetime):
        return _utc(value).date()
    if isinstance(value, str):
        return to_utc_timestamp(value).date() if len(value) > 10 else date.fromisoformat(value)
    return value


def _to_time(value: Any) -> time:
    if isinstance(value, timedelta):
        seconds = value.total_seconds() % 86400
        return (datetime.min + timedelta(seconds=seconds)).time()
    if isinstance(value, datetime):
        return _utc(value).time()
    if isinstance(value, str):
        value = time.fromisoformat(value)
    if value.tzinfo is not None:
        return _utc(datetime.combine(_EPOCH, value)).time()
    return value


def to_utc_timestamp(value: Any) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    elif not isinstance(value, datetime):
        value = datetime.combine(value, time())
    return _utc(value)


def _decimal(scale: int) -> Callable[[Any], Decimal]:
    quantum = Decimal(1).scaleb(-scale)

    def convert(value: Any) -> Decimal:
        number = value if isinstance(value, Decimal) else Decimal(str(value))
        if not number.is_finite():
            return number
        context = Context(prec=max(number.adjusted(), 0) + abs(scale) + 2, rounding=ROUND_HALF_UP)
        return number.quantize(quantum, context=context)

    return convert


def _release(lob: Any) -> None:
    for name in ("free", "close"):
        release = getattr(lob, name, None)
        if callable(release):
            release()
            return


def _large_object(kind: str, text: bool) -> Callable[[Any], Any]:
    """Materialise a LOB value fully, then release the driver handle."""

    def check(data: Any) -> Any:
        if len(data) > MAX_LOB_LENGTH:
            raise LargeObjectSizeError(kind, MAX_LOB_LENGTH)
        if text and isinstance(data, (bytes, bytearray, memoryview)):
            return bytes(data).decode("utf-8")
        if not text and isinstance(data, str):
            return data.encode("utf-8")
        return bytes(data) if isinstance(data, (bytearray, memoryview)) else data

    def convert(value: Any) -> Any:
        if isinstance(value, (str, bytes, bytearray, memoryview)):
            return check(value)
        try:
            size = getattr(value, "size", None)
            if callable(size) and size() > MAX_LOB_LENGTH:
                raise LargeObjectSizeError(kind, MAX_LOB_LENGTH)
            return check(value.read())
        finally:
            _release(value)

    return convert


_LARGE_OBJECTS: dict[SqlType, Callable[[Any], Any]] = {
    SqlType.BLOB: _large_object("BLOB", text=False),
    SqlType.CLOB: _large_object("CLOB", text=True),
    SqlType.NCLOB: _large_object("NCLOB", text=True),
}

_LOGICAL_READERS: dict[str, Callable[[Any], Any]] = {
    LogicalType.DATE.value: _to_date,
    LogicalType.TIME.value: _to_time,
    LogicalType.TIMESTAMP.value: to_utc_timestamp,
}

_PRIMITIVE_READERS: dict[SchemaType, Callable[[Any], Any]] = {
    SchemaType.BOOLEAN: _to_bool,
    SchemaType.INT8: _to_int,
    SchemaType.INT16: _to_int,
    SchemaType.INT32: _to_int,
    SchemaType.INT64: _to_int,
    SchemaType.FLOAT32: float,
    SchemaType.FLOAT64: float,
    SchemaType.STRING: _to_str,
    SchemaType.BYTES: _to_bytes,
}


def _column(read: Callable[[Any], Any]) -> ColumnConverter:
    def convert(row: Sequence[Any], index: int) -> Any:
        value = row[index]
        return None if value is None else read(value)

    return convert


# ---------------------------------------------------------------------------
# Write path
# ---------------------------------------------------------------------------


def hex_literal(value: bytes) -> str:
    """Standard SQL binary literal: ``x'CAFE'``."""
    return f"x'{value.hex().upper()}'"


def bytea_literal(value: bytes) -> str:
    """PostgreSQL ``bytea`` literal: ``'\\xcafe'::bytea``."""
    return f"'\\x{value.hex()}'::bytea"


def numeric_boolean(value: bool) -> str:
    return "1" if value else "0"


def keyword_boolean(value: bool) -> str:
    return "TRUE" if value else "FALSE"


def backslash_escaped_literal(value: object) -> str:
    """Single-quoted string literal for servers that read ``\\`` as an escape."""
    escaped = str(value).replace("\\", "\\\\").replace("'", "''")
    return f"'{escaped}'"


def format_utc_date(value: date) -> str:
    if isinstance(value, datetime):
        value = _utc(value).date()
    return value.isoformat()


def format_utc_time(value: time | datetime) -> str:
    if isinstance(value, datetime):
        value = _utc(value).time()
    elif value.tzinfo is not None:
        value = _utc(datetime.combine(_EPOCH, value)).time()
    return f"{value:%H:%M:%S}.{value.microsecond // 1000:03d}"


def format_utc_timestamp(value: datetime | date) -> str:
    stamp = to_utc_timestamp(value)
    return f"{stamp:%Y-%m-%d %H:%M:%S}.{stamp.microsecond // 1000:03d}"


@dataclass(frozen=True)
class LiteralStyle:
    """A vendor's literal syntax for the types that differ between vendors."""

    binary: Callable[[bytes], str] = hex_literal
    boolean: Callable[[bool], str] = numeric_boolean
    string: Callable[[object], str] = ExpressionRenderer.string_literal


_TEMPORAL_FORMATS: dict[str, Callable[[Any], str]] = {
    LogicalType.DATE.value: format_utc_date,
    LogicalType.TIME.value: format_utc_time,
    LogicalType.TIMESTAMP.value: format_utc_timestamp,
}


@dataclass(frozen=True)
class ValueConverter:
    """Read-path converters and write-path literals for one dialect.

    Attributes:
        numeric_mapping: Policy deciding how ``NUMERIC`` values are read.
        literals: The vendor's literal syntax.
    """

    numeric_mapping: NumericMapping = NumericMapping.NONE
    literals: LiteralStyle = field(default_factory=LiteralStyle)

    def column_converter(self, column: ColumnDefinition) -> ColumnConverter | None:
        """Return the extraction function for ``column``, or ``None`` if unsupported."""
        schema = portable_schema(column, self.numeric_mapping)
        if schema is None:
            return None
        if column.sql_type in _LARGE_OBJECTS:
            return _column(_LARGE_OBJECTS[column.sql_type])
        if schema.logical_name == LogicalType.DECIMAL.value:
            return _column(_decimal(schema.scale or 0))
        if schema.logical_name in _LOGICAL_READERS:
            return _column(_LOGICAL_READERS[schema.logical_name])
        return _column(_PRIMITIVE_READERS[schema.type])

    def format_value(
        self,
        logical_name: str | None,
        parameters: Mapping[str, str],
        schema_type: SchemaType,
        value: Any,
    ) -> str:
        """Render ``value`` as a SQL literal.

        Raises:
            UnsupportedValueTypeError: If the portable type has no literal form.
        """
        if logical_name == LogicalType.DECIMAL.value:
            number = value if isinstance(value, Decimal) else Decimal(str(value))
            return format(number, "f")
        if logical_name in _TEMPORAL_FORMATS:
            return self.literals.string(_TEMPORAL_FORMATS[logical_name](value))
        if schema_type in INTEGER_TYPES or schema_type in FLOAT_TYPES:
            return str(value)
        if schema_type == SchemaType.BOOLEAN:
            return self.literals.boolean(bool(value))
        if schema_type == SchemaType.STRING:
            return self.literals.string(value)
        if schema_type == SchemaType.BYTES:
            return self.literals.binary(bytes(value))
        raise UnsupportedValueTypeError(str(getattr(schema_type, "value", schema_type)))
