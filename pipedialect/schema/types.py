"""Type vocabularies on both sides of the bridge.

``SqlType``
    Driver-side type codes.  The values are the standard SQL/JDBC type codes
    so that drivers and catalogs that report numeric codes can be used as-is.

``SchemaType`` / ``LogicalType``
    Portable, vendor-neutral record types.  A logical type refines a
    primitive schema type with extra semantics (e.g. a decimal is ``bytes``
    carrying a ``scale`` parameter).
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, IntEnum


class SqlType(IntEnum):
    """Driver type codes (``java.sql.Types`` numbering)."""

    BIT = -7
    TINYINT = -6
    SMALLINT = 5
    INTEGER = 4
    BIGINT = -5
    FLOAT = 6
    REAL = 7
    DOUBLE = 8
    NUMERIC = 2
    DECIMAL = 3
    CHAR = 1
    VARCHAR = 12
    LONGVARCHAR = -1
    DATE = 91
    TIME = 92
    TIMESTAMP = 93
    BINARY = -2
    VARBINARY = -3
    LONGVARBINARY = -4
    NULL = 0
    OTHER = 1111
    JAVA_OBJECT = 2000
    DISTINCT = 2001
    STRUCT = 2002
    ARRAY = 2003
    BLOB = 2004
    CLOB = 2005
    REF = 2006
    DATALINK = 70
    BOOLEAN = 16
    ROWID = -8
    NCHAR = -15
    NVARCHAR = -9
    LONGNVARCHAR = -16
    NCLOB = 2011
    SQLXML = 2009

    @classmethod
    def from_code(cls, code: int) -> SqlType:
        """Return the member for ``code``, or ``OTHER`` for unknown codes."""
        try:
            return cls(code)
        except ValueError:
            return cls.OTHER


class SchemaType(str, Enum):
    """Primitive portable schema types."""

    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    BOOLEAN = "boolean"
    STRING = "string"
    BYTES = "bytes"
    ARRAY = "array"
    MAP = "map"
    STRUCT = "struct"


class LogicalType(str, Enum):
    """Logical names layered on top of a primitive :class:`SchemaType`."""

    DECIMAL = "decimal"
    DATE = "date"
    TIME = "time"
    TIMESTAMP = "timestamp"


#: Schema parameter holding a decimal's scale.
DECIMAL_SCALE = "scale"

#: Scale reported for NUMERIC/DECIMAL columns declared without one.
NUMERIC_TYPE_SCALE_UNSET = -127

INTEGER_TYPES: frozenset[SchemaType] = frozenset(
    {SchemaType.INT8, SchemaType.INT16, SchemaType.INT32, SchemaType.INT64}
)
FLOAT_TYPES: frozenset[SchemaType] = frozenset({SchemaType.FLOAT32, SchemaType.FLOAT64})


# ---------------------------------------------------------------------------
# Type-name parsing
# ---------------------------------------------------------------------------

_TYPE_NAMES: dict[str, SqlType] = {
    "BOOLEAN": SqlType.BOOLEAN,
    "BOOL": SqlType.BOOLEAN,
    "BIT": SqlType.BIT,
    "TINYINT": SqlType.TINYINT,
    "SMALLINT": SqlType.SMALLINT,
    "INT2": SqlType.SMALLINT,
    "YEAR": SqlType.SMALLINT,
    "MEDIUMINT": SqlType.INTEGER,
    "INT": SqlType.INTEGER,
    "INTEGER": SqlType.INTEGER,
    "INT4": SqlType.INTEGER,
    "BIGINT": SqlType.BIGINT,
    "INT8": SqlType.BIGINT,
    "REAL": SqlType.REAL,
    "FLOAT4": SqlType.REAL,
    "FLOAT": SqlType.FLOAT,
    "FLOAT8": SqlType.DOUBLE,
    "DOUBLE": SqlType.DOUBLE,
    "DOUBLE PRECISION": SqlType.DOUBLE,
    "NUMERIC": SqlType.NUMERIC,
    "NUMBER": SqlType.NUMERIC,
    "DECIMAL": SqlType.DECIMAL,
    "DEC": SqlType.DECIMAL,
    "CHAR": SqlType.CHAR,
    "CHARACTER": SqlType.CHAR,
    "VARCHAR": SqlType.VARCHAR,
    "VARCHAR2": SqlType.VARCHAR,
    "CHARACTER VARYING": SqlType.VARCHAR,
    "TEXT": SqlType.LONGVARCHAR,
    "TINYTEXT": SqlType.LONGVARCHAR,
    "MEDIUMTEXT": SqlType.LONGVARCHAR,
    "LONGTEXT": SqlType.LONGVARCHAR,
    "LONG VARCHAR": SqlType.LONGVARCHAR,
    "NCHAR": SqlType.NCHAR,
    "NVARCHAR": SqlType.NVARCHAR,
    "NVARCHAR2": SqlType.NVARCHAR,
    "CLOB": SqlType.CLOB,
    "NCLOB": SqlType.NCLOB,
    "BINARY": SqlType.BINARY,
    "VARBINARY": SqlType.VARBINARY,
    "BYTEA": SqlType.LONGVARBINARY,
    "LONG VARBINARY": SqlType.LONGVARBINARY,
    "MEDIUMBLOB": SqlType.LONGVARBINARY,
    "LONGBLOB": SqlType.LONGVARBINARY,
    "BLOB": SqlType.BLOB,
    "DATE": SqlType.DATE,
    "TIME": SqlType.TIME,
    "TIMESTAMP": SqlType.TIMESTAMP,
    "TIMESTAMPTZ": SqlType.TIMESTAMP,
    "DATETIME": SqlType.TIMESTAMP,
    "XML": SqlType.SQLXML,
    "ROWID": SqlType.ROWID,
}

_TYPE_ARGS = re.compile(r"\(\s*(-?\d+)\s*(?:,\s*(-?\d+)\s*)?\)")
_MODIFIERS = frozenset({"UNSIGNED", "SIGNED", "ZEROFILL"})
_ZONE_SUFFIXES = (" WITH TIME ZONE", " WITHOUT TIME ZONE")


@dataclass(frozen=True)
class TypeNameInfo:
    """Result of :func:`parse_type_name`.

    Attributes:
        sql_type: The driver type code the name denotes.
        precision: Precision/length argument, or 0 when absent.
        scale: Scale argument, or 0 when absent.
        signed: ``False`` when the name carries ``UNSIGNED``.
    """

    sql_type: SqlType
    precision: int = 0
    scale: int = 0
    signed: bool = True


def parse_type_name(type_name: str) -> TypeNameInfo:
    """Classify a vendor type name such as ``'DECIMAL(10,2)'`` or ``'INT UNSIGNED'``.

    Unknown names classify as :attr:`SqlType.OTHER`; ``'INTEGER[]'`` style
    names classify as :attr:`SqlType.ARRAY`.
    """
    name = " ".join(type_name.strip().upper().split())
    precision = scale = 0
    match = _TYPE_ARGS.search(name)
    if match:
        precision = int(match.group(1))
        scale = int(match.group(2) or 0)
        name = f"{name[:match.start()]} {name[match.end():]}"
    words = name.split()
    signed = "UNSIGNED" not in words
    name = " ".join(w for w in words if w not in _MODIFIERS)
    if name.endswith("[]"):
        return TypeNameInfo(SqlType.ARRAY, precision, scale, signed)
    for suffix in _ZONE_SUFFIXES:
        if name.endswith(suffix):
            name = name[: -len(suffix)]
    return TypeNameInfo(_TYPE_NAMES.get(name, SqlType.OTHER), precision, scale, signed)
