"""Bidirectional type mapping between driver types and the portable schema.

Read path
---------
:func:`field_schema_for` maps a :class:`ColumnDefinition` to a portable
:class:`FieldSchema`, or ``None`` when the driver type has no portable
equivalent.  The tables below are both the implementation and the record of
what is supported.

Write path
----------
:meth:`TypeBridge.sql_type` maps a portable field to a DDL column type.  Each
dialect layers its own logical-name and primitive tables over the base tables;
a pair found in neither raises :class:`UnmappedTypeError`.
"""
from __future__ import annotations

from collections import ChainMap
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

import structlog

from pipedialect.config import NumericMapping
from pipedialect.errors import UnmappedTypeError
from pipedialect.schema.definitions import ColumnDefinition
from pipedialect.schema.portable import (
    FieldSchema,
    date_schema,
    decimal_schema,
    time_schema,
    timestamp_schema,
)
from pipedialect.schema.types import (
    DECIMAL_SCALE,
    NUMERIC_TYPE_SCALE_UNSET,
    LogicalType,
    SchemaType,
    SqlType,
)

log = structlog.get_logger(__name__)

NUMERIC_TYPE_SCALE_LOW = -84
NUMERIC_TYPE_SCALE_HIGH = 127

#: Numeric columns at or above this precision never fit a primitive type.
MAX_PRIMITIVE_PRECISION = 19

# ---------------------------------------------------------------------------
# Read path tables
# ---------------------------------------------------------------------------

_FIXED_TYPES: dict[SqlType, SchemaType] = {
    SqlType.BOOLEAN: SchemaType.BOOLEAN,
    SqlType.BIT: SchemaType.INT8,
    SqlType.BIGINT: SchemaType.INT64,
    # REAL is single precision; FLOAT is, confusingly, double precision.
    SqlType.REAL: SchemaType.FLOAT32,
    SqlType.FLOAT: SchemaType.FLOAT64,
    SqlType.DOUBLE: SchemaType.FLOAT64,
    SqlType.CHAR: SchemaType.STRING,
    SqlType.VARCHAR: SchemaType.STRING,
    SqlType.LONGVARCHAR: SchemaType.STRING,
    SqlType.NCHAR: SchemaType.STRING,
    SqlType.NVARCHAR: SchemaType.STRING,
    SqlType.LONGNVARCHAR: SchemaType.STRING,
    SqlType.CLOB: SchemaType.STRING,
    SqlType.NCLOB: SchemaType.STRING,
    SqlType.DATALINK: SchemaType.STRING,
    SqlType.SQLXML: SchemaType.STRING,
    SqlType.BINARY: SchemaType.BYTES,
    SqlType.VARBINARY: SchemaType.BYTES,
    SqlType.LONGVARBINARY: SchemaType.BYTES,
    SqlType.BLOB: SchemaType.BYTES,
}

# (signed, unsigned): unsigned values widen to the next signed kind.
_INTEGER_TYPES: dict[SqlType, tuple[SchemaType, SchemaType]] = {
    SqlType.TINYINT: (SchemaType.INT8, SchemaType.INT16),
    SqlType.SMALLINT: (SchemaType.INT16, SchemaType.INT32),
    SqlType.INTEGER: (SchemaType.INT32, SchemaType.INT64),
}

_TEMPORAL_TYPES: dict[SqlType, Callable[[bool], FieldSchema]] = {
    SqlType.DATE: date_schema,
    SqlType.TIME: time_schema,
    SqlType.TIMESTAMP: timestamp_schema,
}

UNSUPPORTED_TYPES: frozenset[SqlType] = frozenset(
    {
        SqlType.NULL,
        SqlType.ARRAY,
        SqlType.JAVA_OBJECT,
        SqlType.OTHER,
        SqlType.DISTINCT,
        SqlType.STRUCT,
        SqlType.REF,
        SqlType.ROWID,
    }
)


def decimal_scale(scale: int) -> int:
    """Resolve the driver's "unset" scale sentinel to the highest scale."""
    return NUMERIC_TYPE_SCALE_HIGH if scale == NUMERIC_TYPE_SCALE_UNSET else scale


def integer_type_for_precision(precision: int) -> SchemaType:
    """Smallest signed integer kind holding ``precision`` decimal digits."""
    if precision > 9:
        return SchemaType.INT64
    if precision > 4:
        return SchemaType.INT32
    if precision > 2:
        return SchemaType.INT16
    return SchemaType.INT8


def classify_numeric(precision: int, scale: int, mapping: NumericMapping) -> SchemaType | None:
    """Apply the numeric-mapping policy to a ``NUMERIC`` column.

    Returns:
        A primitive integer/float kind, or ``None`` when the column should
        map to the decimal logical type.
    """
    if mapping is NumericMapping.PRECISION_ONLY:
        if scale == 0 and precision < MAX_PRIMITIVE_PRECISION:
            return integer_type_for_precision(precision)
    elif mapping is NumericMapping.BEST_FIT:
        if precision < MAX_PRIMITIVE_PRECISION:
            if NUMERIC_TYPE_SCALE_LOW <= scale < 1:
                return integer_type_for_precision(precision)
            if scale > 0:
                return SchemaType.FLOAT64
    return None


def portable_schema(
    column: ColumnDefinition,
    mapping: NumericMapping = NumericMapping.NONE,
) -> FieldSchema | None:
    """Classify a driver column without logging.

    Returns:
        The field schema, or ``None`` when the driver type is unsupported.
    """
    sql_type = column.sql_type
    optional = column.is_optional

    if sql_type in _FIXED_TYPES:
        return FieldSchema.of(_FIXED_TYPES[sql_type], optional)

    if sql_type in _INTEGER_TYPES:
        signed_type, widened_type = _INTEGER_TYPES[sql_type]
        return FieldSchema.of(signed_type if column.signed else widened_type, optional)

    if sql_type in _TEMPORAL_TYPES:
        return _TEMPORAL_TYPES[sql_type](optional)

    if sql_type is SqlType.NUMERIC:
        primitive = classify_numeric(column.precision, column.scale, mapping)
        if primitive is not None:
            return FieldSchema.of(primitive, optional)

    if sql_type in (SqlType.NUMERIC, SqlType.DECIMAL):
        return decimal_schema(decimal_scale(column.scale), optional)

    return None


def field_schema_for(
    column: ColumnDefinition,
    mapping: NumericMapping = NumericMapping.NONE,
) -> FieldSchema | None:
    """Map a driver column to a portable field schema.

    Args:
        column: The column definition.
        mapping: Numeric-mapping policy for ``NUMERIC`` columns.

    Returns:
        The field schema, or ``None`` when the driver type is unsupported
        (a warning is logged and the column should be dropped).
    """
    if column.sql_type in (SqlType.NUMERIC, SqlType.DECIMAL):
        log.debug(
            "numeric_column",
            sql_type=column.sql_type.name,
            precision=column.precision,
            scale=column.scale,
            mapping=mapping.value,
        )
    schema = portable_schema(column, mapping)
    if schema is None:
        log.warning(
            "unsupported_sql_type",
            sql_type=column.sql_type.name,
            type_name=column.type_name,
            column=str(column.id),
        )
    return schema


# ---------------------------------------------------------------------------
# Write path tables
# ---------------------------------------------------------------------------

BASE_LOGICAL_DDL_TYPES: dict[str, str] = {
    LogicalType.DECIMAL.value: "DECIMAL(38,{scale})",
    LogicalType.DATE.value: "DATE",
    LogicalType.TIME.value: "TIME",
    LogicalType.TIMESTAMP.value: "TIMESTAMP",
}

BASE_PRIMITIVE_DDL_TYPES: dict[SchemaType, str] = {
    SchemaType.INT8: "SMALLINT",
    SchemaType.INT16: "SMALLINT",
    SchemaType.INT32: "INTEGER",
    SchemaType.INT64: "BIGINT",
    SchemaType.FLOAT32: "REAL",
    SchemaType.FLOAT64: "DOUBLE PRECISION",
    SchemaType.BOOLEAN: "SMALLINT",
    SchemaType.STRING: "VARCHAR(4000)",
    SchemaType.BYTES: "BLOB",
}


@dataclass(frozen=True)
class TypeBridge:
    """A dialect's view of both mapping directions.

    Build one with :meth:`layered` so vendor tables override the base tables.

    Attributes:
        dialect: Dialect name, used in error messages.
        numeric_mapping: Policy for ``NUMERIC`` columns.
        logical_ddl_types: Logical name -> DDL template (``{scale}`` is substituted).
        primitive_ddl_types: Primitive schema type -> DDL type.
    """

    dialect: str
    numeric_mapping: NumericMapping = NumericMapping.NONE
    logical_ddl_types: Mapping[str, str] = field(default_factory=dict)
    primitive_ddl_types: Mapping[SchemaType, str] = field(default_factory=dict)

    @classmethod
    def layered(
        cls,
        dialect: str,
        numeric_mapping: NumericMapping,
        logical_overrides: Mapping[str, str],
        primitive_overrides: Mapping[SchemaType, str],
    ) -> TypeBridge:
        return cls(
            dialect=dialect,
            numeric_mapping=numeric_mapping,
            logical_ddl_types=ChainMap(dict(logical_overrides), BASE_LOGICAL_DDL_TYPES),
            primitive_ddl_types=ChainMap(dict(primitive_overrides), BASE_PRIMITIVE_DDL_TYPES),
        )

    def field_schema(self, column: ColumnDefinition) -> FieldSchema | None:
        return field_schema_for(column, self.numeric_mapping)

    def sql_type(
        self,
        logical_name: str | None,
        parameters: Mapping[str, str],
        schema_type: SchemaType,
    ) -> str:
        """Return the DDL column type for a portable field.

        Raises:
            UnmappedTypeError: If neither table maps the field.
        """
        if logical_name is not None and logical_name in self.logical_ddl_types:
            scale = decimal_scale(int(parameters.get(DECIMAL_SCALE, 0)))
            return self.logical_ddl_types[logical_name].format(scale=scale)
        if schema_type in self.primitive_ddl_types:
            return self.primitive_ddl_types[schema_type]
        raise UnmappedTypeError(logical_name, schema_type.value, self.dialect)
