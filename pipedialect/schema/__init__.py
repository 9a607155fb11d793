"""pipedialect schema models: identifiers, definitions and the portable schema."""
from pipedialect.schema.definitions import (
    ColumnDefinition,
    Mutability,
    Nullability,
    TableDefinition,
)
from pipedialect.schema.identifiers import ColumnId, TableId
from pipedialect.schema.portable import (
    FieldSchema,
    RecordSchema,
    SchemaBuilder,
    SinkRecordField,
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
    TypeNameInfo,
    parse_type_name,
)

__all__ = [
    "ColumnDefinition",
    "Mutability",
    "Nullability",
    "TableDefinition",
    "ColumnId",
    "TableId",
    "FieldSchema",
    "RecordSchema",
    "SchemaBuilder",
    "SinkRecordField",
    "date_schema",
    "decimal_schema",
    "time_schema",
    "timestamp_schema",
    "DECIMAL_SCALE",
    "NUMERIC_TYPE_SCALE_UNSET",
    "LogicalType",
    "SchemaType",
    "SqlType",
    "TypeNameInfo",
    "parse_type_name",
]
