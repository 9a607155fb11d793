"""pipedialect conversion layer: type mapping and value conversion."""
from pipedialect.convert.type_bridge import (
    BASE_LOGICAL_DDL_TYPES,
    BASE_PRIMITIVE_DDL_TYPES,
    TypeBridge,
    classify_numeric,
    field_schema_for,
    portable_schema,
)
from pipedialect.convert.values import (
    LiteralStyle,
    ValueConverter,
    backslash_escaped_literal,
    bytea_literal,
    hex_literal,
    keyword_boolean,
    numeric_boolean,
)

__all__ = [
    "BASE_LOGICAL_DDL_TYPES",
    "BASE_PRIMITIVE_DDL_TYPES",
    "TypeBridge",
    "classify_numeric",
    "field_schema_for",
    "portable_schema",
    "LiteralStyle",
    "ValueConverter",
    "backslash_escaped_literal",
    "bytea_literal",
    "hex_literal",
    "keyword_boolean",
    "numeric_boolean",
]
