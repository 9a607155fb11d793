"""PostgreSQL dialect."""
from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from pipedialect.compile.rules import IdentifierRules
from pipedialect.convert.values import LiteralStyle, bytea_literal, keyword_boolean
from pipedialect.dialects.generic import GenericDialect, upsert_update_columns
from pipedialect.schema.identifiers import ColumnId, TableId
from pipedialect.schema.types import LogicalType, SchemaType, SqlType, TypeNameInfo

# Built-in type OIDs reported as ``type_code`` by psycopg and psycopg2.
_TYPE_OIDS: dict[int, SqlType] = {
    16: SqlType.BOOLEAN,
    17: SqlType.LONGVARBINARY,
    18: SqlType.CHAR,
    20: SqlType.BIGINT,
    21: SqlType.SMALLINT,
    23: SqlType.INTEGER,
    25: SqlType.LONGVARCHAR,
    142: SqlType.SQLXML,
    700: SqlType.REAL,
    701: SqlType.DOUBLE,
    1042: SqlType.CHAR,
    1043: SqlType.VARCHAR,
    1082: SqlType.DATE,
    1083: SqlType.TIME,
    1114: SqlType.TIMESTAMP,
    1184: SqlType.TIMESTAMP,
    1266: SqlType.TIME,
    1700: SqlType.NUMERIC,
}


class PostgresDialect(GenericDialect):
    """PostgreSQL: ``%s`` placeholders, ``bytea`` literals and ``ON CONFLICT`` upserts."""

    name = "PostgreSql"
    placeholder = "%s"
    IDENTIFIER_RULES = IdentifierRules(".", '"', '"')
    LOGICAL_DDL_TYPES = {
        LogicalType.DECIMAL.value: "DECIMAL(1000,{scale})",
        LogicalType.DATE.value: "DATE",
        LogicalType.TIME.value: "TIME",
        LogicalType.TIMESTAMP.value: "TIMESTAMP",
    }
    PRIMITIVE_DDL_TYPES = {
        SchemaType.INT8: "SMALLINT",
        SchemaType.INT16: "SMALLINT",
        SchemaType.INT32: "INT",
        SchemaType.INT64: "BIGINT",
        SchemaType.FLOAT32: "REAL",
        SchemaType.FLOAT64: "DOUBLE PRECISION",
        SchemaType.BOOLEAN: "BOOLEAN",
        SchemaType.STRING: "TEXT",
        SchemaType.BYTES: "BYTEA",
    }
    LITERALS = LiteralStyle(binary=bytea_literal, boolean=keyword_boolean)

    def driver_type_for(self, type_code: Any) -> TypeNameInfo:
        if isinstance(type_code, int) and type_code in _TYPE_OIDS:
            return TypeNameInfo(_TYPE_OIDS[type_code])
        return super().driver_type_for(type_code)

    def build_upsert_statement(
        self,
        table: TableId,
        key_columns: Sequence[ColumnId],
        non_key_columns: Sequence[ColumnId],
    ) -> str:
        """``INSERT ... ON CONFLICT (keys) DO UPDATE SET c=EXCLUDED.c`` upsert.

        Raises:
            ValueError: If there are no key columns to use as the conflict target.
        """
        if not key_columns:
            raise ValueError(f"Cannot build an upsert for {table} without key columns")
        return on_conflict_upsert(self, table, key_columns, non_key_columns)


def on_conflict_upsert(
    dialect: GenericDialect,
    table: TableId,
    key_columns: Sequence[ColumnId],
    non_key_columns: Sequence[ColumnId],
) -> str:
    """``INSERT ... ON CONFLICT`` grammar shared by PostgreSQL and SQLite."""
    render = dialect.expression_renderer()
    update_columns = upsert_update_columns(key_columns, non_key_columns)
    updates = ",".join(f"{render.column(c)}=EXCLUDED.{render.column(c)}" for c in update_columns)
    return (
        f"{dialect.build_insert_statement(table, key_columns, non_key_columns)}"
        f" ON CONFLICT ({render.columns(key_columns)}) DO UPDATE SET {updates}"
    )
