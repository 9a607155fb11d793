"""SQLite dialect."""
from __future__ import annotations

from collections.abc import Sequence

from pipedialect.compile.rules import IdentifierRules
from pipedialect.dialects.generic import GenericDialect
from pipedialect.dialects.postgres import on_conflict_upsert
from pipedialect.schema.identifiers import ColumnId, TableId
from pipedialect.schema.portable import SinkRecordField
from pipedialect.schema.types import LogicalType, SchemaType


class SqliteDialect(GenericDialect):
    """SQLite: case-insensitive identifiers and one ``ALTER TABLE`` per added column."""

    name = "Sqlite"
    case_insensitive = True
    IDENTIFIER_RULES = IdentifierRules(".", '"', '"')
    LOGICAL_DDL_TYPES = {
        LogicalType.DECIMAL.value: "DECIMAL(38,{scale})",
        LogicalType.DATE.value: "DATE",
        LogicalType.TIME.value: "TIME",
        LogicalType.TIMESTAMP.value: "DATETIME",
    }
    PRIMITIVE_DDL_TYPES = {
        SchemaType.INT8: "SMALLINT",
        SchemaType.INT16: "SMALLINT",
        SchemaType.INT32: "INTEGER",
        SchemaType.INT64: "BIGINT",
        SchemaType.FLOAT32: "REAL",
        SchemaType.FLOAT64: "DOUBLE",
        SchemaType.BOOLEAN: "BOOLEAN",
        SchemaType.STRING: "TEXT",
        SchemaType.BYTES: "BLOB",
    }

    def build_alter_table_statements(
        self, table: TableId, fields: Sequence[SinkRecordField]
    ) -> list[str]:
        # SQLite's ALTER TABLE adds one column per statement
        return self.statement_builder().alter_table_per_column(table, fields)

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
