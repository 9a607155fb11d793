"""Apache Derby / DB2 dialect."""
from __future__ import annotations

from collections.abc import Sequence

from pipedialect.compile.rules import IdentifierRules
from pipedialect.dialects.generic import GenericDialect, upsert_update_columns
from pipedialect.schema.identifiers import ColumnId, TableId
from pipedialect.schema.types import LogicalType, SchemaType


class DerbyDialect(GenericDialect):
    """Derby: ``MERGE`` upserts, ``FETCH FIRST`` probes and 31-digit decimals."""

    name = "Derby"
    IDENTIFIER_RULES = IdentifierRules(".", '"', '"')
    LOGICAL_DDL_TYPES = {
        # Maximum precision supported by Derby is 31
        LogicalType.DECIMAL.value: "DECIMAL(31,{scale})",
        LogicalType.DATE.value: "DATE",
        LogicalType.TIME.value: "TIME",
        LogicalType.TIMESTAMP.value: "TIMESTAMP",
    }
    PRIMITIVE_DDL_TYPES = {
        SchemaType.INT8: "SMALLINT",
        SchemaType.INT16: "SMALLINT",
        SchemaType.INT32: "INTEGER",
        SchemaType.INT64: "BIGINT",
        SchemaType.FLOAT32: "FLOAT",
        SchemaType.FLOAT64: "DOUBLE",
        SchemaType.BOOLEAN: "SMALLINT",
        SchemaType.STRING: "VARCHAR(32672)",
        SchemaType.BYTES: "BLOB(64000)",
    }

    def current_timestamp_query(self) -> str:
        return "VALUES(CURRENT_TIMESTAMP)"

    def probe_query(self, table_id: TableId) -> str:
        return (
            f"SELECT * FROM {self.expression_renderer().table(table_id)}"
            " FETCH FIRST 1 ROWS ONLY"
        )

    def build_upsert_statement(
        self,
        table: TableId,
        key_columns: Sequence[ColumnId],
        non_key_columns: Sequence[ColumnId],
    ) -> str:
        """``MERGE INTO ... USING (VALUES(...)) AS DAT(...)`` upsert.

        Raises:
            ValueError: If there are no key columns to match on.
        """
        if not key_columns:
            raise ValueError(f"Cannot build a MERGE for {table} without key columns")
        render = self.expression_renderer()
        target = render.table(table)
        columns = [*key_columns, *non_key_columns]

        def matched(cols: Sequence[ColumnId], delimiter: str) -> str:
            return delimiter.join(
                f"{render.qualified_column(target, c)}=DAT.{render.column(c)}" for c in cols
            )

        update_columns = upsert_update_columns(key_columns, non_key_columns)
        return (
            f"MERGE INTO {target}"
            f" USING (VALUES({render.placeholders(len(columns), self.placeholder, ', ')}))"
            f" AS DAT({render.columns(columns, ', ')})"
            f" ON {matched(key_columns, ' AND ')}"
            f" WHEN MATCHED THEN UPDATE SET {matched(update_columns, ', ')}"
            f" WHEN NOT MATCHED THEN INSERT({render.columns(columns)})"
            f" VALUES({render.columns(columns, prefix='DAT.')})"
        )
