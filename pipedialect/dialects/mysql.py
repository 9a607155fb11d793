"""MySQL / MariaDB dialect."""
from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from pipedialect.compile.rules import IdentifierRules
from pipedialect.convert.values import LiteralStyle, backslash_escaped_literal
from pipedialect.dialects.generic import GenericDialect, upsert_update_columns
from pipedialect.schema.identifiers import ColumnId, TableId
from pipedialect.schema.types import LogicalType, SchemaType, SqlType, TypeNameInfo

# MySQL protocol field types (``pymysql.constants.FIELD_TYPE``, ``MySQLdb.constants.FIELD_TYPE``).
# Text and binary columns share the blob codes (249-252) and the codes alone
# cannot tell them apart, so result-cursor introspection reads TEXT columns as
# bytes. Catalog introspection sees the declared type and reads them as strings.
_FIELD_TYPES: dict[int, SqlType] = {
    0: SqlType.DECIMAL,
    1: SqlType.TINYINT,
    2: SqlType.SMALLINT,
    3: SqlType.INTEGER,
    4: SqlType.REAL,
    5: SqlType.DOUBLE,
    6: SqlType.NULL,
    7: SqlType.TIMESTAMP,
    8: SqlType.BIGINT,
    9: SqlType.INTEGER,
    10: SqlType.DATE,
    11: SqlType.TIME,
    12: SqlType.TIMESTAMP,
    13: SqlType.SMALLINT,
    15: SqlType.VARCHAR,
    16: SqlType.BIT,
    245: SqlType.LONGVARCHAR,
    246: SqlType.DECIMAL,
    247: SqlType.CHAR,
    248: SqlType.CHAR,
    249: SqlType.LONGVARBINARY,
    250: SqlType.LONGVARBINARY,
    251: SqlType.LONGVARBINARY,
    252: SqlType.LONGVARBINARY,
    253: SqlType.VARCHAR,
    254: SqlType.CHAR,
}


class MySqlDialect(GenericDialect):
    """MySQL: backtick identifiers, ``%s`` placeholders and ``ON DUPLICATE KEY`` upserts."""

    name = "MySql"
    placeholder = "%s"
    IDENTIFIER_RULES = IdentifierRules(".", "`", "`")
    # Backslash is an escape character unless NO_BACKSLASH_ESCAPES is set
    LITERALS = LiteralStyle(string=backslash_escaped_literal)
    LOGICAL_DDL_TYPES = {
        # Maximum precision supported by MySQL is 65
        LogicalType.DECIMAL.value: "DECIMAL(65,{scale})",
        LogicalType.DATE.value: "DATE",
        LogicalType.TIME.value: "TIME(3)",
        LogicalType.TIMESTAMP.value: "DATETIME(3)",
    }
    PRIMITIVE_DDL_TYPES = {
        SchemaType.INT8: "TINYINT",
        SchemaType.INT16: "SMALLINT",
        SchemaType.INT32: "INT",
        SchemaType.INT64: "BIGINT",
        SchemaType.FLOAT32: "FLOAT",
        SchemaType.FLOAT64: "DOUBLE",
        SchemaType.BOOLEAN: "TINYINT",
        SchemaType.STRING: "VARCHAR(256)",
        SchemaType.BYTES: "VARBINARY(1024)",
    }

    def current_timestamp_query(self) -> str:
        # Naive DATETIME results are read as UTC
        return "SELECT UTC_TIMESTAMP()"

    def driver_type_for(self, type_code: Any) -> TypeNameInfo:
        """Classify a MySQL protocol field type.

        ``TEXT`` columns report a blob field type and classify as
        ``LONGVARBINARY``; ``YEAR`` classifies as ``SMALLINT`` on both
        introspection paths.
        """
        if isinstance(type_code, int) and type_code in _FIELD_TYPES:
            return TypeNameInfo(_FIELD_TYPES[type_code])
        return super().driver_type_for(type_code)

    def build_upsert_statement(
        self,
        table: TableId,
        key_columns: Sequence[ColumnId],
        non_key_columns: Sequence[ColumnId],
    ) -> str:
        """``INSERT ... ON DUPLICATE KEY UPDATE c=VALUES(c)`` upsert."""
        render = self.expression_renderer()
        update_columns = upsert_update_columns(key_columns, non_key_columns)
        updates = ",".join(
            f"{render.column(c)}=VALUES({render.column(c)})" for c in update_columns
        )
        return (
            f"{self.build_insert_statement(table, key_columns, non_key_columns)}"
            f" ON DUPLICATE KEY UPDATE {updates}"
        )
