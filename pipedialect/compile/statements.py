"""DML and DDL statement text.

``StatementBuilder`` is stateless: every method maps a table id plus
ordered key / non-key columns (or ordered field descriptions) to SQL text
ready to be parameterised by the caller.  Column order is always keys first,
then non-keys, and the placeholder count always equals the column count.

Upserts have no portable grammar and are built by each dialect; see
:meth:`pipedialect.dialects.generic.GenericDialect.build_upsert_statement`.
"""
from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from pipedialect.compile.rules import ExpressionRenderer
from pipedialect.schema.identifiers import ColumnId, TableId
from pipedialect.schema.portable import SinkRecordField
from pipedialect.schema.types import SchemaType

#: ``(logical_name, parameters, schema_type) -> DDL column type``
SqlTypeFn = Callable[[str | None, Mapping[str, str], SchemaType], str]

#: ``(logical_name, parameters, schema_type, value) -> SQL literal``
FormatValueFn = Callable[[str | None, Mapping[str, str], SchemaType, Any], str]


@dataclass(frozen=True)
class StatementBuilder:
    """Builds statement text for one dialect.

    Attributes:
        renderer: Identifier-aware fragment renderer.
        sql_type: Portable field -> DDL type mapping.
        format_value: Portable value -> SQL literal formatting.
        placeholder: Parameter placeholder token (``?`` or ``%s``).
    """

    renderer: ExpressionRenderer
    sql_type: SqlTypeFn
    format_value: FormatValueFn
    placeholder: str = "?"

    # ------------------------------------------------------------------
    # DML
    # ------------------------------------------------------------------

    def insert(
        self,
        table: TableId,
        key_columns: Sequence[ColumnId],
        non_key_columns: Sequence[ColumnId],
    ) -> str:
        """``INSERT INTO <table>(<cols>) VALUES(<placeholders>)``."""
        columns = [*key_columns, *non_key_columns]
        return (
            f"INSERT INTO {self.renderer.table(table)}"
            f"({self.renderer.columns(columns)})"
            f" VALUES({self.values(len(columns))})"
        )

    def update(
        self,
        table: TableId,
        key_columns: Sequence[ColumnId],
        non_key_columns: Sequence[ColumnId],
    ) -> str:
        """``UPDATE <table> SET <col> = ?, ... [WHERE <key> = ? AND ...]``.

        The WHERE clause is omitted when there are no key columns, which
        updates every row.

        Raises:
            ValueError: If there are no non-key columns to assign.
        """
        if not non_key_columns:
            raise ValueError(f"Cannot build an UPDATE for {table} without non-key columns")
        render = self.renderer
        sql = (
            f"UPDATE {render.table(table)}"
            f" SET {render.assignments(non_key_columns, ', ', self.placeholder)}"
        )
        if key_columns:
            sql += f" WHERE {render.assignments(key_columns, ' AND ', self.placeholder)}"
        return sql

    def values(self, count: int) -> str:
        """Comma-joined placeholders for ``count`` columns."""
        return self.renderer.placeholders(count, self.placeholder)

    # ------------------------------------------------------------------
    # DDL
    # ------------------------------------------------------------------

    def create_table(self, table: TableId, fields: Sequence[SinkRecordField]) -> str:
        """``CREATE TABLE <table> (<col specs>[, PRIMARY KEY(<pks>)])``."""
        body = ",".join(f"\n{self.column_spec(f)}" for f in fields)
        pk_names = [f.name for f in fields if f.primary_key]
        if pk_names:
            body += f",\nPRIMARY KEY({self.renderer.identifiers(pk_names)})"
        return f"CREATE TABLE {self.renderer.table(table)} ({body})"

    def alter_table(self, table: TableId, fields: Sequence[SinkRecordField]) -> list[str]:
        """One combined ``ALTER TABLE <table> ADD ..., ADD ...`` statement."""
        newline = "\n" if len(fields) > 1 else ""
        adds = ",".join(f"{newline}ADD {self.column_spec(f)}" for f in fields)
        return [f"ALTER TABLE {self.renderer.table(table)} {adds}"]

    def alter_table_per_column(
        self, table: TableId, fields: Sequence[SinkRecordField]
    ) -> list[str]:
        """One ``ALTER TABLE <table> ADD <col>`` statement per field."""
        return [
            f"ALTER TABLE {self.renderer.table(table)} ADD {self.column_spec(f)}"
            for f in fields
        ]

    def column_spec(self, field: SinkRecordField) -> str:
        """``<name> <type>`` followed by ``DEFAULT <literal>``, ``NULL`` or ``NOT NULL``."""
        spec = (
            f"{self.renderer.identifier(field.name)} "
            f"{self.sql_type(field.logical_name, field.parameters, field.schema_type)}"
        )
        if field.default_value is not None:
            literal = self.format_value(
                field.logical_name, field.parameters, field.schema_type, field.default_value
            )
            return f"{spec} DEFAULT {literal}"
        return f"{spec} NULL" if field.optional else f"{spec} NOT NULL"
