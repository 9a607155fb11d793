"""Builders shared by the test modules."""
from __future__ import annotations

from pipedialect import DialectConfig
from pipedialect.schema import (
    ColumnDefinition,
    ColumnId,
    Nullability,
    SqlType,
    TableId,
)

ORDERS = TableId(table="orders")
ID = ColumnId(ORDERS, "id")
TOTAL = ColumnId(ORDERS, "total")
NOTE = ColumnId(ORDERS, "note")


def config(url: str = "sqlite://", **kwargs) -> DialectConfig:
    return DialectConfig(connection_url=url, **kwargs)


def column(
    sql_type: SqlType,
    name: str = "c",
    *,
    precision: int = 0,
    scale: int = 0,
    signed: bool = True,
    nullability: Nullability = Nullability.NULL,
    table: TableId = ORDERS,
    alias: str | None = None,
) -> ColumnDefinition:
    """Build a column definition with sensible defaults for type tests."""
    return ColumnDefinition(
        id=ColumnId(table, name, alias),
        sql_type=sql_type,
        nullability=nullability,
        precision=precision,
        scale=scale,
        signed=signed,
    )
