"""Column and table definitions produced by introspection.

Definitions are rebuilt on every introspection call and never mutated.
Callers may cache them; keeping them fresh is the caller's concern.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from pipedialect.schema.identifiers import ColumnId, TableId
from pipedialect.schema.types import SqlType


class Nullability(str, Enum):
    NOT_NULL = "not_null"
    NULL = "null"
    UNKNOWN = "unknown"


class Mutability(str, Enum):
    READ_ONLY = "read_only"
    WRITABLE = "writable"
    MAYBE_WRITABLE = "maybe_writable"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ColumnDefinition:
    """Description of a single column.

    Attributes:
        id: Column identity.
        sql_type: Driver type code.
        type_name: Vendor type name as reported by the driver.
        nullability: Whether the column accepts NULL.
        mutability: Whether the column can be written.
        precision: Precision for numeric columns, length otherwise.
        scale: Scale for numeric columns.
        signed: Whether numeric values are signed.
        auto_increment: Whether the database generates the value.
        primary_key: Whether the column belongs to the primary key.
    """

    id: ColumnId
    sql_type: SqlType
    type_name: str = ""
    nullability: Nullability = Nullability.UNKNOWN
    mutability: Mutability = Mutability.UNKNOWN
    precision: int = 0
    scale: int = 0
    signed: bool = True
    auto_increment: bool = False
    primary_key: bool = False

    @property
    def is_optional(self) -> bool:
        """True unless the column is known to be NOT NULL."""
        return self.nullability is not Nullability.NOT_NULL

    @property
    def name(self) -> str:
        return self.id.name


class TableDefinition:
    """A table and its columns in driver-reported order.

    Args:
        table_id: The table identity.
        columns: Column definitions; must not be empty.

    Raises:
        ValueError: If ``columns`` is empty.
    """

    def __init__(self, table_id: TableId, columns: Iterable[ColumnDefinition]) -> None:
        ordered = {c.id: c for c in columns}
        if not ordered:
            raise ValueError(f"Table {table_id} has no columns")
        self._id = table_id
        self._columns: Mapping[ColumnId, ColumnDefinition] = MappingProxyType(ordered)

    @property
    def id(self) -> TableId:
        return self._id

    @property
    def columns(self) -> Mapping[ColumnId, ColumnDefinition]:
        return self._columns

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self._columns.values()]

    @property
    def primary_key_column_names(self) -> list[str]:
        return [c.name for c in self._columns.values() if c.primary_key]

    def definition_for(self, name: str) -> ColumnDefinition | None:
        """Return the definition of the named column, or ``None``."""
        return self._columns.get(ColumnId(self._id, name))

    def __len__(self) -> int:
        return len(self._columns)

    def __repr__(self) -> str:
        return f"TableDefinition({self._id}, columns={self.column_names})"
