"""Table and column identity.

Identity is the ``(catalog, schema, table)`` triple for tables and
``(table, name)`` for columns.  Dialects whose identifiers are case
insensitive build ids with ``case_insensitive=True``; two ids compare equal
when they match exactly, or case-folded if either side is case insensitive.
Hashes are always computed over the case-folded key so equal ids hash equally.
"""
from __future__ import annotations

from dataclasses import dataclass, field


def _fold(value: str | None) -> str | None:
    return value.casefold() if value is not None else None


@dataclass(frozen=True, eq=False)
class TableId:
    """Identifier of a table.

    Attributes:
        catalog: Catalog name, or ``None``.
        schema: Schema name, or ``None`` for the default schema.
        table: Table name.
        case_insensitive: Compare names case-insensitively.
    """

    catalog: str | None = None
    schema: str | None = None
    table: str = ""
    case_insensitive: bool = field(default=False, repr=False)

    def _key(self, folded: bool) -> tuple[str | None, str | None, str | None]:
        if folded:
            return (_fold(self.catalog), _fold(self.schema), _fold(self.table))
        return (self.catalog, self.schema, self.table)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TableId):
            return NotImplemented
        folded = self.case_insensitive or other.case_insensitive
        return self._key(folded) == other._key(folded)

    def __hash__(self) -> int:
        return hash(self._key(True))

    @property
    def parts(self) -> list[str]:
        """Non-empty name parts, outermost first."""
        return [p for p in (self.catalog, self.schema, self.table) if p]

    def __str__(self) -> str:
        return ".".join(self.parts)


@dataclass(frozen=True, eq=False)
class ColumnId:
    """Identifier of a column within a table.

    Attributes:
        table: The owning table.
        name: Column name.
        alias: Optional result label; not part of the identity.
    """

    table: TableId
    name: str
    alias: str | None = None

    def alias_or_name(self) -> str:
        """Return the alias when set, otherwise the column name."""
        return self.alias if self.alias else self.name

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ColumnId):
            return NotImplemented
        if self.table != other.table:
            return False
        if self.table.case_insensitive or other.table.case_insensitive:
            return _fold(self.name) == _fold(other.name)
        return self.name == other.name

    def __hash__(self) -> int:
        return hash((self.table, _fold(self.name)))

    def __str__(self) -> str:
        return f"{self.table}.{self.name}" if self.table.parts else self.name
