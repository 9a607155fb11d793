"""Identifier quoting rules and the expression renderer built from them.

``IdentifierRules`` captures a vendor's quoting and catalog-separator
conventions.  ``ExpressionRenderer`` is a frozen bundle of small pure
formatting functions over those rules; statement builders compose them
instead of sharing a mutable string builder::

    render = IdentifierRules(leading_quote='`').renderer()
    render.table(TableId(schema="sales", table="orders"))   # `sales`.`orders`
    render.columns(cols, suffix=" = ?")                      # `a` = ?,`b` = ?
"""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from pipedialect.schema.identifiers import ColumnId, TableId


@dataclass(frozen=True)
class IdentifierRules:
    """A vendor's identifier conventions.

    Attributes:
        catalog_separator: Separator between catalog, schema and table names.
        leading_quote: Opening identifier quote; blank disables quoting.
        trailing_quote: Closing identifier quote; defaults to ``leading_quote``.
    """

    catalog_separator: str = "."
    leading_quote: str = '"'
    trailing_quote: str | None = None

    def __post_init__(self) -> None:
        if self.trailing_quote is None:
            object.__setattr__(self, "trailing_quote", self.leading_quote)

    @classmethod
    def unquoted(cls, catalog_separator: str = ".") -> IdentifierRules:
        """Rules for a database that does not quote identifiers."""
        return cls(catalog_separator, "", "")

    @property
    def quoting(self) -> bool:
        """Whether identifiers are quoted at all."""
        return bool(self.leading_quote.strip())

    def quote(self, name: str) -> str:
        """Return ``name`` wrapped in the identifier quotes.

        Embedded closing quotes are doubled.
        """
        if not self.quoting:
            return name
        trailing = self.trailing_quote or self.leading_quote
        escaped = name.replace(trailing, trailing * 2)
        return f"{self.leading_quote}{escaped}{trailing}"

    def renderer(self) -> ExpressionRenderer:
        return ExpressionRenderer(self)


@dataclass(frozen=True)
class ExpressionRenderer:
    """Pure SQL fragment formatting over a set of :class:`IdentifierRules`."""

    rules: IdentifierRules

    def identifier(self, name: str) -> str:
        return self.rules.quote(name)

    def table(self, table: TableId) -> str:
        """Render a table as its quoted name parts joined by the separator."""
        return self.rules.catalog_separator.join(self.rules.quote(p) for p in table.parts)

    def column(self, column: ColumnId) -> str:
        """Render a column by name only (no table qualifier)."""
        return self.rules.quote(column.name)

    def qualified_column(self, qualifier: str, column: ColumnId) -> str:
        """Render ``<qualifier>.<column>``; ``qualifier`` is already rendered."""
        return f"{qualifier}.{self.column(column)}"

    def columns(
        self,
        columns: Iterable[ColumnId],
        delimiter: str = ",",
        *,
        prefix: str = "",
        suffix: str = "",
    ) -> str:
        """Render a delimited column list, wrapping each item in ``prefix``/``suffix``."""
        return delimiter.join(f"{prefix}{self.column(c)}{suffix}" for c in columns)

    def identifiers(self, names: Iterable[str], delimiter: str = ",") -> str:
        return delimiter.join(self.rules.quote(n) for n in names)

    def assignments(
        self,
        columns: Iterable[ColumnId],
        delimiter: str,
        placeholder: str = "?",
    ) -> str:
        """Render ``col = <placeholder>`` items joined by ``delimiter``."""
        return self.columns(columns, delimiter, suffix=f" = {placeholder}")

    @staticmethod
    def placeholders(count: int, placeholder: str = "?", delimiter: str = ",") -> str:
        return delimiter.join([placeholder] * count)

    @staticmethod
    def string_literal(value: object) -> str:
        """Render a single-quoted string literal with embedded quotes doubled."""
        escaped = str(value).replace("'", "''")
        return f"'{escaped}'"
