"""pipedialect – database dialects for record pipelines.

Pick a dialect for a connection, then use it to introspect tables, map
driver columns to a portable record schema, convert column values and build
the SQL statements a pipeline needs.

Public API
----------
``create_dialect``
    Select and instantiate the best dialect for a :class:`DialectConfig`.

``default_registry``
    The default :class:`DialectRegistry` holding the built-in providers.

Re-exported types
-----------------
``DialectConfig``, ``NumericMapping``, the dialect classes, the schema and
identifier types, and all error classes.

Extensibility
-------------
New vendors are added by registering a provider::

    from pipedialect import SubprotocolBasedProvider, default_registry

    default_registry.register(SubprotocolBasedProvider("Oracle", OracleDialect, "oracle"))

After registration, ``create_dialect`` picks it up automatically for any
``oracle`` connection URL.
"""

from __future__ import annotations

from pipedialect.compile.rules import ExpressionRenderer, IdentifierRules
from pipedialect.compile.statements import StatementBuilder
from pipedialect.config import DialectConfig, NumericMapping
from pipedialect.convert.type_bridge import TypeBridge
from pipedialect.convert.values import LiteralStyle, ValueConverter
from pipedialect.dialects.derby import DerbyDialect
from pipedialect.dialects.generic import ColumnMapping, GenericDialect
from pipedialect.dialects.mysql import MySqlDialect
from pipedialect.dialects.postgres import PostgresDialect
from pipedialect.dialects.registry import (
    ConnectionTarget,
    DialectProvider,
    DialectRegistry,
    FixedScoreProvider,
    SubprotocolBasedProvider,
)
from pipedialect.dialects.sqlite import SqliteDialect
from pipedialect.errors import (
    ConfigurationError,
    ConnectError,
    LargeObjectSizeError,
    NoMatchingDialectError,
    PipeDialectError,
    UnmappedTypeError,
    UnsupportedValueTypeError,
    UpsertNotSupportedError,
)
from pipedialect.schema import (
    ColumnDefinition,
    ColumnId,
    FieldSchema,
    LogicalType,
    Mutability,
    Nullability,
    RecordSchema,
    SchemaBuilder,
    SchemaType,
    SinkRecordField,
    SqlType,
    TableDefinition,
    TableId,
)


def builtin_providers() -> list[DialectProvider]:
    """Providers for the built-in dialects, in registration order."""
    return [
        SubprotocolBasedProvider("Derby", DerbyDialect, "derby", "db2"),
        SubprotocolBasedProvider("MySql", MySqlDialect, "mariadb", "mysql"),
        SubprotocolBasedProvider("PostgreSql", PostgresDialect, "postgresql", "postgres"),
        SubprotocolBasedProvider("Sqlite", SqliteDialect, "sqlite"),
        FixedScoreProvider("Generic", GenericDialect, DialectProvider.AVERAGE_MATCHING_SCORE),
    ]


# ---------------------------------------------------------------------------
# Register built-in dialects with the default registry
# ---------------------------------------------------------------------------

default_registry = DialectRegistry(builtin_providers())

__all__ = [
    # Entry points
    "create_dialect",
    "builtin_providers",
    "default_registry",
    # Configuration
    "DialectConfig",
    "NumericMapping",
    # Registry
    "ConnectionTarget",
    "DialectProvider",
    "DialectRegistry",
    "FixedScoreProvider",
    "SubprotocolBasedProvider",
    # Dialects
    "GenericDialect",
    "DerbyDialect",
    "MySqlDialect",
    "PostgresDialect",
    "SqliteDialect",
    "ColumnMapping",
    # Building blocks
    "IdentifierRules",
    "ExpressionRenderer",
    "StatementBuilder",
    "TypeBridge",
    "ValueConverter",
    "LiteralStyle",
    # Schema types
    "ColumnDefinition",
    "ColumnId",
    "FieldSchema",
    "LogicalType",
    "Mutability",
    "Nullability",
    "RecordSchema",
    "SchemaBuilder",
    "SchemaType",
    "SinkRecordField",
    "SqlType",
    "TableDefinition",
    "TableId",
    # Errors
    "PipeDialectError",
    "ConfigurationError",
    "NoMatchingDialectError",
    "UnmappedTypeError",
    "ConnectError",
    "UpsertNotSupportedError",
    "UnsupportedValueTypeError",
    "LargeObjectSizeError",
]


def create_dialect(
    config: DialectConfig,
    registry: DialectRegistry | None = None,
) -> GenericDialect:
    """Create the dialect for ``config``.

    The provider named by ``config.dialect_name`` is used when set; otherwise
    every provider scores ``config.connection_url`` and the best one wins::

        dialect = pipedialect.create_dialect(
            DialectConfig(connection_url="postgresql+psycopg2://db/sales")
        )
        sql = dialect.build_upsert_statement(table, keys, non_keys)

    Args:
        config: Connection and mapping settings.
        registry: Registry to use; defaults to the built-in registry.

    Returns:
        A dialect instance bound to ``config``.

    Raises:
        NoMatchingDialectError: If the named provider does not exist or no
            provider can handle the URL.
    """
    chosen = registry if registry is not None else default_registry
    if config.dialect_name:
        return chosen.create(config.dialect_name, config)
    return chosen.find_best_for(config.connection_url, config)
