"""pipedialect dialects: the generic base, vendor dialects and their registry."""
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

__all__ = [
    "DerbyDialect",
    "ColumnMapping",
    "GenericDialect",
    "MySqlDialect",
    "PostgresDialect",
    "ConnectionTarget",
    "DialectProvider",
    "DialectRegistry",
    "FixedScoreProvider",
    "SubprotocolBasedProvider",
    "SqliteDialect",
]
