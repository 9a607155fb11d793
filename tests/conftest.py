"""Shared pytest fixtures for pipedialect unit and integration tests."""
from __future__ import annotations

from collections.abc import Iterator

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine

from pipedialect import (
    DerbyDialect,
    GenericDialect,
    IdentifierRules,
    MySqlDialect,
    PostgresDialect,
    SqliteDialect,
)
from tests.helpers import config


@pytest.fixture()
def generic() -> GenericDialect:
    """Generic dialect with standard double-quote identifiers."""
    return GenericDialect(config(), IdentifierRules())


@pytest.fixture()
def unquoted() -> GenericDialect:
    """Generic dialect for a database that does not quote identifiers."""
    return GenericDialect(config(), IdentifierRules.unquoted())


@pytest.fixture()
def derby() -> DerbyDialect:
    return DerbyDialect(config("jdbc:derby:memory:sales"))


@pytest.fixture()
def mysql() -> MySqlDialect:
    return MySqlDialect(config("mysql+pymysql://db/sales"))


@pytest.fixture()
def postgres() -> PostgresDialect:
    return PostgresDialect(config("postgresql+psycopg2://db/sales"))


@pytest.fixture()
def sqlite() -> SqliteDialect:
    return SqliteDialect(config())


# ---------------------------------------------------------------------------
# In-memory SQLite database
# ---------------------------------------------------------------------------

_DDL = [
    """
    CREATE TABLE orders (
        id      INTEGER       NOT NULL PRIMARY KEY,
        total   DECIMAL(10,2),
        note    TEXT,
        created DATETIME      NOT NULL,
        flag    BOOLEAN
    )
    """,
    """
    CREATE TABLE order_items (
        order_id INTEGER,
        line     INTEGER,
        sku      VARCHAR(32),
        PRIMARY KEY (order_id, line)
    )
    """,
    "CREATE VIEW big_orders AS SELECT id, total FROM orders WHERE total > 100",
]


@pytest.fixture()
def engine() -> Iterator[Engine]:
    """In-memory SQLite engine holding the ``orders`` schema."""
    eng = create_engine("sqlite://")
    with eng.begin() as conn:
        for ddl in _DDL:
            conn.execute(text(ddl))
    yield eng
    eng.dispose()


@pytest.fixture()
def conn(engine: Engine) -> Iterator[Connection]:
    with engine.connect() as connection:
        yield connection
