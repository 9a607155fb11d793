"""Catalog-driven introspection through SQLAlchemy reflection.

The helpers here turn :class:`sqlalchemy.engine.Inspector` output into
:class:`ColumnDefinition` objects.  SQLAlchemy does not model catalogs, so
reflected table ids never carry one.
"""
from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from typing import Any

from sqlalchemy import types as sqltypes
from sqlalchemy.engine import Dialect as SADialect
from sqlalchemy.engine import Inspector
from sqlalchemy.exc import CompileError

from pipedialect.metadata.patterns import NameMatcher
from pipedialect.schema.definitions import ColumnDefinition, Mutability, Nullability
from pipedialect.schema.identifiers import ColumnId, TableId
from pipedialect.schema.types import (
    NUMERIC_TYPE_SCALE_UNSET,
    SqlType,
    TypeNameInfo,
    parse_type_name,
)

#: ``(catalog, schema, table) -> TableId`` honouring the dialect's case policy.
TableIdFactory = Callable[[str | None, str | None, str], TableId]

# Most specific classes first: Float and DECIMAL are Numeric subclasses,
# CLOB is a Text subclass and Text is a String subclass.
_SQLALCHEMY_TYPES: Sequence[tuple[type, SqlType]] = (
    (sqltypes.Boolean, SqlType.BOOLEAN),
    (sqltypes.SmallInteger, SqlType.SMALLINT),
    (sqltypes.BigInteger, SqlType.BIGINT),
    (sqltypes.Integer, SqlType.INTEGER),
    (sqltypes.Double, SqlType.DOUBLE),
    (sqltypes.REAL, SqlType.REAL),
    (sqltypes.Float, SqlType.FLOAT),
    (sqltypes.DECIMAL, SqlType.DECIMAL),
    (sqltypes.Numeric, SqlType.NUMERIC),
    (sqltypes.NCHAR, SqlType.NCHAR),
    (sqltypes.NVARCHAR, SqlType.NVARCHAR),
    (sqltypes.CHAR, SqlType.CHAR),
    (sqltypes.CLOB, SqlType.CLOB),
    (sqltypes.Text, SqlType.LONGVARCHAR),
    (sqltypes.String, SqlType.VARCHAR),
    (sqltypes.BINARY, SqlType.BINARY),
    (sqltypes.VARBINARY, SqlType.VARBINARY),
    (sqltypes.BLOB, SqlType.BLOB),
    (sqltypes.LargeBinary, SqlType.LONGVARBINARY),
    (sqltypes.DateTime, SqlType.TIMESTAMP),
    (sqltypes.Date, SqlType.DATE),
    (sqltypes.Time, SqlType.TIME),
    (sqltypes.ARRAY, SqlType.ARRAY),
    (sqltypes.NullType, SqlType.NULL),
)

_DECIMAL_TYPES = frozenset({SqlType.NUMERIC, SqlType.DECIMAL})


def sql_type_for(type_: sqltypes.TypeEngine) -> SqlType:
    """Classify a reflected SQLAlchemy type.

    Vendor types are recognised by their visit name first (``TINYINT`` is
    an ``Integer`` subclass but a distinct driver type), then by class.
    """
    by_name = parse_type_name(getattr(type_, "__visit_name__", "") or "")
    if by_name.sql_type is not SqlType.OTHER:
        return by_name.sql_type
    for cls, sql_type in _SQLALCHEMY_TYPES:
        if isinstance(type_, cls):
            return sql_type
    return SqlType.OTHER


def type_info_for(type_: sqltypes.TypeEngine) -> TypeNameInfo:
    """Driver type, precision/length, scale and signedness of a reflected type.

    A ``NUMERIC``/``DECIMAL`` declared without precision or scale (PostgreSQL
    ``numeric``, Oracle ``NUMBER``) reports :data:`NUMERIC_TYPE_SCALE_UNSET`;
    with a precision alone the scale is 0.
    """
    sql_type = sql_type_for(type_)
    precision = getattr(type_, "precision", None) or getattr(type_, "length", None) or 0
    scale = getattr(type_, "scale", None)
    if scale is None:
        unset = sql_type in _DECIMAL_TYPES and not precision
        scale = NUMERIC_TYPE_SCALE_UNSET if unset else 0
    return TypeNameInfo(
        sql_type=sql_type,
        precision=int(precision) if isinstance(precision, int) else 0,
        scale=int(scale),
        signed=not getattr(type_, "unsigned", False),
    )


def type_name_for(type_: sqltypes.TypeEngine, dialect: SADialect) -> str:
    try:
        return str(type_.compile(dialect=dialect))
    except CompileError:
        return str(getattr(type_, "__visit_name__", type(type_).__name__)).upper()


def matching_tables(
    inspector: Inspector,
    make_table_id: TableIdFactory,
    catalog_matcher: NameMatcher,
    schema_pattern: str | None,
    schema_matcher: NameMatcher,
    table_matcher: NameMatcher,
    table_types: Sequence[str] = ("TABLE", "VIEW"),
) -> Iterator[TableId]:
    """Yield reflected tables whose schema and name match the patterns.

    A ``None`` schema pattern restricts the search to the default schema.
    """
    if not catalog_matcher(None):
        return
    types = {t.upper() for t in table_types}
    if schema_pattern is None:
        schemas: list[str | None] = [None]
    else:
        schemas = [s for s in inspector.get_schema_names() if schema_matcher(s)]
    for schema in schemas:
        names: list[str] = []
        if "TABLE" in types:
            names.extend(inspector.get_table_names(schema=schema))
        if "VIEW" in types:
            names.extend(inspector.get_view_names(schema=schema))
        for name in names:
            if table_matcher(name):
                yield make_table_id(None, schema, name)


def primary_key_names(inspector: Inspector, table_id: TableId) -> list[str]:
    constraint = inspector.get_pk_constraint(table_id.table, schema=table_id.schema) or {}
    return list(constraint.get("constrained_columns") or [])


def _auto_increment(info: dict[str, Any]) -> bool:
    # Reflection reports True/False when the driver knows, "auto" or nothing otherwise
    return info.get("autoincrement") is True


def column_definition(
    table_id: TableId,
    info: dict[str, Any],
    dialect: SADialect,
    primary_keys: set[ColumnId],
) -> ColumnDefinition:
    """Build a definition from one ``Inspector.get_columns`` entry.

    Primary-key columns are always NOT NULL, whatever the driver reported.
    """
    column_id = ColumnId(table_id, info["name"])
    type_info = type_info_for(info["type"])
    nullable = info.get("nullable")
    if nullable is None:
        nullability = Nullability.UNKNOWN
    else:
        nullability = Nullability.NULL if nullable else Nullability.NOT_NULL
    primary_key = column_id in primary_keys
    if primary_key:
        nullability = Nullability.NOT_NULL
    return ColumnDefinition(
        id=column_id,
        sql_type=type_info.sql_type,
        type_name=type_name_for(info["type"], dialect),
        nullability=nullability,
        mutability=Mutability.UNKNOWN,
        precision=type_info.precision,
        scale=type_info.scale,
        signed=type_info.signed,
        auto_increment=_auto_increment(info),
        primary_key=primary_key,
    )
