"""The generic dialect: the base every vendor dialect specialises.

A dialect bundles, for one database vendor, the connection factory,
identifier rules, type bridge, catalog and cursor introspection, value
conversion and statement building.  Vendor subclasses override class
attributes (DDL tables, literal style, placeholder, case policy) and a few
hooks (upsert grammar, probe query, current-time query); they never need to
touch callers or the registry.

Everything except :meth:`GenericDialect.identifier_rules` is stateless and
safe to share across threads.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar

import sqlalchemy
import structlog
from sqlalchemy.engine import Connection, Engine, make_url
from sqlalchemy.exc import SQLAlchemyError

from pipedialect.compile.rules import ExpressionRenderer, IdentifierRules
from pipedialect.compile.statements import StatementBuilder
from pipedialect.config import DialectConfig
from pipedialect.convert.type_bridge import TypeBridge
from pipedialect.convert.values import (
    ColumnConverter,
    LiteralStyle,
    ValueConverter,
    to_utc_timestamp,
)
from pipedialect.dialects.registry import strip_jdbc_prefix
from pipedialect.errors import ConnectError, UpsertNotSupportedError
from pipedialect.metadata.catalog import (
    column_definition,
    matching_tables,
    primary_key_names,
)
from pipedialect.metadata.cursor import column_definitions_from_description
from pipedialect.metadata.patterns import escape_like, like_matcher
from pipedialect.schema.definitions import ColumnDefinition, TableDefinition
from pipedialect.schema.identifiers import ColumnId, TableId
from pipedialect.schema.portable import RecordSchema, SchemaBuilder, SinkRecordField
from pipedialect.schema.types import SchemaType, SqlType, TypeNameInfo, parse_type_name

log = structlog.get_logger(__name__)

_RULES = "identifier_rules"


@dataclass(frozen=True)
class ColumnMapping:
    """How one result column feeds one portable field.

    Attributes:
        column: The driver column.
        index: Position of the column in each result row.
        field_name: Name of the portable field it populates.
        converter: Extraction function for the column's values.
    """

    column: ColumnDefinition
    index: int
    field_name: str
    converter: ColumnConverter

    def value(self, row: Sequence[Any]) -> Any:
        return self.converter(row, self.index)


class GenericDialect:
    """Dialect for databases without a vendor-specific implementation.

    Args:
        config: Connection and mapping settings.
        identifier_rules: Fixed identifier rules; when omitted they are
            probed from a live connection on first use.

    Example::

        dialect = GenericDialect(DialectConfig(connection_url="sqlite://"))
        dialect.build_insert_statement(table, [id_col], [total_col])
    """

    name: ClassVar[str] = "Generic"
    #: DB-API parameter placeholder used in generated statements.
    placeholder: ClassVar[str] = "?"
    #: Whether identifiers compare case-insensitively.
    case_insensitive: ClassVar[bool] = False
    #: Identifier rules fixed by the vendor; ``None`` probes them.
    IDENTIFIER_RULES: ClassVar[IdentifierRules | None] = None
    LOGICAL_DDL_TYPES: ClassVar[Mapping[str, str]] = {}
    PRIMITIVE_DDL_TYPES: ClassVar[Mapping[SchemaType, str]] = {}
    LITERALS: ClassVar[LiteralStyle] = LiteralStyle()

    def __init__(
        self,
        config: DialectConfig,
        identifier_rules: IdentifierRules | None = None,
    ) -> None:
        self.config = config
        self.type_bridge = TypeBridge.layered(
            self.name,
            config.numeric_mapping,
            self.LOGICAL_DDL_TYPES,
            self.PRIMITIVE_DDL_TYPES,
        )
        self.value_converter = ValueConverter(config.numeric_mapping, self.LITERALS)
        # Single-assignment slot: the first published value wins.
        self._slot: dict[str, IdentifierRules] = {}
        rules = identifier_rules or self.IDENTIFIER_RULES
        if rules is not None:
            self._slot[_RULES] = rules

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.config.connection_url!r})"

    # ------------------------------------------------------------------
    # Connections
    # ------------------------------------------------------------------

    def create_engine(self, **engine_kwargs: Any) -> Engine:
        """Return a SQLAlchemy engine for the configured database.

        The user and password from the configuration override any in the
        URL; :meth:`connection_properties` supplies the driver ``connect_args``.
        """
        url = make_url(strip_jdbc_prefix(self.config.connection_url))
        if self.config.connection_user is not None:
            url = url.set(username=self.config.connection_user)
        if self.config.connection_password is not None:
            url = url.set(password=self.config.connection_password.get_secret_value())
        connect_args = self.connection_properties(dict(self.config.connection_properties))
        return sqlalchemy.create_engine(url, connect_args=connect_args, **engine_kwargs)

    def connection_properties(self, properties: dict[str, Any]) -> dict[str, Any]:
        """Hook for vendors to add or remove driver connection arguments."""
        return properties

    # ------------------------------------------------------------------
    # Identifier rules
    # ------------------------------------------------------------------

    def identifier_rules(self) -> IdentifierRules:
        """Return the identifier rules, probing a connection on first use.

        Concurrent first callers may each probe; only the first result is
        published and every caller sees it.

        Raises:
            ConnectError: If the probe connection fails.
        """
        rules = self._slot.get(_RULES)
        if rules is None:
            rules = self._slot.setdefault(_RULES, self._probe_identifier_rules())
        return rules

    def _probe_identifier_rules(self) -> IdentifierRules:
        log.debug("probing_identifier_rules", dialect=self.name)
        try:
            engine = self.create_engine()
            try:
                with engine.connect() as conn:
                    return self.identifier_rules_from(conn)
            finally:
                engine.dispose()
        except SQLAlchemyError as exc:
            raise ConnectError(f"Unable to get identifier metadata: {exc}") from exc

    def identifier_rules_from(self, conn: Connection) -> IdentifierRules:
        """Read the vendor's identifier quotes from a live connection."""
        preparer = conn.dialect.identifier_preparer
        return IdentifierRules(".", preparer.initial_quote, preparer.final_quote)

    def expression_renderer(self) -> ExpressionRenderer:
        return self.identifier_rules().renderer()

    def table_id(self, catalog: str | None, schema: str | None, table: str) -> TableId:
        """Build a table id that follows this dialect's case policy."""
        return TableId(catalog, schema, table, case_insensitive=self.case_insensitive)

    # ------------------------------------------------------------------
    # Catalog introspection
    # ------------------------------------------------------------------

    def table_names(self, conn: Connection) -> list[TableId]:
        """List tables matching the configured schema pattern and table types."""
        inspector = sqlalchemy.inspect(conn)
        tables = matching_tables(
            inspector,
            self.table_id,
            like_matcher(self.config.catalog_pattern, self.case_insensitive),
            self.config.schema_pattern,
            like_matcher(self.config.schema_pattern, self.case_insensitive),
            like_matcher(None),
            self.config.table_types,
        )
        return [t for t in tables if self.include_table(t)]

    def include_table(self, table_id: TableId) -> bool:
        """Hook for vendors to hide tables from :meth:`table_names`."""
        return True

    def table_exists(self, conn: Connection, table_id: TableId) -> bool:
        """Whether a base table with exactly this schema and name exists."""
        log.info("checking_table_exists", dialect=self.name, table=str(table_id))
        inspector = sqlalchemy.inspect(conn)
        names = inspector.get_table_names(schema=table_id.schema)
        exists = any(
            self.table_id(table_id.catalog, table_id.schema, name) == table_id for name in names
        )
        log.info("table_exists_checked", dialect=self.name, table=str(table_id), exists=exists)
        return exists

    def describe_columns(
        self,
        conn: Connection,
        catalog_pattern: str | None = None,
        schema_pattern: str | None = None,
        table_pattern: str | None = None,
        column_pattern: str | None = None,
    ) -> dict[ColumnId, ColumnDefinition]:
        """Describe catalog columns matching the ``LIKE`` patterns.

        Args:
            conn: Open connection.
            catalog_pattern: Catalog pattern; ``None`` matches any.
            schema_pattern: Schema pattern; ``None`` means the default schema.
            table_pattern: Table pattern; ``None`` matches any.
            column_pattern: Column pattern; ``None`` matches any.

        Returns:
            Column definitions in driver order.  Primary-key columns are
            marked and always NOT NULL.

        Raises:
            sqlalchemy.exc.SQLAlchemyError: Driver failures are not wrapped.
        """
        log.info(
            "describing_columns",
            dialect=self.name,
            catalog=catalog_pattern,
            schema=schema_pattern,
            table=table_pattern,
            column=column_pattern,
        )
        inspector = sqlalchemy.inspect(conn)
        column_matcher = like_matcher(column_pattern, self.case_insensitive)
        tables = matching_tables(
            inspector,
            self.table_id,
            like_matcher(catalog_pattern, self.case_insensitive),
            schema_pattern,
            like_matcher(schema_pattern, self.case_insensitive),
            like_matcher(table_pattern, self.case_insensitive),
        )
        results: dict[ColumnId, ColumnDefinition] = {}
        for table_id in tables:
            primary_keys = {ColumnId(table_id, n) for n in primary_key_names(inspector, table_id)}
            for info in inspector.get_columns(table_id.table, schema=table_id.schema):
                if not column_matcher(info["name"]):
                    continue
                column = column_definition(table_id, info, conn.dialect, primary_keys)
                results[column.id] = column
        return results

    def describe_table(self, conn: Connection, table_id: TableId) -> TableDefinition | None:
        """Describe one table exactly, or return ``None`` if it has no columns."""
        columns = self.describe_columns(
            conn,
            schema_pattern=escape_like(table_id.schema) if table_id.schema else None,
            table_pattern=escape_like(table_id.table),
        )
        if not columns:
            return None
        return TableDefinition(next(iter(columns)).table, columns.values())

    # ------------------------------------------------------------------
    # Result-cursor introspection
    # ------------------------------------------------------------------

    def describe_result_columns(
        self,
        description: Sequence[Sequence[Any]],
        table_id: TableId | None = None,
    ) -> dict[ColumnId, ColumnDefinition]:
        """Describe the columns of a DB-API ``cursor.description``."""
        return column_definitions_from_description(
            description,
            table_id if table_id is not None else self.table_id(None, None, ""),
            self.driver_type_for,
        )

    def driver_type_for(self, type_code: Any) -> TypeNameInfo:
        """Classify a DB-API ``type_code``.

        Standard type codes and type names are understood; vendors override
        this for driver-specific codes.
        """
        if isinstance(type_code, SqlType):
            return TypeNameInfo(type_code)
        if isinstance(type_code, int) and not isinstance(type_code, bool):
            return TypeNameInfo(SqlType.from_code(type_code))
        if isinstance(type_code, str):
            return parse_type_name(type_code)
        return TypeNameInfo(SqlType.OTHER)

    def probe_query(self, table_id: TableId) -> str:
        """A query returning at most one row of ``table_id``."""
        return f"SELECT * FROM {self.expression_renderer().table(table_id)} LIMIT 1"

    def describe_columns_by_querying(
        self, conn: Connection, table_id: TableId
    ) -> dict[ColumnId, ColumnDefinition]:
        """Describe a table from the cursor of a bounded probe query."""
        query = self.probe_query(table_id)
        log.debug("probing_table_columns", dialect=self.name, query=query)
        result = conn.exec_driver_sql(query)
        try:
            return self.describe_result_columns(result.cursor.description, table_id)
        finally:
            result.close()

    # ------------------------------------------------------------------
    # Database time
    # ------------------------------------------------------------------

    def current_timestamp_query(self) -> str:
        return "SELECT CURRENT_TIMESTAMP"

    def current_time_on_db(self, conn: Connection) -> datetime:
        """Return the database's current time as an aware UTC datetime.

        Raises:
            ConnectError: If the query returns no value.
        """
        query = self.current_timestamp_query()
        log.debug("querying_current_time", dialect=self.name, query=query)
        try:
            value = conn.exec_driver_sql(query).scalar()
        except SQLAlchemyError:
            log.error("current_time_query_failed", dialect=self.name, query=query)
            raise
        if value is None:
            raise ConnectError(
                f"Unable to get current time from DB using {self} and query '{query}'"
            )
        return to_utc_timestamp(value)

    # ------------------------------------------------------------------
    # Portable schema and values
    # ------------------------------------------------------------------

    def field_name_for(self, column: ColumnDefinition) -> str:
        return column.id.alias_or_name()

    def add_field_to_schema(self, column: ColumnDefinition, builder: SchemaBuilder) -> str | None:
        """Append the column's portable field to ``builder``.

        Returns:
            The field name, or ``None`` when the column type has no portable
            mapping and the column must be skipped.
        """
        schema = self.type_bridge.field_schema(column)
        if schema is None:
            return None
        field_name = self.field_name_for(column)
        builder.field(field_name, schema)
        return field_name

    def column_converter(self, column: ColumnDefinition) -> ColumnConverter | None:
        return self.value_converter.column_converter(column)

    def schema_mapping(
        self,
        columns: Iterable[ColumnDefinition],
        name: str | None = None,
    ) -> tuple[RecordSchema, list[ColumnMapping]]:
        """Build the portable schema for result columns plus their converters.

        Unmapped columns are left out of both; ``index`` still refers to the
        column's position in the result row.
        """
        builder = SchemaBuilder(name)
        mappings: list[ColumnMapping] = []
        for index, column in enumerate(columns):
            field_name = self.add_field_to_schema(column, builder)
            if field_name is None:
                continue
            converter = self.column_converter(column)
            if converter is not None:
                mappings.append(ColumnMapping(column, index, field_name, converter))
        return builder.build(), mappings

    def sql_type(
        self,
        logical_name: str | None,
        parameters: Mapping[str, str],
        schema_type: SchemaType,
    ) -> str:
        return self.type_bridge.sql_type(logical_name, parameters, schema_type)

    def format_value(
        self,
        logical_name: str | None,
        parameters: Mapping[str, str],
        schema_type: SchemaType,
        value: Any,
    ) -> str:
        return self.value_converter.format_value(logical_name, parameters, schema_type, value)

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def statement_builder(self) -> StatementBuilder:
        return StatementBuilder(
            renderer=self.expression_renderer(),
            sql_type=self.sql_type,
            format_value=self.format_value,
            placeholder=self.placeholder,
        )

    def build_insert_statement(
        self,
        table: TableId,
        key_columns: Sequence[ColumnId],
        non_key_columns: Sequence[ColumnId],
    ) -> str:
        return self.statement_builder().insert(table, key_columns, non_key_columns)

    def build_update_statement(
        self,
        table: TableId,
        key_columns: Sequence[ColumnId],
        non_key_columns: Sequence[ColumnId],
    ) -> str:
        return self.statement_builder().update(table, key_columns, non_key_columns)

    def build_upsert_statement(
        self,
        table: TableId,
        key_columns: Sequence[ColumnId],
        non_key_columns: Sequence[ColumnId],
    ) -> str:
        """Build an insert-or-update statement.

        Raises:
            UpsertNotSupportedError: Always; vendors with upsert grammar override this.
        """
        raise UpsertNotSupportedError(self.name)

    def build_create_table_statement(
        self, table: TableId, fields: Sequence[SinkRecordField]
    ) -> str:
        return self.statement_builder().create_table(table, fields)

    def build_alter_table_statements(
        self, table: TableId, fields: Sequence[SinkRecordField]
    ) -> list[str]:
        return self.statement_builder().alter_table(table, fields)


def upsert_update_columns(
    key_columns: Sequence[ColumnId], non_key_columns: Sequence[ColumnId]
) -> Sequence[ColumnId]:
    """Columns assigned by an upsert's update clause.

    Without non-key columns the keys are re-assigned to themselves so the
    statement stays valid.
    """
    return non_key_columns if non_key_columns else key_columns
