"""Unit tests for driver-type <-> portable-schema mapping."""
from __future__ import annotations

import pytest
from structlog.testing import capture_logs

from pipedialect import ConfigurationError, NumericMapping, UnmappedTypeError
from pipedialect.convert.type_bridge import (
    TypeBridge,
    classify_numeric,
    field_schema_for,
    integer_type_for_precision,
    portable_schema,
)
from pipedialect.schema import Nullability, SchemaType, SqlType
from tests.helpers import column


def _decimal_scale(sql_type: SqlType, precision: int, scale: int, mapping: NumericMapping) -> str:
    schema = field_schema_for(column(sql_type, precision=precision, scale=scale), mapping)
    assert schema is not None
    assert schema.logical_name == "decimal"
    assert schema.type == SchemaType.BYTES
    return schema.parameters["scale"]


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


class TestFixedTypes:
    @pytest.mark.parametrize(
        ("sql_type", "expected"),
        [
            (SqlType.BOOLEAN, SchemaType.BOOLEAN),
            (SqlType.BIT, SchemaType.INT8),
            (SqlType.TINYINT, SchemaType.INT8),
            (SqlType.SMALLINT, SchemaType.INT16),
            (SqlType.INTEGER, SchemaType.INT32),
            (SqlType.BIGINT, SchemaType.INT64),
            (SqlType.REAL, SchemaType.FLOAT32),
            (SqlType.FLOAT, SchemaType.FLOAT64),
            (SqlType.DOUBLE, SchemaType.FLOAT64),
            (SqlType.NVARCHAR, SchemaType.STRING),
            (SqlType.CLOB, SchemaType.STRING),
            (SqlType.SQLXML, SchemaType.STRING),
            (SqlType.VARBINARY, SchemaType.BYTES),
            (SqlType.BLOB, SchemaType.BYTES),
        ],
    )
    def test_primitive(self, sql_type: SqlType, expected: SchemaType) -> None:
        schema = field_schema_for(column(sql_type))
        assert schema is not None
        assert schema.type == expected
        assert schema.logical_name is None

    @pytest.mark.parametrize(
        ("sql_type", "expected"),
        [
            (SqlType.TINYINT, SchemaType.INT16),
            (SqlType.SMALLINT, SchemaType.INT32),
            (SqlType.INTEGER, SchemaType.INT64),
        ],
    )
    def test_unsigned_widens(self, sql_type: SqlType, expected: SchemaType) -> None:
        schema = field_schema_for(column(sql_type, signed=False))
        assert schema is not None and schema.type == expected

    def test_unsigned_bigint_stays_int64(self) -> None:
        schema = field_schema_for(column(SqlType.BIGINT, signed=False))
        assert schema is not None and schema.type == SchemaType.INT64

    @pytest.mark.parametrize(
        ("sql_type", "logical_name", "schema_type"),
        [
            (SqlType.DATE, "date", SchemaType.INT32),
            (SqlType.TIME, "time", SchemaType.INT32),
            (SqlType.TIMESTAMP, "timestamp", SchemaType.INT64),
        ],
    )
    def test_temporal(self, sql_type: SqlType, logical_name: str, schema_type: SchemaType) -> None:
        schema = field_schema_for(column(sql_type))
        assert schema is not None
        assert schema.logical_name == logical_name
        assert schema.type == schema_type

    def test_optional_unless_not_null(self) -> None:
        assert field_schema_for(column(SqlType.INTEGER)).optional is True
        assert field_schema_for(column(SqlType.INTEGER, nullability=Nullability.UNKNOWN)).optional
        not_null = field_schema_for(column(SqlType.INTEGER, nullability=Nullability.NOT_NULL))
        assert not_null.optional is False


class TestUnsupportedTypes:
    @pytest.mark.parametrize(
        "sql_type",
        [SqlType.NULL, SqlType.ARRAY, SqlType.STRUCT, SqlType.OTHER, SqlType.ROWID, SqlType.REF],
    )
    def test_no_mapping(self, sql_type: SqlType) -> None:
        assert field_schema_for(column(sql_type)) is None

    def test_warning_is_logged(self) -> None:
        with capture_logs() as logs:
            field_schema_for(column(SqlType.ARRAY, "tags"))
        warnings = [e for e in logs if e["event"] == "unsupported_sql_type"]
        assert len(warnings) == 1
        assert warnings[0]["log_level"] == "warning"
        assert warnings[0]["sql_type"] == "ARRAY"
        assert warnings[0]["column"] == "orders.tags"

    def test_pure_classification_does_not_log(self) -> None:
        with capture_logs() as logs:
            assert portable_schema(column(SqlType.ARRAY)) is None
        assert logs == []


class TestNumericMapping:
    def test_none_always_maps_to_decimal(self) -> None:
        assert _decimal_scale(SqlType.NUMERIC, 5, 0, NumericMapping.NONE) == "0"

    def test_precision_only(self) -> None:
        schema = field_schema_for(column(SqlType.NUMERIC, precision=5), NumericMapping.PRECISION_ONLY)
        assert schema.type == SchemaType.INT32
        assert _decimal_scale(SqlType.NUMERIC, 10, 2, NumericMapping.PRECISION_ONLY) == "2"

    def test_best_fit_integer(self) -> None:
        schema = field_schema_for(column(SqlType.NUMERIC, precision=5), NumericMapping.BEST_FIT)
        assert schema.type == SchemaType.INT32

    def test_best_fit_wide_precision_stays_decimal(self) -> None:
        assert _decimal_scale(SqlType.NUMERIC, 20, 0, NumericMapping.BEST_FIT) == "0"

    def test_best_fit_positive_scale_is_float(self) -> None:
        schema = field_schema_for(
            column(SqlType.NUMERIC, precision=10, scale=2), NumericMapping.BEST_FIT
        )
        assert schema.type == SchemaType.FLOAT64

    def test_best_fit_negative_scale_is_integer(self) -> None:
        assert classify_numeric(3, -2, NumericMapping.BEST_FIT) == SchemaType.INT16
        assert classify_numeric(3, -84, NumericMapping.BEST_FIT) == SchemaType.INT16

    def test_best_fit_unset_scale_is_decimal_at_highest_scale(self) -> None:
        assert classify_numeric(3, -127, NumericMapping.BEST_FIT) is None
        assert _decimal_scale(SqlType.NUMERIC, 3, -127, NumericMapping.BEST_FIT) == "127"

    def test_decimal_ignores_policy(self) -> None:
        assert _decimal_scale(SqlType.DECIMAL, 5, 0, NumericMapping.BEST_FIT) == "0"
        assert _decimal_scale(SqlType.DECIMAL, 12, -127, NumericMapping.NONE) == "127"

    @pytest.mark.parametrize(
        ("precision", "expected"),
        [
            (1, SchemaType.INT8),
            (2, SchemaType.INT8),
            (3, SchemaType.INT16),
            (4, SchemaType.INT16),
            (5, SchemaType.INT32),
            (9, SchemaType.INT32),
            (10, SchemaType.INT64),
            (18, SchemaType.INT64),
        ],
    )
    def test_integer_thresholds(self, precision: int, expected: SchemaType) -> None:
        assert integer_type_for_precision(precision) == expected

    def test_precision_nineteen_never_primitive(self) -> None:
        assert classify_numeric(19, 0, NumericMapping.PRECISION_ONLY) is None
        assert classify_numeric(19, 0, NumericMapping.BEST_FIT) is None
        assert classify_numeric(19, 4, NumericMapping.BEST_FIT) is None

    def test_numeric_classification_is_logged_at_debug(self) -> None:
        with capture_logs() as logs:
            field_schema_for(column(SqlType.NUMERIC, precision=5), NumericMapping.BEST_FIT)
        assert logs[0]["event"] == "numeric_column"
        assert logs[0]["log_level"] == "debug"
        assert logs[0]["mapping"] == "best_fit"


# ---------------------------------------------------------------------------
# Write path
# ---------------------------------------------------------------------------


class TestSqlType:
    @pytest.fixture()
    def bridge(self) -> TypeBridge:
        return TypeBridge.layered("Generic", NumericMapping.NONE, {}, {})

    def test_base_tables(self, bridge: TypeBridge) -> None:
        assert bridge.sql_type("decimal", {"scale": "2"}, SchemaType.BYTES) == "DECIMAL(38,2)"
        assert bridge.sql_type("date", {}, SchemaType.INT32) == "DATE"
        assert bridge.sql_type("timestamp", {}, SchemaType.INT64) == "TIMESTAMP"
        assert bridge.sql_type(None, {}, SchemaType.FLOAT64) == "DOUBLE PRECISION"
        assert bridge.sql_type(None, {}, SchemaType.STRING) == "VARCHAR(4000)"
        assert bridge.sql_type(None, {}, SchemaType.BOOLEAN) == "SMALLINT"

    def test_unset_scale_uses_highest_scale(self, bridge: TypeBridge) -> None:
        assert bridge.sql_type("decimal", {"scale": "-127"}, SchemaType.BYTES) == "DECIMAL(38,127)"

    def test_unknown_logical_name_falls_back_to_primitive(self, bridge: TypeBridge) -> None:
        assert bridge.sql_type("uuid", {}, SchemaType.STRING) == "VARCHAR(4000)"

    def test_unmapped_raises_configuration_error(self, bridge: TypeBridge) -> None:
        with pytest.raises(UnmappedTypeError) as info:
            bridge.sql_type(None, {}, SchemaType.ARRAY)
        assert isinstance(info.value, ConfigurationError)
        assert info.value.schema_type == "array"
        assert "Generic" in str(info.value)

    def test_vendor_tables_override_base(self) -> None:
        bridge = TypeBridge.layered(
            "Custom",
            NumericMapping.NONE,
            {"decimal": "NUMERIC(10,{scale})"},
            {SchemaType.STRING: "TEXT"},
        )
        assert bridge.sql_type("decimal", {"scale": "3"}, SchemaType.BYTES) == "NUMERIC(10,3)"
        assert bridge.sql_type(None, {}, SchemaType.STRING) == "TEXT"
        assert bridge.sql_type(None, {}, SchemaType.INT32) == "INTEGER"
