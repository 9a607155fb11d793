"""Result-cursor introspection from DB-API ``cursor.description``.

Each description entry is the PEP 249 seven-tuple ``(name, type_code,
display_size, internal_size, precision, scale, null_ok)``; drivers may leave
any entry after the name as ``None``.
"""
from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from pipedialect.schema.definitions import ColumnDefinition, Mutability, Nullability
from pipedialect.schema.identifiers import ColumnId, TableId
from pipedialect.schema.types import NUMERIC_TYPE_SCALE_UNSET, SqlType, TypeNameInfo

#: Driver ``type_code`` -> classified driver type.
TypeResolver = Callable[[Any], TypeNameInfo]


def _scale(scale: int | None, precision: int | None, info: TypeNameInfo) -> int:
    if scale is not None:
        return scale
    # A bare NUMERIC/DECIMAL with no declared precision carries no scale either
    if info.sql_type in (SqlType.NUMERIC, SqlType.DECIMAL) and not (precision or info.precision):
        return NUMERIC_TYPE_SCALE_UNSET
    return info.scale


def _nullability(null_ok: Any) -> Nullability:
    if null_ok is None:
        return Nullability.UNKNOWN
    return Nullability.NULL if null_ok else Nullability.NOT_NULL


def column_definitions_from_description(
    description: Sequence[Sequence[Any]],
    table_id: TableId,
    resolve_type: TypeResolver,
) -> dict[ColumnId, ColumnDefinition]:
    """Describe the columns of an executed statement.

    Result columns are never reported as primary keys or auto-increment, and
    their writability is unknown to the driver.
    """
    columns: dict[ColumnId, ColumnDefinition] = {}
    for entry in description:
        name, type_code, _display, internal_size, precision, scale, null_ok = (
            tuple(entry) + (None,) * 7
        )[:7]
        info = resolve_type(type_code)
        column_id = ColumnId(table_id, name)
        columns[column_id] = ColumnDefinition(
            id=column_id,
            sql_type=info.sql_type,
            type_name="" if type_code is None else str(type_code),
            nullability=_nullability(null_ok),
            mutability=Mutability.MAYBE_WRITABLE,
            precision=precision or internal_size or info.precision or 0,
            scale=_scale(scale, precision, info),
            signed=info.signed,
        )
    return columns
