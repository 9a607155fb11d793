"""Pydantic models for the portable, vendor-neutral record schema.

The read path appends one :class:`FieldSchema` per mapped driver column to a
:class:`SchemaBuilder`; the write path consumes :class:`SinkRecordField`
descriptions produced by the surrounding pipeline::

    builder = SchemaBuilder("orders")
    builder.field("id", FieldSchema.of(SchemaType.INT64))
    builder.field("total", decimal_schema(2, optional=True))
    schema = builder.build()
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pipedialect.schema.types import DECIMAL_SCALE, LogicalType, SchemaType


class FieldSchema(BaseModel):
    """Schema of a single portable field.

    Attributes:
        type: Primitive schema type.
        optional: Whether the field may hold ``None``.
        logical_name: Optional logical refinement (see :class:`LogicalType`).
        parameters: Logical-type parameters, e.g. ``{"scale": "2"}``.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    type: SchemaType
    optional: bool = False
    logical_name: str | None = None
    parameters: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def of(cls, schema_type: SchemaType, optional: bool = False) -> FieldSchema:
        """Return a plain primitive schema."""
        return cls(type=schema_type, optional=optional)

    @property
    def scale(self) -> int | None:
        """Decimal scale, or ``None`` for non-decimal schemas."""
        raw = self.parameters.get(DECIMAL_SCALE)
        return int(raw) if raw is not None else None


def decimal_schema(scale: int, optional: bool = False) -> FieldSchema:
    """Fixed-point decimal with an explicit scale."""
    return FieldSchema(
        type=SchemaType.BYTES,
        optional=optional,
        logical_name=LogicalType.DECIMAL.value,
        parameters={DECIMAL_SCALE: str(scale)},
    )


def date_schema(optional: bool = False) -> FieldSchema:
    """Calendar date (days since the epoch)."""
    return FieldSchema(
        type=SchemaType.INT32, optional=optional, logical_name=LogicalType.DATE.value
    )


def time_schema(optional: bool = False) -> FieldSchema:
    """Time of day (milliseconds since midnight)."""
    return FieldSchema(
        type=SchemaType.INT32, optional=optional, logical_name=LogicalType.TIME.value
    )


def timestamp_schema(optional: bool = False) -> FieldSchema:
    """Instant (milliseconds since the epoch, UTC)."""
    return FieldSchema(
        type=SchemaType.INT64, optional=optional, logical_name=LogicalType.TIMESTAMP.value
    )


class RecordSchema(BaseModel):
    """An ordered collection of named portable fields.

    Attributes:
        name: Optional record name (usually the table name).
        fields: Field schemas keyed by field name, in column order.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str | None = None
    fields: dict[str, FieldSchema] = Field(default_factory=dict)

    @property
    def field_names(self) -> list[str]:
        """Returns the field names in order."""
        return list(self.fields)

    def field(self, name: str) -> FieldSchema | None:
        """Returns the schema of the named field, or ``None``."""
        return self.fields.get(name)


class SchemaBuilder:
    """Accumulates fields for a :class:`RecordSchema`.

    Args:
        name: Optional record name.
    """

    def __init__(self, name: str | None = None) -> None:
        self._name = name
        self._fields: dict[str, FieldSchema] = {}

    def field(self, name: str, schema: FieldSchema) -> SchemaBuilder:
        """Append a field.

        Raises:
            ValueError: If a field with the same name was already added.
        """
        if name in self._fields:
            raise ValueError(f"Cannot create field because of field name duplication {name}")
        self._fields[name] = schema
        return self

    @property
    def field_names(self) -> list[str]:
        return list(self._fields)

    def build(self) -> RecordSchema:
        return RecordSchema(name=self._name, fields=dict(self._fields))


class SinkRecordField(BaseModel):
    """A portable field description used to generate DDL.

    Attributes:
        name: Column name.
        schema_type: Primitive schema type.
        logical_name: Optional logical name (decimal, date, time, timestamp).
        parameters: Logical-type parameters (e.g. decimal scale).
        optional: Whether the column accepts NULL.
        primary_key: Whether the column is part of the primary key.
        default_value: Optional default rendered as a SQL literal.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    schema_type: SchemaType
    logical_name: str | None = None
    parameters: dict[str, str] = Field(default_factory=dict)
    optional: bool = False
    primary_key: bool = False
    default_value: Any = None

    @classmethod
    def from_schema(
        cls,
        name: str,
        schema: FieldSchema,
        *,
        primary_key: bool = False,
        default_value: Any = None,
    ) -> SinkRecordField:
        """Describe a column from a portable :class:`FieldSchema`."""
        return cls(
            name=name,
            schema_type=schema.type,
            logical_name=schema.logical_name,
            parameters=dict(schema.parameters),
            optional=schema.optional,
            primary_key=primary_key,
            default_value=default_value,
        )
