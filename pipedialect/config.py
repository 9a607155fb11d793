"""Resolved configuration consumed by every dialect.

The surrounding pipeline parses its own settings and hands a
:class:`DialectConfig` to :func:`pipedialect.create_dialect`::

    config = DialectConfig(
        connection_url="mysql+pymysql://db.internal/sales",
        connection_user="loader",
        connection_password="s3cret",
        numeric_mapping=NumericMapping.BEST_FIT,
    )
    dialect = pipedialect.create_dialect(config)
"""
from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class NumericMapping(str, Enum):
    """How generic ``NUMERIC`` columns are classified into portable kinds.

    Attributes:
        NONE: Always map to the decimal logical type.
        PRECISION_ONLY: Zero-scale columns narrower than 19 digits become
            the smallest signed integer that holds them.
        BEST_FIT: As ``PRECISION_ONLY`` for scales in ``[-84, 0]``, and
            positive-scale columns narrower than 19 digits become float64.
    """

    NONE = "none"
    PRECISION_ONLY = "precision_only"
    BEST_FIT = "best_fit"


class DialectConfig(BaseModel):
    """Connection and mapping settings for a dialect instance.

    Attributes:
        connection_url: Database URL; SQLAlchemy form (``mysql+pymysql://...``)
            or JDBC form (``jdbc:mysql://...``).
        connection_user: Optional user name applied to the URL.
        connection_password: Optional password applied to the URL.
        numeric_mapping: Classification policy for ``NUMERIC`` columns.
        dialect_name: Force a dialect by provider name instead of scoring the URL.
        catalog_pattern: Catalog LIKE pattern used by catalog introspection.
        schema_pattern: Schema LIKE pattern; ``None`` uses the default schema.
        table_types: Table types listed by :meth:`table_names` (``TABLE``, ``VIEW``).
        connection_properties: Extra driver ``connect_args``.
    """

    model_config = ConfigDict(extra="forbid")

    connection_url: str
    connection_user: str | None = None
    connection_password: SecretStr | None = None
    numeric_mapping: NumericMapping = NumericMapping.NONE
    dialect_name: str | None = None
    catalog_pattern: str | None = None
    schema_pattern: str | None = None
    table_types: list[str] = Field(default_factory=lambda: ["TABLE"])
    connection_properties: dict[str, Any] = Field(default_factory=dict)
