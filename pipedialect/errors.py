"""Custom exception hierarchy for pipedialect.

All public errors inherit from PipeDialectError so callers can catch the base
class for any pipedialect-specific failure.  Driver errors raised while reading
catalog or cursor metadata are *not* wrapped: they reach the caller as the
original :class:`sqlalchemy.exc.SQLAlchemyError`.
"""
from __future__ import annotations


class PipeDialectError(Exception):
    """Base exception for all pipedialect errors."""


class ConfigurationError(PipeDialectError):
    """Raised when the configuration cannot be satisfied by any dialect."""


class NoMatchingDialectError(ConfigurationError):
    """Raised when no registered provider can handle a connection target.

    Args:
        target: The URL or provider name that was looked up.
        providers: Names of the providers that were consulted.
    """

    def __init__(self, target: str, providers: list[str]) -> None:
        super().__init__(
            f"Unable to find a dialect for '{target}'. Registered dialects: {providers}."
        )
        self.target = target
        self.providers = providers


class UnmappedTypeError(ConfigurationError):
    """Raised when a portable field has no DDL column type in a dialect.

    Args:
        logical_name: The field's logical name, if any.
        schema_type: The field's primitive schema type.
        dialect: The dialect that was asked for the mapping.
    """

    def __init__(self, logical_name: str | None, schema_type: str, dialect: str) -> None:
        super().__init__(
            f"{logical_name} ({schema_type}) type doesn't have a mapping to the "
            f"SQL database column type in the {dialect} dialect."
        )
        self.logical_name = logical_name
        self.schema_type = schema_type
        self.dialect = dialect


class ConnectError(PipeDialectError):
    """Raised when a dialect cannot obtain what it needs from the database."""


class UpsertNotSupportedError(PipeDialectError):
    """Raised when an upsert is requested from a dialect without upsert grammar."""

    def __init__(self, dialect: str) -> None:
        super().__init__(f"The {dialect} dialect does not support upsert statements.")
        self.dialect = dialect


class UnsupportedValueTypeError(PipeDialectError):
    """Raised when a literal is requested for a portable type with no SQL form."""

    def __init__(self, schema_type: str) -> None:
        super().__init__(f"Unsupported type for column value: {schema_type}")
        self.schema_type = schema_type


class LargeObjectSizeError(PipeDialectError, OSError):
    """Raised when a BLOB/CLOB value is larger than can be materialised.

    Args:
        kind: The large-object kind (``'BLOB'``, ``'CLOB'``, ``'NCLOB'``).
        limit: The maximum supported length.
    """

    def __init__(self, kind: str, limit: int) -> None:
        super().__init__(f"Can't process {kind}s longer than {limit}")
        self.kind = kind
        self.limit = limit
