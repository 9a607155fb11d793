"""pipedialect metadata: catalog reflection and result-cursor introspection."""
from pipedialect.metadata.catalog import (
    column_definition,
    matching_tables,
    primary_key_names,
    sql_type_for,
    type_info_for,
)
from pipedialect.metadata.cursor import column_definitions_from_description
from pipedialect.metadata.patterns import escape_like, like_matcher

__all__ = [
    "column_definition",
    "matching_tables",
    "primary_key_names",
    "sql_type_for",
    "type_info_for",
    "column_definitions_from_description",
    "escape_like",
    "like_matcher",
]
