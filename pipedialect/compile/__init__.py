"""pipedialect compilation layer: identifier rules and statement text."""
from pipedialect.compile.rules import ExpressionRenderer, IdentifierRules
from pipedialect.compile.statements import StatementBuilder

__all__ = [
    "ExpressionRenderer",
    "IdentifierRules",
    "StatementBuilder",
]
