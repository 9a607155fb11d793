"""SQL ``LIKE`` patterns for catalog lookups.

``%`` matches any run of characters, ``_`` a single character and ``\\``
escapes either.  A ``None`` pattern matches everything.
"""
from __future__ import annotations

import re
from collections.abc import Callable

NameMatcher = Callable[[str | None], bool]


def like_to_regex(pattern: str) -> str:
    parts: list[str] = []
    escaped = False
    for ch in pattern:
        if escaped:
            parts.append(re.escape(ch))
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch == "%":
            parts.append(".*")
        elif ch == "_":
            parts.append(".")
        else:
            parts.append(re.escape(ch))
    if escaped:
        parts.append(re.escape("\\"))
    return "".join(parts)


def like_matcher(pattern: str | None, case_insensitive: bool = False) -> NameMatcher:
    """Return a predicate testing names against a ``LIKE`` pattern."""
    if pattern is None:
        return lambda name: True
    flags = re.DOTALL | (re.IGNORECASE if case_insensitive else 0)
    compiled = re.compile(like_to_regex(pattern), flags)
    return lambda name: compiled.fullmatch(name or "") is not None


def escape_like(name: str) -> str:
    """Escape a literal name so it only matches itself."""
    return name.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
