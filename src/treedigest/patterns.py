"""
Glob matching for include/exclude patterns.

Patterns match the whole relative path as a single string: `*` matches any run
of characters, path separators included, `?` matches exactly one character, and
everything else matches literally and case-sensitively.
"""

from __future__ import annotations

import re
from functools import cache

# Characters accepted in user-supplied patterns.
_VALID_PATTERN_RE = re.compile(r"[a-zA-Z0-9\-_./+*]+")


@cache
def _compile(pattern: str) -> re.Pattern[str]:
    parts: list[str] = []
    for char in pattern:
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.DOTALL)


def matches(path: str, pattern: str) -> bool:
    """Check whether `path` matches `pattern`, anchored at both ends."""
    return _compile(pattern).fullmatch(path) is not None


def matches_any(path: str, patterns: frozenset[str]) -> bool:
    # Empty patterns never match.
    return any(pattern and matches(path, pattern) for pattern in patterns)


def is_valid_pattern(pattern: str) -> bool:
    return _VALID_PATTERN_RE.fullmatch(pattern) is not None
