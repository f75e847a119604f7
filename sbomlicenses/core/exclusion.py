"""Wildcard-based package exclusion."""
import re
from collections.abc import Iterable

# Compiled patterns keyed by the raw wildcard text, shared by every matcher
_PATTERN_CACHE: dict[str, re.Pattern[str]] = {}


def wildcard_to_regex(pattern: str) -> re.Pattern[str]:
    """
    Compile a wildcard pattern into a case-insensitive whole-string regex.

    ``*`` matches any run of characters (including none) and ``?`` exactly
    one character; everything else is literal.
    """
    cached = _PATTERN_CACHE.get(pattern)
    if cached is not None:
        return cached

    regex = re.escape(pattern).replace(r'\*', '.*').replace(r'\?', '.')
    compiled = re.compile(regex, re.IGNORECASE | re.DOTALL)
    return _PATTERN_CACHE.setdefault(pattern, compiled)


class ExclusionMatcher:
    """Decides whether a package is skipped based on wildcard patterns."""

    def __init__(self, patterns: Iterable[str] = ()):
        self.patterns = [p for p in patterns if p and p.strip()]
        self._regexes = [wildcard_to_regex(p) for p in self.patterns]

    @classmethod
    def compile(cls, patterns: Iterable[str]) -> 'ExclusionMatcher':
        return cls(patterns)

    def is_excluded(self, package_name: str | None) -> bool:
        if not package_name or not package_name.strip():
            return False
        return any(regex.fullmatch(package_name) for regex in self._regexes)

    def __repr__(self) -> str:
        return f"ExclusionMatcher(patterns={self.patterns!r})"
