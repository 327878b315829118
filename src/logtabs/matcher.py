"""Match a single filter against a single line of text."""

import logging
import re
from typing import Iterable, Pattern

from .models import Filter

logger = logging.getLogger(__name__)


# Sentinel for patterns that failed to compile
_INVALID = object()


def compile_filter(flt: Filter) -> Pattern[str] | None:
    """Compile a regex filter's pattern.

    Returns:
        The compiled pattern, or None if the pattern is not a valid regex.
    """
    flags = 0 if flt.case_sensitive else re.IGNORECASE
    try:
        return re.compile(flt.pattern, flags)
    except re.error as e:
        logger.warning("Invalid regex pattern %r in filter %s: %s", flt.pattern, flt.id, e)
        return None


class PatternCache:
    """Compiled regex patterns keyed by ``(id, pattern, case_sensitive, is_regex)``.

    Editing any of those fields on a filter produces a new key, so a stale
    entry is never reused. Invalid patterns are cached as well, which keeps
    them from being recompiled (and re-logged) for every line.
    """

    def __init__(self) -> None:
        self._compiled: dict[tuple[str, str, bool, bool], object] = {}

    def __len__(self) -> int:
        """Number of cached patterns, including failed compiles."""
        return len(self._compiled)

    def get(self, flt: Filter) -> Pattern[str] | None:
        """Return the compiled pattern for a filter, or None if it is invalid."""
        key = flt.cache_key
        compiled = self._compiled.get(key)
        if compiled is None:
            compiled = compile_filter(flt)
            if compiled is None:
                compiled = _INVALID
            self._compiled[key] = compiled
        if compiled is _INVALID:
            return None
        return compiled

    def prune(self, live_filters: Iterable[Filter]) -> None:
        """Drop entries that no longer belong to a live filter."""
        live = {flt.cache_key for flt in live_filters}
        for key in list(self._compiled):
            if key not in live:
                del self._compiled[key]

    def clear(self) -> None:
        """Forget every compiled pattern."""
        self._compiled.clear()


def matches(line: str, flt: Filter, cache: PatternCache | None = None) -> bool:
    """Check whether a filter matches a line.

    Literal filters test substring containment, case-folding both sides
    unless the filter is case sensitive. Regex filters search anywhere in
    the line. A regex that does not compile never matches and never raises.

    Args:
        line: The line of text to test.
        flt: The filter to apply.
        cache: Optional compiled-pattern cache.

    Returns:
        True if the filter matches the line.
    """
    if not flt.is_regex:
        if flt.case_sensitive:
            return flt.pattern in line
        return flt.pattern.casefold() in line.casefold()

    if cache is not None:
        compiled = cache.get(flt)
    else:
        compiled = compile_filter(flt)

    if compiled is None:
        return False
    return compiled.search(line) is not None
