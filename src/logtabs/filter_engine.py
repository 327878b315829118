"""Evaluation pipeline: turn raw lines and filters into render directives."""

from typing import Iterable, Sequence

from .matcher import PatternCache, matches
from .models import Color, Filter, FilterKind, LogLine, Tab


def effective_filters(global_tab: Tab, active_tab: Tab | None) -> list[Filter]:
    """Collect the enabled filters that take part in evaluation.

    The global tab's filters come first, in stored order, followed by the
    active tab's filters. When the active tab is the global tab its filters
    are only counted once.

    Args:
        global_tab: The reserved global tab.
        active_tab: The currently active tab, or None.

    Returns:
        Enabled filters in precedence order.
    """
    filters = global_tab.enabled_filters()
    if active_tab is not None and active_tab.id != global_tab.id:
        filters.extend(active_tab.enabled_filters())
    return filters


def partition_filters(
    filters: Iterable[Filter],
) -> tuple[list[Filter], list[Filter], list[Filter]]:
    """Split enabled filters by kind, preserving relative order.

    Returns:
        (includes, excludes, highlights)
    """
    includes: list[Filter] = []
    excludes: list[Filter] = []
    highlights: list[Filter] = []

    for flt in filters:
        if not flt.enabled:
            continue
        if flt.kind is FilterKind.INCLUDE:
            includes.append(flt)
        elif flt.kind is FilterKind.EXCLUDE:
            excludes.append(flt)
        elif flt.kind is FilterKind.HIGHLIGHT:
            highlights.append(flt)

    return includes, excludes, highlights


def evaluate_line(
    index: int,
    text: str,
    includes: Sequence[Filter],
    excludes: Sequence[Filter],
    highlights: Sequence[Filter],
    cache: PatternCache | None = None,
) -> LogLine:
    """Decide visibility and styling for a single line.

    1. With no include filters every line starts visible. Otherwise a line
       is visible only if an include matches, and the first matching include
       supplies its colors.
    2. Any matching exclude hides the line, whatever the includes said.
    3. If the line is still visible, the first matching highlight replaces
       its colors.
    """
    visible = not includes
    text_color: Color | None = None
    background_color: Color | None = None

    for flt in includes:
        if matches(text, flt, cache):
            visible = True
            text_color = flt.text_color
            background_color = flt.background_color
            break

    for flt in excludes:
        if matches(text, flt, cache):
            visible = False
            break

    if visible:
        for flt in highlights:
            if matches(text, flt, cache):
                text_color = flt.text_color
                background_color = flt.background_color
                break

    return LogLine(
        index=index,
        text=text,
        visible=visible,
        text_color=text_color,
        background_color=background_color,
    )


def evaluate(
    lines: Sequence[str],
    filters: Iterable[Filter],
    cache: PatternCache | None = None,
) -> list[LogLine]:
    """Evaluate every line against the effective filter set.

    This is always a full recomputation; there is no incremental path.
    Disabled filters are skipped, so toggling a filter off gives the same
    result as removing it.

    Args:
        lines: Raw log lines.
        filters: Filters in precedence order (global first, then active tab).
        cache: Compiled-pattern cache. A private one is used if omitted.

    Returns:
        One LogLine per input line, in input order.
    """
    if cache is None:
        cache = PatternCache()

    includes, excludes, highlights = partition_filters(filters)

    return [
        evaluate_line(index, text, includes, excludes, highlights, cache)
        for index, text in enumerate(lines)
    ]


class FilterStats:
    """Statistics tracker for evaluated lines.

    Useful for reporting how much of a log a filter set hides.
    """

    def __init__(self) -> None:
        self.total_lines: int = 0
        self.visible_lines: int = 0
        self.hidden_lines: int = 0
        self.styled_lines: int = 0

    def record(self, line: LogLine) -> None:
        """Record one evaluated line in the stats."""
        self.total_lines += 1

        if line.visible:
            self.visible_lines += 1
            if line.is_styled:
                self.styled_lines += 1
        else:
            self.hidden_lines += 1

    def record_all(self, lines: Iterable[LogLine]) -> None:
        """Record every line of an evaluation."""
        for line in lines:
            self.record(line)

    @property
    def filter_rate(self) -> float:
        """Calculate the percentage of lines that were hidden."""
        if self.total_lines == 0:
            return 0.0
        return (self.hidden_lines / self.total_lines) * 100

    def summary(self) -> str:
        """Generate a summary string of filter stats."""
        lines = [
            f"Total lines: {self.total_lines}",
            f"Visible: {self.visible_lines}",
            f"Hidden: {self.hidden_lines} ({self.filter_rate:.1f}%)",
            f"Styled: {self.styled_lines}",
        ]
        return "\n".join(lines)
