"""Filter and tab store with full recomputation after every mutation."""

import logging
import uuid
from pathlib import Path
from typing import Callable

from .filter_engine import effective_filters, evaluate
from .log_source import read_log_file, split_lines
from .matcher import PatternCache
from .models import (
    GLOBAL_TAB_ID,
    GLOBAL_TAB_NAME,
    Color,
    Filter,
    FilterKind,
    LogLine,
    Tab,
)
from .tab_io import TabParseError, dumps_tab, loads_tab

logger = logging.getLogger(__name__)

Listener = Callable[[list[LogLine]], None]


class LogStore:
    """Holds the loaded log, the tabs and the derived render directives.

    ``processed_lines`` is a cache derived from the raw lines and the
    effective filter set. It is rebuilt in full whenever either changes and
    is never edited directly. Interested parties call ``subscribe`` to be
    handed each fresh result.

    Removing or renaming the global tab is silently ignored rather than
    treated as an error.

    Attributes:
        raw_lines: Lines of the loaded log.
        path: Where the log was loaded from, if anywhere.
        processed_lines: The most recent evaluation result.
        active_tab_id: Id of the tab evaluated alongside the global tab.
    """

    def __init__(self) -> None:
        self.raw_lines: list[str] = []
        self.path: Path | None = None
        self.processed_lines: list[LogLine] = []
        self.active_tab_id: str = GLOBAL_TAB_ID

        self._tabs: list[Tab] = [Tab(id=GLOBAL_TAB_ID, name=GLOBAL_TAB_NAME)]
        self._cache = PatternCache()
        self._listeners: list[Listener] = []

    # --- Log content ---

    def load_content(self, content: str, path: Path | None = None) -> None:
        """Replace the loaded log with new content."""
        self.raw_lines = split_lines(content)
        self.path = path
        logger.debug("Loaded %d lines from %s", len(self.raw_lines), path or "<memory>")
        self.apply_filters()

    def load_file(self, path: Path) -> None:
        """Read a log file and load its content.

        Raises:
            OSError: If the file can't be read.
        """
        self.load_content(read_log_file(path), path)

    def reload(self) -> bool:
        """Re-read the current log file from disk.

        Returns:
            False if no file has been loaded.

        Raises:
            OSError: If the file can't be read.
        """
        if self.path is None:
            return False
        self.load_file(self.path)
        return True

    # --- Tabs ---

    @property
    def tabs(self) -> list[Tab]:
        """All tabs, global first. The list is a copy."""
        return list(self._tabs)

    @property
    def global_tab(self) -> Tab:
        """The protected global tab."""
        return self._tabs[0]

    @property
    def active_tab(self) -> Tab:
        """The active tab, falling back to the global tab."""
        tab = self.get_tab(self.active_tab_id)
        return tab if tab is not None else self.global_tab

    def get_tab(self, tab_id: str) -> Tab | None:
        """Return the tab with this id, or None."""
        for tab in self._tabs:
            if tab.id == tab_id:
                return tab
        return None

    def add_tab(self, name: str) -> Tab:
        """Create a new empty tab and make it active."""
        tab = Tab(id=uuid.uuid4().hex, name=name)
        self._tabs.append(tab)
        self.active_tab_id = tab.id
        self.apply_filters()
        return tab

    def rename_tab(self, tab_id: str, name: str) -> bool:
        """Rename a tab. Renaming doesn't change evaluation, so no recompute.

        Returns:
            False if the tab is the global tab or doesn't exist.
        """
        if tab_id == GLOBAL_TAB_ID:
            logger.debug("Ignoring rename of the global tab")
            return False
        tab = self.get_tab(tab_id)
        if tab is None:
            return False
        tab.name = name
        return True

    def remove_tab(self, tab_id: str) -> bool:
        """Delete a tab and its filters.

        Deleting the active tab activates the global tab.

        Returns:
            False if the tab is the global tab or doesn't exist.
        """
        if tab_id == GLOBAL_TAB_ID:
            logger.debug("Ignoring removal of the global tab")
            return False
        tab = self.get_tab(tab_id)
        if tab is None:
            return False

        self._tabs.remove(tab)
        if self.active_tab_id == tab_id:
            self.active_tab_id = GLOBAL_TAB_ID
        self.apply_filters()
        return True

    def set_active_tab(self, tab_id: str) -> None:
        """Select the tab evaluated alongside the global tab.

        Raises:
            KeyError: If no tab has this id.
        """
        if self.get_tab(tab_id) is None:
            raise KeyError(tab_id)
        self.active_tab_id = tab_id
        self.apply_filters()

    # --- Filters ---

    def _locate(self, filter_id: str) -> tuple[Tab, int] | None:
        for tab in self._tabs:
            index = tab.index_of(filter_id)
            if index is not None:
                return tab, index
        return None

    def get_filter(self, filter_id: str) -> Filter | None:
        """Return the filter with this id from any tab, or None."""
        found = self._locate(filter_id)
        if found is None:
            return None
        tab, index = found
        return tab.filters[index]

    def add_filter(
        self,
        pattern: str,
        kind: FilterKind = FilterKind.HIGHLIGHT,
        *,
        case_sensitive: bool = False,
        is_regex: bool = False,
        text_color: Color | None = None,
        background_color: Color | None = None,
        enabled: bool = True,
        tab_id: str | None = None,
    ) -> Filter:
        """Append a new filter to a tab (the active tab by default).

        Raises:
            ValueError: If the pattern is empty.
            KeyError: If ``tab_id`` names no tab.
        """
        tab = self.active_tab if tab_id is None else self.get_tab(tab_id)
        if tab is None:
            raise KeyError(tab_id)

        flt = Filter.create(
            pattern,
            kind,
            case_sensitive=case_sensitive,
            is_regex=is_regex,
            text_color=text_color,
            background_color=background_color,
            enabled=enabled,
        )
        tab.filters.append(flt)
        self.apply_filters()
        return flt

    def update_filter(self, filter_id: str, **changes) -> Filter | None:
        """Patch fields of a filter in place, keeping its position.

        Returns:
            The updated filter, or None if no filter has this id.

        Raises:
            ValueError: If the patch changes the id, empties the pattern, or
                sets a kind or color of the wrong type.
        """
        found = self._locate(filter_id)
        if found is None:
            return None
        tab, index = found

        updated = tab.filters[index].with_changes(**changes)
        tab.filters[index] = updated
        self.apply_filters()
        return updated

    def remove_filter(self, filter_id: str) -> bool:
        """Delete a filter from its tab. Returns False if no filter has this id."""
        found = self._locate(filter_id)
        if found is None:
            return False
        tab, index = found

        del tab.filters[index]
        self.apply_filters()
        return True

    def toggle_filter(self, filter_id: str) -> Filter | None:
        """Flip a filter's enabled flag. Returns None if no filter has this id."""
        flt = self.get_filter(filter_id)
        if flt is None:
            return None
        return self.update_filter(filter_id, enabled=not flt.enabled)

    def set_filter_enabled(self, filter_id: str, enabled: bool) -> Filter | None:
        """Set a filter's enabled flag. Returns None if no filter has this id."""
        return self.update_filter(filter_id, enabled=enabled)

    def move_filter(self, filter_id: str, new_index: int) -> bool:
        """Move a filter to a new position within its own tab.

        The index is clamped to the bounds of the tab.

        Returns:
            False if no filter has this id.
        """
        found = self._locate(filter_id)
        if found is None:
            return False
        tab, index = found

        flt = tab.filters.pop(index)
        new_index = max(0, min(new_index, len(tab.filters)))
        tab.filters.insert(new_index, flt)
        self.apply_filters()
        return True

    # --- Persistence ---

    def save_tab_to_json(self, tab_id: str) -> str:
        """Serialize a tab's name and filters.

        Raises:
            KeyError: If no tab has this id.
        """
        tab = self.get_tab(tab_id)
        if tab is None:
            raise KeyError(tab_id)
        return dumps_tab(tab)

    def load_tab_from_json(self, tab_id: str, text: str) -> bool:
        """Replace a tab's filters with those of a serialized tab.

        Every loaded filter gets a fresh id. On any error the tab is left
        exactly as it was.

        Returns:
            True if the filters were replaced.
        """
        tab = self.get_tab(tab_id)
        if tab is None:
            logger.error("Cannot load filters into unknown tab %s", tab_id)
            return False

        try:
            _, filters = loads_tab(text)
        except TabParseError as e:
            logger.error("Failed to load filters from JSON: %s", e)
            return False

        tab.filters = filters
        self.apply_filters()
        return True

    def import_tab(self, text: str) -> Tab | None:
        """Create and activate a new tab from a serialized tab.

        Returns:
            The new tab, or None if the document is invalid.
        """
        try:
            name, filters = loads_tab(text)
        except TabParseError as e:
            logger.error("Failed to import tab from JSON: %s", e)
            return None

        tab = Tab(id=uuid.uuid4().hex, name=name, filters=filters)
        self._tabs.append(tab)
        self.active_tab_id = tab.id
        self.apply_filters()
        return tab

    # --- Evaluation ---

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a callback for every recomputation.

        Returns:
            A function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def apply_filters(self) -> list[LogLine]:
        """Recompute every line from the raw lines and effective filters."""
        filters = effective_filters(self.global_tab, self.active_tab)
        self._cache.prune(flt for tab in self._tabs for flt in tab.filters)

        self.processed_lines = evaluate(self.raw_lines, filters, self._cache)

        for listener in list(self._listeners):
            listener(self.processed_lines)
        return self.processed_lines

    def visible_lines(self) -> list[LogLine]:
        """Processed lines that are not hidden."""
        return [line for line in self.processed_lines if line.visible]
