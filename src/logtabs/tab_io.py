"""Save and load tab filter sets as JSON documents."""

import json
from pathlib import Path
from typing import Any

from .models import Color, Filter, FilterKind, Tab


class TabParseError(Exception):
    """Error parsing a tab document."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        if path:
            super().__init__(f"{path}: {message}")
        else:
            super().__init__(message)


# --- Serialization ---

def filter_to_document(flt: Filter) -> dict[str, Any]:
    """Convert a filter to its document form. The id is not persisted."""
    return {
        "text": flt.pattern,
        "textColor": str(flt.text_color) if flt.text_color else "",
        "backgroundColor": str(flt.background_color) if flt.background_color else "",
        "type": flt.kind.value,
        "caseSensitive": flt.case_sensitive,
        "isRegex": flt.is_regex,
        "enabled": flt.enabled,
    }


def tab_to_document(tab: Tab) -> dict[str, Any]:
    """Convert a tab to a ``{"name", "filters"}`` document."""
    return {
        "name": tab.name,
        "filters": [filter_to_document(flt) for flt in tab.filters],
    }


def dumps_tab(tab: Tab) -> str:
    """Serialize a tab to indented JSON."""
    return json.dumps(tab_to_document(tab), indent=2)


# --- Parsing ---

def loads_tab(text: str) -> tuple[str, list[Filter]]:
    """Parse a tab document from JSON text.

    Args:
        text: Raw JSON content.

    Returns:
        The tab name and its filters, each with a freshly assigned id.

    Raises:
        TabParseError: If the JSON is malformed or the document is invalid.
    """
    try:
        data = json.loads(text)
    except (ValueError, RecursionError) as e:
        raise TabParseError(f"Invalid JSON: {e}") from e
    return parse_tab_document(data)


def parse_tab_document(data: Any) -> tuple[str, list[Filter]]:
    """Validate a decoded tab document and build its filters.

    The whole document is validated before anything is returned, so a
    caller either gets every filter or an error.

    Raises:
        TabParseError: If any part of the document is invalid.
    """
    if not isinstance(data, dict):
        raise TabParseError("Tab document must be an object")

    name = data.get("name")
    if not isinstance(name, str):
        raise TabParseError("Expected a string", "name")

    raw_filters = data.get("filters")
    if not isinstance(raw_filters, list):
        raise TabParseError("Expected a list", "filters")

    filters = [
        parse_filter_document(raw, f"filters[{i}]")
        for i, raw in enumerate(raw_filters)
    ]
    return name, filters


def parse_filter_document(data: Any, path: str = "filter") -> Filter:
    """Validate a single filter document and create a Filter with a new id.

    Raises:
        TabParseError: If the filter document is invalid.
    """
    if not isinstance(data, dict):
        raise TabParseError("Filter must be an object", path)

    text = data.get("text")
    if not isinstance(text, str) or not text:
        raise TabParseError("Expected a non-empty string", f"{path}.text")

    kind_value = data.get("type")
    if not isinstance(kind_value, str):
        raise TabParseError("Expected a string", f"{path}.type")
    try:
        kind = FilterKind.from_str(kind_value)
    except ValueError as e:
        raise TabParseError(str(e), f"{path}.type") from e

    return Filter.create(
        text,
        kind,
        case_sensitive=_require_bool(data, "caseSensitive", path),
        is_regex=_require_bool(data, "isRegex", path),
        text_color=_optional_color(data, "textColor", path),
        background_color=_optional_color(data, "backgroundColor", path),
        enabled=_require_bool(data, "enabled", path),
    )


def _require_bool(data: dict[str, Any], key: str, path: str) -> bool:
    value = data.get(key)
    if not isinstance(value, bool):
        raise TabParseError("Expected a boolean", f"{path}.{key}")
    return value


def _optional_color(data: dict[str, Any], key: str, path: str) -> Color | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise TabParseError("Expected a color string", f"{path}.{key}")
    try:
        return Color.parse_optional(value)
    except ValueError as e:
        raise TabParseError(str(e), f"{path}.{key}") from e


# --- Files ---

def save_tab_file(tab: Tab, path: Path) -> None:
    """Write a tab document to disk."""
    path.write_text(dumps_tab(tab) + "\n", encoding="utf-8")


def load_tab_file(path: Path) -> tuple[str, list[Filter]]:
    """Read and parse a tab document from disk.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        TabParseError: If the file contains an invalid document.
    """
    content = path.read_text(encoding="utf-8")
    return loads_tab(content)


# --- Sample file generation ---

SAMPLE_TAB_DOCUMENT = """\
{
  "name": "Errors",
  "filters": [
    {
      "text": "ERROR|FATAL",
      "textColor": "#ffffff",
      "backgroundColor": "#dc2626",
      "type": "highlight",
      "caseSensitive": false,
      "isRegex": true,
      "enabled": true
    },
    {
      "text": "WARN",
      "textColor": "#000000",
      "backgroundColor": "#ffff00",
      "type": "highlight",
      "caseSensitive": true,
      "isRegex": false,
      "enabled": true
    },
    {
      "text": "healthcheck",
      "textColor": "",
      "backgroundColor": "",
      "type": "exclude",
      "caseSensitive": false,
      "isRegex": false,
      "enabled": true
    },
    {
      "text": "DEBUG",
      "textColor": "",
      "backgroundColor": "",
      "type": "exclude",
      "caseSensitive": true,
      "isRegex": false,
      "enabled": false
    }
  ]
}
"""


def generate_sample_tab_file(path: Path) -> bool:
    """Generate a sample tab document.

    Args:
        path: Path where the file should be created.

    Returns:
        True if file was created, False if it already exists.
    """
    if path.exists():
        return False

    path.write_text(SAMPLE_TAB_DOCUMENT, encoding="utf-8")
    return True
