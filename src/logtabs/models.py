"""Data models for logtabs."""

from dataclasses import dataclass, field, replace
from enum import Enum
import re
import uuid


GLOBAL_TAB_ID = "global"
GLOBAL_TAB_NAME = "Global"


def new_filter_id() -> str:
    """Generate a fresh, store-wide unique filter id."""
    return uuid.uuid4().hex


class FilterKind(Enum):
    """What a filter does to the lines it matches."""
    INCLUDE = "include"
    EXCLUDE = "exclude"
    HIGHLIGHT = "highlight"

    @classmethod
    def from_str(cls, value: str) -> "FilterKind":
        """Parse a filter kind from a string."""
        value = value.lower().strip()
        for kind in cls:
            if kind.value == value:
                return kind
        raise ValueError(f"Unknown filter type: {value}")


_HEX_COLOR = re.compile(r"#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})")


@dataclass(frozen=True)
class Color:
    """An RGB color, stored as a normalised ``#rrggbb`` string."""
    hex: str

    def __post_init__(self) -> None:
        if not isinstance(self.hex, str) or not _HEX_COLOR.fullmatch(self.hex):
            raise ValueError(f"Invalid color: {self.hex!r}")
        value = self.hex.lower()
        if len(value) == 4:
            value = "#" + "".join(ch * 2 for ch in value[1:])
        object.__setattr__(self, "hex", value)

    @classmethod
    def from_str(cls, value: str) -> "Color":
        """Parse ``#rgb`` or ``#rrggbb``."""
        return cls(value.strip())

    @classmethod
    def parse_optional(cls, value: str | None) -> "Color | None":
        """Parse a color where ``None`` or an empty string means no override."""
        if value is None or not value.strip():
            return None
        return cls.from_str(value)

    @property
    def rgb(self) -> tuple[int, int, int]:
        """Red, green and blue components as integers."""
        return (
            int(self.hex[1:3], 16),
            int(self.hex[3:5], 16),
            int(self.hex[5:7], 16),
        )

    def __str__(self) -> str:
        """Return the ``#rrggbb`` form."""
        return self.hex


@dataclass(frozen=True)
class Filter:
    """A single matching rule.

    Attributes:
        id: Opaque identifier, unique across every tab of a store.
        pattern: Literal substring or regular expression (never empty).
        kind: Include, exclude or highlight.
        case_sensitive: Match case exactly when True.
        is_regex: Treat ``pattern`` as a regular expression.
        text_color: Foreground override, or None.
        background_color: Background override, or None.
        enabled: Disabled filters are kept but never evaluated.
    """
    id: str
    pattern: str
    kind: FilterKind
    case_sensitive: bool = False
    is_regex: bool = False
    text_color: Color | None = None
    background_color: Color | None = None
    enabled: bool = True

    def __post_init__(self) -> None:
        if isinstance(self.kind, str):
            object.__setattr__(self, "kind", FilterKind.from_str(self.kind))
        elif not isinstance(self.kind, FilterKind):
            raise ValueError(f"Invalid filter kind: {self.kind!r}")
        for name in ("text_color", "background_color"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, Color):
                raise ValueError(f"{name} must be a Color or None, got {value!r}")

    @classmethod
    def create(
        cls,
        pattern: str,
        kind: FilterKind = FilterKind.HIGHLIGHT,
        *,
        case_sensitive: bool = False,
        is_regex: bool = False,
        text_color: Color | None = None,
        background_color: Color | None = None,
        enabled: bool = True,
    ) -> "Filter":
        """Create a filter with a freshly assigned id.

        Raises:
            ValueError: If the pattern is empty.
        """
        if not pattern:
            raise ValueError("Filter pattern cannot be empty")
        return cls(
            id=new_filter_id(),
            pattern=pattern,
            kind=kind,
            case_sensitive=case_sensitive,
            is_regex=is_regex,
            text_color=text_color,
            background_color=background_color,
            enabled=enabled,
        )

    def with_changes(self, **changes) -> "Filter":
        """Return a copy with the given fields replaced. The id is kept."""
        if "id" in changes:
            raise ValueError("Filter id cannot be changed")
        if "pattern" in changes and not changes["pattern"]:
            raise ValueError("Filter pattern cannot be empty")
        return replace(self, **changes)

    @property
    def cache_key(self) -> tuple[str, str, bool, bool]:
        """Fields that determine how the pattern compiles."""
        return (self.id, self.pattern, self.case_sensitive, self.is_regex)


@dataclass
class Tab:
    """A named, ordered collection of filters."""
    id: str
    name: str
    filters: list[Filter] = field(default_factory=list)

    @property
    def is_global(self) -> bool:
        """True for the protected global tab."""
        return self.id == GLOBAL_TAB_ID

    def index_of(self, filter_id: str) -> int | None:
        """Return the position of a filter in this tab, or None."""
        for index, flt in enumerate(self.filters):
            if flt.id == filter_id:
                return index
        return None

    def enabled_filters(self) -> list[Filter]:
        """Filters that take part in evaluation, in order."""
        return [flt for flt in self.filters if flt.enabled]


@dataclass(frozen=True)
class LogLine:
    """Render directive for one line of the loaded log.

    Attributes:
        index: Zero-based position in the original file.
        text: The original line content.
        visible: Whether the line should be rendered.
        text_color: Resolved foreground color, if any.
        background_color: Resolved background color, if any.
    """
    index: int
    text: str
    visible: bool
    text_color: Color | None = None
    background_color: Color | None = None

    @property
    def is_styled(self) -> bool:
        """True when either color is set."""
        return self.text_color is not None or self.background_color is not None
