"""Tests for data models."""

import pytest

from logtabs.models import (
    GLOBAL_TAB_ID,
    Color,
    Filter,
    FilterKind,
    LogLine,
    Tab,
)


class TestFilterKind:
    """Tests for FilterKind parsing."""

    def test_from_str(self):
        """Should parse each kind by its value."""
        assert FilterKind.from_str("include") is FilterKind.INCLUDE
        assert FilterKind.from_str("exclude") is FilterKind.EXCLUDE
        assert FilterKind.from_str("highlight") is FilterKind.HIGHLIGHT

    def test_from_str_case_insensitive(self):
        """Kind names should be case insensitive."""
        assert FilterKind.from_str(" Include ") is FilterKind.INCLUDE

    def test_from_str_unknown(self):
        """Unknown kinds should raise ValueError."""
        with pytest.raises(ValueError, match="Unknown filter type"):
            FilterKind.from_str("hide")


class TestColor:
    """Tests for the Color value type."""

    def test_long_form(self):
        """#rrggbb should be kept, lowercased."""
        assert Color.from_str("#DC2626").hex == "#dc2626"

    def test_short_form_expanded(self):
        """#rgb should expand to #rrggbb."""
        assert Color.from_str("#fa0").hex == "#ffaa00"

    def test_rgb(self):
        """Should expose the RGB triple."""
        assert Color.from_str("#102030").rgb == (16, 32, 48)

    def test_equality_after_normalisation(self):
        """Equivalent spellings should compare equal."""
        assert Color.from_str("#FFF") == Color.from_str("#ffffff")

    @pytest.mark.parametrize("value", ["red", "#12", "#gray-300", "ffffff", "#1234567"])
    def test_invalid(self, value):
        """Anything but a hex color should be rejected."""
        with pytest.raises(ValueError, match="Invalid color"):
            Color.from_str(value)

    @pytest.mark.parametrize("value", ["#fff\n", "#ffffff\n", " #fff", 255, None])
    def test_constructor_rejects_non_exact(self, value):
        """The constructor accepts only an exact hex string."""
        with pytest.raises(ValueError, match="Invalid color"):
            Color(value)

    def test_parse_optional_empty(self):
        """Empty string and None mean no override."""
        assert Color.parse_optional("") is None
        assert Color.parse_optional(None) is None
        assert Color.parse_optional("  ") is None

    def test_str(self):
        assert str(Color.from_str("#ABCDEF")) == "#abcdef"


class TestFilter:
    """Tests for Filter creation and updates."""

    def test_create_assigns_id(self):
        """create() should assign a non-empty id."""
        flt = Filter.create("error", FilterKind.INCLUDE)
        assert flt.id
        assert flt.pattern == "error"
        assert flt.kind is FilterKind.INCLUDE

    def test_create_defaults(self):
        """Filters default to literal, case-insensitive, enabled, unstyled."""
        flt = Filter.create("error")
        assert flt.kind is FilterKind.HIGHLIGHT
        assert flt.case_sensitive is False
        assert flt.is_regex is False
        assert flt.enabled is True
        assert flt.text_color is None
        assert flt.background_color is None

    def test_create_unique_ids(self):
        """Each created filter should get its own id."""
        ids = {Filter.create("x").id for _ in range(50)}
        assert len(ids) == 50

    def test_create_empty_pattern(self):
        """An empty pattern should be rejected."""
        with pytest.raises(ValueError, match="empty"):
            Filter.create("")

    def test_with_changes_keeps_id(self):
        """with_changes should keep the id and replace given fields."""
        flt = Filter.create("error")
        updated = flt.with_changes(pattern="warn", enabled=False)
        assert updated.id == flt.id
        assert updated.pattern == "warn"
        assert updated.enabled is False
        assert flt.pattern == "error"

    def test_with_changes_rejects_id(self):
        """The id can't be patched."""
        with pytest.raises(ValueError):
            Filter.create("error").with_changes(id="other")

    def test_with_changes_rejects_empty_pattern(self):
        with pytest.raises(ValueError):
            Filter.create("error").with_changes(pattern="")

    def test_kind_parsed_from_string(self):
        """A kind given by name is stored as a FilterKind."""
        assert Filter.create("x", "Include").kind is FilterKind.INCLUDE
        assert Filter.create("x").with_changes(kind="exclude").kind is FilterKind.EXCLUDE

    @pytest.mark.parametrize("kind", ["hide", None, 1])
    def test_invalid_kind(self, kind):
        with pytest.raises(ValueError):
            Filter.create("x", kind)

    def test_colors_must_be_color_values(self):
        with pytest.raises(ValueError, match="text_color"):
            Filter.create("x", text_color="#fff")
        with pytest.raises(ValueError, match="background_color"):
            Filter.create("x").with_changes(background_color="#fff")

    def test_cache_key_changes_with_pattern(self):
        """Editing the pattern should produce a new cache key."""
        flt = Filter.create("error", is_regex=True)
        assert flt.cache_key != flt.with_changes(pattern="warn").cache_key
        assert flt.cache_key == flt.with_changes(enabled=False).cache_key


class TestTab:
    """Tests for Tab helpers."""

    def test_is_global(self):
        assert Tab(id=GLOBAL_TAB_ID, name="Global").is_global is True
        assert Tab(id="abc", name="Other").is_global is False

    def test_index_of(self):
        """index_of should return the filter position or None."""
        first = Filter.create("a")
        second = Filter.create("b")
        tab = Tab(id="t", name="T", filters=[first, second])
        assert tab.index_of(second.id) == 1
        assert tab.index_of("missing") is None

    def test_enabled_filters(self):
        """Disabled filters should be skipped, order kept."""
        a = Filter.create("a")
        b = Filter.create("b", enabled=False)
        c = Filter.create("c")
        tab = Tab(id="t", name="T", filters=[a, b, c])
        assert tab.enabled_filters() == [a, c]


class TestLogLine:
    def test_is_styled(self):
        """A line is styled if either color is set."""
        assert LogLine(index=0, text="x", visible=True).is_styled is False
        styled = LogLine(
            index=0, text="x", visible=True, background_color=Color.from_str("#000")
        )
        assert styled.is_styled is True
