"""Tests for search bar column suggestions and text splicing."""

from datetime import date

from propdesk.tui.suggestions import (
    active_filter,
    current_fragment,
    discovery_suggestions,
    splice_column,
    splice_date,
    suggest_columns,
)


def keys(columns):
    return [c.key for c in columns]


class TestCurrentFragment:
    """Tests for current_fragment()."""

    def test_end_of_text(self):
        fragment = current_fragment("price=100 bed")
        assert fragment.text == "bed"
        assert fragment.start == 10
        assert fragment.end == 13

    def test_caret_in_middle(self):
        fragment = current_fragment("price=100 bed", caret=3)
        assert fragment.text == "pri"
        assert fragment.start == 0

    def test_after_space(self):
        assert current_fragment("villa ").text == ""

    def test_caret_clamped(self):
        assert current_fragment("abc", caret=99).text == "abc"

    def test_quoted_value_is_one_fragment(self):
        fragment = current_fragment('villa status="for sa')
        assert fragment.text == 'status="for sa'
        assert fragment.start == 6


class TestSuggestColumns:
    """Tests for suggest_columns()."""

    def test_prefix_on_key(self, columns):
        assert keys(suggest_columns(columns, "pri")) == ["price"]

    def test_prefix_on_label(self, columns):
        """'Square Meter' matches on its label as well as its key."""
        assert keys(suggest_columns(columns, "squ")) == ["square_meter"]
        assert keys(suggest_columns(columns, "Listed")) == ["listed_on"]

    def test_case_insensitive(self, columns):
        assert keys(suggest_columns(columns, "BED")) == ["bedrooms"]

    def test_schema_order(self, columns):
        assert keys(suggest_columns(columns, "p")) == ["pf_id", "price"]

    def test_separator_stops_suggestions(self, columns):
        assert suggest_columns(columns, "price=") == []
        assert suggest_columns(columns, "status:act") == []

    def test_empty_fragment_in_non_empty_text(self, columns):
        assert keys(suggest_columns(columns, "villa ")) == keys(columns)

    def test_blank_input(self, columns):
        assert suggest_columns(columns, "") == []
        assert suggest_columns(columns, "   ") == []

    def test_limit(self, columns):
        assert len(suggest_columns(columns, "villa ", limit=2)) == 2

    def test_no_match(self, columns):
        assert suggest_columns(columns, "zzz") == []

    def test_uses_caret(self, columns):
        assert keys(suggest_columns(columns, "bed villa", caret=3)) == ["bedrooms"]

    def test_inside_quoted_value(self, columns):
        """Spaces inside a quoted value do not start a new column name."""
        assert suggest_columns(columns, 'status="for pr') == []


class TestDiscoverySuggestions:
    """Tests for discovery_suggestions()."""

    def test_all_columns(self, columns):
        assert discovery_suggestions(columns) == columns

    def test_capped(self, columns):
        assert len(discovery_suggestions(columns, limit=3)) == 3


class TestSpliceColumn:
    """Tests for splice_column()."""

    def test_replaces_fragment(self, columns):
        price = columns[3]
        assert splice_column("pri", None, price) == ("price=", 6)

    def test_keeps_preceding_text(self, columns):
        bedrooms = columns[2]
        text, caret = splice_column("status=active bed", None, bedrooms)
        assert text == "status=active bedrooms="
        assert caret == len(text)

    def test_keeps_following_text(self, columns):
        price = columns[3]
        text, caret = splice_column("pr villa", 2, price)
        assert text == "price= villa"
        assert caret == 6

    def test_empty_fragment_appends(self, columns):
        price = columns[3]
        assert splice_column("villa ", None, price) == ("villa price=", 12)


class TestActiveFilter:
    """Tests for active_filter()."""

    def test_empty_date_value(self, columns):
        column, empty = active_filter(columns, "listed_on=")
        assert column.key == "listed_on"
        assert empty is True

    def test_filled_value(self, columns):
        column, empty = active_filter(columns, "listed_on=2024")
        assert column.key == "listed_on"
        assert empty is False

    def test_unknown_column(self, columns):
        assert active_filter(columns, "foo=") is None

    def test_plain_word(self, columns):
        assert active_filter(columns, "villa") is None

    def test_open_quote_counts_as_empty(self, columns):
        column, empty = active_filter(columns, 'status="')
        assert column.key == "status"
        assert empty is True


class TestSpliceDate:
    """Tests for splice_date()."""

    def test_fills_empty_value(self, columns):
        listed_on = columns[5]
        text, caret = splice_date("villa listed_on=", None, listed_on, date(2024, 3, 1))
        assert text == "villa listed_on=2024-03-01"
        assert caret == len(text)

    def test_replaces_partial_value_and_keeps_rest(self, columns):
        listed_on = columns[5]
        text, caret = splice_date("listed_on=20 sort:price:asc", 12, listed_on, date(2024, 3, 1))
        assert text == "listed_on=2024-03-01 sort:price:asc"
        assert caret == len("listed_on=2024-03-01")
