"""Tests for FilterTranslator and RequestSequencer."""

import threading

import pytest

from propdesk.core.translator import FilterTranslator, RequestSequencer
from propdesk.models.descriptor import Condition, OrderBy
from propdesk.models.query import Filter, ParsedQuery, SortDirective
from propdesk.tui.query_parser import parse_query


@pytest.fixture
def translator(columns):
    return FilterTranslator(columns, default_sort=SortDirective(column="id", direction="asc"))


@pytest.fixture
def translate(translator, columns):
    """Parse and translate raw text in one step."""
    def _translate(text, **kwargs):
        return translator.translate(parse_query(text, columns), **kwargs)
    return _translate


class TestConditions:
    """Tests for filter translation."""

    def test_text_equality_is_substring_match(self, translate):
        descriptor = translate("status=act")
        assert descriptor.conditions == [Condition(column="status", op="ilike", value="%act%")]

    def test_text_equality_escapes_wildcards(self, translate):
        """Underscores and percent signs in a value match literally."""
        descriptor = translate("pf_id=PF_1%")
        assert descriptor.conditions == [
            Condition(column="pf_id", op="ilike", value="%PF\\_1\\%%"),
        ]

    def test_number_equality(self, translate):
        descriptor = translate("bedrooms=3")
        assert descriptor.conditions == [Condition(column="bedrooms", op="eq", value=3.0)]

    @pytest.mark.parametrize("text,op", [
        ("price!=5", "neq"),
        ("price>5", "gt"),
        ("price>=5", "gte"),
        ("price<5", "lt"),
        ("price<=5", "lte"),
    ])
    def test_relational_operators(self, translate, text, op):
        assert translate(text).conditions == [Condition(column="price", op=op, value=5.0)]

    def test_text_inequality_keeps_raw_value(self, translate):
        descriptor = translate("status!=sold")
        assert descriptor.conditions == [Condition(column="status", op="neq", value="sold")]

    def test_decimal_number(self, translate):
        assert translate("price>=1.5").conditions[0].value == 1.5

    @pytest.mark.parametrize("value", ["abc", "nan", "inf", "12abc"])
    def test_non_numeric_value_skipped(self, translate, value):
        """A bad number drops that filter only."""
        descriptor = translate(f"price>{value} bedrooms=2")
        assert descriptor.conditions == [Condition(column="bedrooms", op="eq", value=2.0)]

    def test_date_filter(self, translate):
        descriptor = translate("listed_on>=2024-02-01")
        assert descriptor.conditions == [
            Condition(column="listed_on", op="gte", value="2024-02-01"),
        ]

    @pytest.mark.parametrize("value", ["2024-02-30", "2024-2-1", "yesterday", "2024-02-01T10:00"])
    def test_invalid_date_skipped(self, translate, value):
        assert translate(f"listed_on={value}").conditions == []

    def test_unknown_column_skipped(self, translator):
        parsed = ParsedQuery(filters=[Filter(column="deleted_col", value="1")])
        assert translator.translate(parsed).conditions == []

    def test_filters_keep_order(self, translate):
        descriptor = translate("price>1 bedrooms<4 status=a")
        assert [c.column for c in descriptor.conditions] == ["price", "bedrooms", "status"]


class TestTextMatch:
    """Tests for free-text translation."""

    def test_text_match_over_searchable_columns(self, translate):
        descriptor = translate("john smith")
        assert descriptor.text_match.pattern == "john smith"
        assert descriptor.text_match.columns == ["pf_id", "status"]

    def test_no_text_match_without_text(self, translate):
        assert translate("price>1").text_match is None

    def test_no_text_match_without_searchable_columns(self, columns):
        numbers = [c for c in columns if c.type == "number"]
        translator = FilterTranslator(numbers)
        descriptor = translator.translate(ParsedQuery(text_search="villa"))
        assert descriptor.text_match is None


class TestOrder:
    """Tests for sort translation."""

    def test_sort_ascending(self, translate):
        assert translate("sort:price:asc").order == OrderBy(column="price", ascending=True)

    def test_sort_default_direction_descending(self, translate):
        assert translate("sort:price").order == OrderBy(column="price", ascending=False)

    def test_default_sort(self, translate):
        assert translate("villa").order == OrderBy(column="id", ascending=True)

    def test_unknown_sort_falls_back_to_default(self, translate):
        assert translate("sort:created_at:desc").order == OrderBy(column="id", ascending=True)

    def test_no_default_sort(self, columns):
        translator = FilterTranslator(columns)
        assert translator.translate(ParsedQuery()).order is None


class TestPagination:
    """Tests for offset and limit."""

    def test_first_page(self, translate):
        descriptor = translate("")
        assert descriptor.offset == 0
        assert descriptor.limit == 10

    def test_third_page(self, translate):
        descriptor = translate("", page=3, page_size=10)
        assert descriptor.offset == 20
        assert descriptor.limit == 10

    def test_page_zero_rejected(self, translate):
        with pytest.raises(ValueError, match="page"):
            translate("", page=0)

    def test_page_size_zero_rejected(self, translate):
        with pytest.raises(ValueError, match="page_size"):
            translate("", page_size=0)


class TestPostgrestParams:
    """Tests for rendering descriptors as PostgREST parameters."""

    def test_full_query(self, translate):
        params = translate("price>=500000 status=act villa sort:price:desc", page=2).to_postgrest_params()
        assert params == [
            ("price", "gte.500000"),
            ("status", "ilike.*act*"),
            ("or", "(pf_id.ilike.*villa*,status.ilike.*villa*)"),
            ("order", "price.desc"),
            ("limit", "10"),
            ("offset", "10"),
        ]

    def test_text_search_wildcards_escaped(self, translate):
        params = translate("a_b").to_postgrest_params()
        assert ("or", "(pf_id.ilike.*a\\_b*,status.ilike.*a\\_b*)") in params

    def test_decimal_value(self, translate):
        params = translate("price<1.5").to_postgrest_params()
        assert ("price", "lt.1.5") in params


class TestRequestSequencer:
    """Tests for discarding stale responses."""

    def test_tags_increase(self):
        sequencer = RequestSequencer()
        first = sequencer.issue()
        second = sequencer.issue()
        assert second > first
        assert sequencer.latest == second

    def test_only_latest_is_current(self):
        sequencer = RequestSequencer()
        old = sequencer.issue()
        new = sequencer.issue()
        assert not sequencer.is_current(old)
        assert sequencer.is_current(new)

    def test_nothing_current_before_issue(self):
        assert not RequestSequencer().is_current(1)

    def test_issue_from_threads_is_unique(self):
        sequencer = RequestSequencer()
        tags = []
        lock = threading.Lock()

        def issue_many():
            for _ in range(100):
                tag = sequencer.issue()
                with lock:
                    tags.append(tag)

        threads = [threading.Thread(target=issue_many) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(set(tags)) == 400
        assert sequencer.latest == 400
