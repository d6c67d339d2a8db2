"""
Unit tests for markup rendering.

Covers tag ordering, forced close/reopen of overlapping tags, attribute
serialization, escaping and precondition failures.
"""

import pytest

from spanmark.render import format_attrs, open_tag, render
from spanmark.spans import NormalizationError, Span

TEXT_31 = ("text" * 8)[:31]


class TestTagSerialization:
    def test_open_tag_without_attrs(self):
        assert open_tag("b", {}) == "<b>"

    def test_open_tag_with_attrs(self):
        assert open_tag("a", {"href": "u", "title": "t"}) == '<a href="u" title="t">'

    def test_attr_values_not_escaped(self):
        assert format_attrs({"title": 'say "hi"'}) == 'title="say "hi""'


class TestRenderBasics:
    def test_no_formatting(self):
        assert render({}, "plain") == "plain"

    def test_empty_text(self):
        assert render({}, "") == ""

    def test_single_span(self):
        assert render({"b": [Span(2, 4)]}, "abcde") == "ab<b>cd</b>e"

    def test_span_covers_all(self):
        assert render({"i": [Span(0, 3)]}, "abc") == "<i>abc</i>"

    def test_empty_tag_list(self):
        assert render({"b": []}, "abc") == "abc"

    def test_attributes(self):
        result = render({"a": [Span(0, 5, {"href": "https://example.com"})]}, "click here")
        assert result == '<a href="https://example.com">click</a> here'

    def test_text_escaped(self):
        assert render({}, "a<b & c>") == "a&lt;b &amp; c&gt;"

    def test_text_escaping_disabled(self, monkeypatch):
        monkeypatch.setenv("SPANMARK_ESCAPE_TEXT", "false")
        from spanmark.config import reset_config
        reset_config()
        assert render({}, "a<b") == "a<b"


class TestRenderNesting:
    def test_longer_span_is_outer(self):
        formatting = {"i": [Span(0, 2)], "b": [Span(0, 4)]}
        assert render(formatting, "abcd") == "<b><i>ab</i>cd</b>"

    def test_equal_spans_keep_discovery_order(self):
        assert render({"b": [Span(0, 3)], "i": [Span(0, 3)]}, "abc") == "<b><i>abc</i></b>"
        assert render({"i": [Span(0, 3)], "b": [Span(0, 3)]}, "abc") == "<i><b>abc</b></i>"

    def test_overlap_closes_and_reopens(self):
        formatting = {"u": [Span(3, 7)], "s": [Span(4, 11)]}
        assert render(formatting, "texttexttex") == "tex<u>t<s>tex</s></u><s>ttex</s>"

    def test_inner_ending_together_is_finalized(self):
        formatting = {"b": [Span(0, 4)], "i": [Span(2, 4)], "u": [Span(1, 6)]}
        assert render(formatting, "abcdefg") == "<b>a<u>b<i>cd</i></u></b><u>ef</u>g"

    def test_adjacent_same_tag_different_attrs(self):
        formatting = {"a": [Span(0, 2, {"href": "x"}), Span(2, 4, {"href": "y"})]}
        assert render(formatting, "abcd") == '<a href="x">ab</a><a href="y">cd</a>'

    def test_zero_length_span(self):
        formatting = {"a": [Span(2, 2, {"name": "n"})]}
        assert render(formatting, "abcd") == 'ab<a name="n"></a>cd'

    def test_span_starting_where_another_ends(self):
        formatting = {"i": [Span(0, 4)], "b": [Span(1, 2)], "u": [Span(2, 4)]}
        result = render(formatting, "abcd")
        assert result == "<i>a<b>b</b><u>cd</u></i>"
        assert "<u></u>" not in result

    def test_span_ending_at_text_end(self):
        assert render({"b": [Span(1, 3)]}, "abc") == "a<b>bc</b>"

    def test_worked_example(self):
        formatting = {
            "s": [Span(4, 11), Span(20, 25)],
            "b": [Span(12, 14), Span(16, 19)],
            "i": [Span(6, 13), Span(17, 25)],
            "u": [Span(3, 7), Span(14, 19)],
        }
        expected = (
            "tex<u>t<s>te<i>x</i></s></u><s><i>ttex</i></s><i>t<b>t</b></i>"
            "<b>e</b><u>xt<b>t<i>ex</i></b></u><i>t<s>textt</s></i>exttex"
        )
        assert render(formatting, TEXT_31) == expected


class TestLeadingSpace:
    def test_leading_space_replaced(self):
        assert render({}, " ab") == "&nbsp;ab"

    def test_only_first_space(self):
        assert render({}, "  ab") == "&nbsp; ab"

    def test_leading_tag_not_replaced(self):
        assert render({"b": [Span(0, 1)]}, " ab") == "<b> </b>ab"

    def test_custom_marker(self):
        assert render({}, " ab", leading_space_marker="&#160;") == "&#160;ab"

    def test_marker_from_config(self, monkeypatch):
        monkeypatch.setenv("SPANMARK_LEADING_SPACE_MARKER", " ")
        from spanmark.config import reset_config
        reset_config()
        assert render({}, " ab") == " ab"


class TestRenderPreconditions:
    def test_overlapping_same_tag(self):
        with pytest.raises(NormalizationError, match="overlaps"):
            render({"b": [Span(0, 3), Span(2, 5)]}, "abcdef")

    def test_unmerged_touching_spans(self):
        with pytest.raises(NormalizationError, match="equal attributes"):
            render({"b": [Span(0, 2), Span(2, 4)]}, "abcd")

    def test_span_past_end(self):
        with pytest.raises(NormalizationError, match="past end of text"):
            render({"b": [Span(0, 10)]}, "abc")

    def test_check_disabled(self):
        assert render({"b": [Span(0, 2), Span(2, 4)]}, "abcd", check=False) == "<b>ab</b><b>cd</b>"
