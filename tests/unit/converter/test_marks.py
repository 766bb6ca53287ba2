"""Tests for converter/marks.py."""

from __future__ import annotations

from tiptapify.converter.marks import (
    MARK_ORDER,
    TAG_MARKS,
    flags_to_marks,
    marks_to_flags,
    merge_mark,
    wrap_marks,
)
from tiptapify.models import TextMarks


class TestMergeMark:
    def test_appends_new_mark(self):
        assert merge_mark([{"type": "bold"}], {"type": "italic"}) == [
            {"type": "bold"}, {"type": "italic"},
        ]

    def test_existing_type_not_duplicated(self):
        marks = [{"type": "link", "attrs": {"href": "/a"}}]
        merged = merge_mark(marks, {"type": "link", "attrs": {"href": "/b"}})
        assert merged == [{"type": "link", "attrs": {"href": "/a"}}]

    def test_returns_copy(self):
        marks = [{"type": "bold"}]
        merged = merge_mark(marks, {"type": "code"})
        assert marks == [{"type": "bold"}]
        assert merged[0] is not marks[0]

    def test_none_marks(self):
        assert merge_mark(None, {"type": "bold"}) == [{"type": "bold"}]


class TestWrapMarks:
    def test_plain_text_escaped(self):
        assert wrap_marks("a < b", None) == "a &lt; b"

    def test_fixed_order_regardless_of_input_order(self):
        marks = [{"type": "code"}, {"type": "bold"}, {"type": "italic"}]
        assert wrap_marks("x", marks) == "<code><em><strong>x</strong></em></code>"

    def test_all_marks(self):
        marks = [{"type": t} for t in reversed(MARK_ORDER)]
        marks[0] = {"type": "link", "attrs": {"href": "https://a.io"}}
        assert wrap_marks("x", marks) == (
            '<a href="https://a.io"><code><s><u><em><strong>x</strong></em></u></s></code></a>'
        )

    def test_link_fallback_href(self):
        assert wrap_marks("x", [{"type": "link"}]) == '<a href="#">x</a>'
        assert wrap_marks("x", [{"type": "link"}], fallback_href="/none") == '<a href="/none">x</a>'

    def test_href_escaped(self):
        html = wrap_marks("x", [{"type": "link", "attrs": {"href": '/q?a=1&b="2"'}}])
        assert html == '<a href="/q?a=1&amp;b=&quot;2&quot;">x</a>'

    def test_unknown_and_malformed_marks_ignored(self):
        assert wrap_marks("x", [{"type": "highlight"}, "bold", {"no": "type"}]) == "x"


class TestFlags:
    def test_marks_to_flags(self):
        flags = marks_to_flags([{"type": "strike"}, {"type": "bold"}, {"type": "link"}])
        assert flags == TextMarks(bold=True, strikethrough=True)

    def test_no_flaggable_marks(self):
        assert marks_to_flags([{"type": "link", "attrs": {"href": "/"}}]) is None
        assert marks_to_flags(None) is None

    def test_flags_to_marks_canonical_order(self):
        flags = TextMarks(code=True, strikethrough=True, bold=True)
        assert flags_to_marks(flags) == [{"type": "bold"}, {"type": "strike"}, {"type": "code"}]

    def test_flags_to_marks_none(self):
        assert flags_to_marks(None) == []


def test_tag_aliases():
    assert TAG_MARKS["b"] == TAG_MARKS["strong"] == "bold"
    assert TAG_MARKS["i"] == TAG_MARKS["em"] == "italic"
    assert TAG_MARKS["strike"] == TAG_MARKS["s"] == "strike"
