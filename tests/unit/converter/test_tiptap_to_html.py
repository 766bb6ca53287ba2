"""Tests for converter/tiptap_to_html.py."""

from __future__ import annotations

import pytest

from tiptapify.config import TiptapifyConfig
from tiptapify.converter.tiptap_to_html import TipTapToHtmlRenderer, node_to_html, tiptap_to_html


def _text(text, *marks):
    node = {"type": "text", "text": text}
    if marks:
        node["marks"] = [m if isinstance(m, dict) else {"type": m} for m in marks]
    return node


def _p(*children):
    return {"type": "paragraph", "content": list(children)}


def _doc(*nodes):
    return {"type": "doc", "content": list(nodes)}


class TestBlocks:
    def test_paragraph(self):
        assert tiptap_to_html(_doc(_p(_text("Hello")))) == "<p>Hello</p>"

    def test_heading(self):
        node = {"type": "heading", "attrs": {"level": 3}, "content": [_text("T")]}
        assert node_to_html(node) == "<h3>T</h3>"

    @pytest.mark.parametrize(("level", "tag"), [(None, "h1"), (0, "h1"), (9, "h6"), ("2", "h2"), ("x", "h1")])
    def test_heading_level_clamped(self, level, tag):
        node = {"type": "heading", "attrs": {"level": level}, "content": [_text("T")]}
        assert node_to_html(node) == f"<{tag}>T</{tag}>"

    def test_bullet_list_item_paragraph_inline(self):
        node = {
            "type": "bulletList",
            "content": [{"type": "listItem", "content": [_p(_text("a"))]}],
        }
        assert node_to_html(node) == "<ul><li>a</li></ul>"

    def test_ordered_list_with_nested_list(self):
        nested = {"type": "bulletList", "content": [{"type": "listItem", "content": [_p(_text("b"))]}]}
        node = {"type": "orderedList", "content": [{"type": "listItem", "content": [_p(_text("a")), nested]}]}
        assert node_to_html(node) == "<ol><li>a<ul><li>b</li></ul></li></ol>"

    def test_list_item_second_paragraph_keeps_tag(self):
        item = {"type": "listItem", "content": [_p(_text("a")), _p(_text("b"))]}
        assert node_to_html(item) == "<li>a<p>b</p></li>"

    def test_list_item_blank_first_paragraph_keeps_tag(self):
        item = {"type": "listItem", "content": [_p(_text("")), _p(_text("b"))]}
        assert node_to_html(item) == "<li><p></p><p>b</p></li>"

    def test_list_item_blank_first_paragraph_before_nested_list(self):
        nested = {"type": "bulletList", "content": [{"type": "listItem", "content": [_p(_text("b"))]}]}
        item = {"type": "listItem", "content": [_p(_text(" ")), nested]}
        assert node_to_html(item) == "<li><p> </p><ul><li>b</li></ul></li>"

    def test_list_item_single_empty_paragraph_inline(self):
        assert node_to_html({"type": "listItem", "content": [_p(_text(""))]}) == "<li></li>"

    def test_blockquote(self):
        node = {"type": "blockquote", "content": [_p(_text("q"))]}
        assert node_to_html(node) == "<blockquote><p>q</p></blockquote>"

    def test_code_block_escaped(self):
        node = {"type": "codeBlock", "content": [_text("a < b && c")]}
        assert node_to_html(node) == "<pre><code>a &lt; b &amp;&amp; c</code></pre>"

    def test_code_block_language(self):
        node = {"type": "codeBlock", "attrs": {"language": "js"}, "content": [_text("x")]}
        assert node_to_html(node) == '<pre><code class="language-js">x</code></pre>'

    def test_hard_break_and_rule(self):
        assert tiptap_to_html(_doc(_p(_text("a"), {"type": "hardBreak"}, _text("b")), {"type": "horizontalRule"})) == (
            "<p>a<br>b</p><hr>"
        )


class TestMarks:
    def test_text_escaped(self):
        assert node_to_html(_text("<b>&\"'</b>")) == "&lt;b&gt;&amp;&quot;&#39;&lt;/b&gt;"

    def test_fixed_wrapping_order(self):
        node = _text("x", "link", "code", "strike", "underline", "italic", "bold")
        node["marks"][0] = {"type": "link", "attrs": {"href": "https://a.io"}}
        assert node_to_html(node) == (
            '<a href="https://a.io"><code><s><u><em><strong>x</strong></em></u></s></code></a>'
        )

    def test_mark_order_in_array_irrelevant(self):
        assert node_to_html(_text("x", "italic", "bold")) == node_to_html(_text("x", "bold", "italic"))

    def test_link_href_escaped(self):
        node = _text("x", {"type": "link", "attrs": {"href": 'https://a.io/?a=1&b="2"'}})
        assert node_to_html(node) == '<a href="https://a.io/?a=1&amp;b=&quot;2&quot;">x</a>'

    def test_link_without_href_uses_fallback(self):
        assert node_to_html(_text("x", "link")) == '<a href="#">x</a>'
        config = TiptapifyConfig(link_fallback_href="about:blank")
        assert node_to_html(_text("x", "link"), config) == '<a href="about:blank">x</a>'

    def test_unknown_mark_ignored(self):
        assert node_to_html(_text("x", "highlight")) == "x"


class TestTables:
    def test_table_renders_styled_text_rows(self):
        def cell(text):
            return {"type": "tableCell", "content": [_p(_text(text))]}

        table = {
            "type": "table",
            "content": [
                {"type": "tableRow", "content": [cell("A"), cell("B")]},
                {"type": "tableRow", "content": [cell("1"), cell("2")]},
            ],
        }
        html = node_to_html(table)
        assert html.startswith('<div style="')
        assert "📊 TABLE</p>" in html
        assert ">A | B</p>" in html
        assert ">---</p>" in html
        assert html.index("A | B") < html.index("---") < html.index("1 | 2")
        assert "<table" not in html

    def test_empty_table(self):
        assert node_to_html({"type": "table", "content": []}) == "<p>📊 [Empty Table]</p>"


class TestInputForms:
    def test_html_string_returned_unchanged(self, renderer):
        assert renderer.render("<p>raw</p>") == "<p>raw</p>"

    def test_legacy_html_object(self, renderer):
        assert renderer.render({"html": "<p>legacy</p>"}) == "<p>legacy</p>"

    def test_bare_node_list(self, renderer):
        assert renderer.render([_p(_text("a")), _p(_text("b"))]) == "<p>a</p><p>b</p>"

    def test_object_with_content(self, renderer):
        assert renderer.render({"content": [_p(_text("a"))]}) == "<p>a</p>"

    @pytest.mark.parametrize("value", [None, 3, {}, _doc(), {"type": "doc", "content": None}])
    def test_empty_results_render_empty_paragraph(self, renderer, value):
        assert renderer.render(value) == "<p></p>"


class TestRobustness:
    def test_unknown_node_with_content_recurses(self):
        node = {"type": "callout", "content": [_p(_text("inside"))]}
        assert node_to_html(node) == "<p>inside</p>"

    def test_unknown_leaf_emits_escaped_text(self):
        assert node_to_html({"type": "mention", "text": "@a<b>"}) == "@a&lt;b&gt;"

    def test_unknown_leaf_without_text(self):
        assert node_to_html({"type": "image", "attrs": {"src": "x.png"}}) == ""

    @pytest.mark.parametrize("node", [None, "text", 1, [], {"content": "nope"}, {"type": "text", "text": 5}])
    def test_garbage_never_raises(self, node):
        assert isinstance(node_to_html(node), str)

    def test_deep_nesting_does_not_raise(self, renderer):
        node = _p(_text("leaf"))
        for _ in range(5000):
            node = {"type": "blockquote", "content": [node]}
        assert renderer.render(_doc(node)) == "<p></p>"
