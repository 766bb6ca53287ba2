"""Golden fixture tests.

``*.html`` fixtures are notes as the editing surfaces save them.  Each is
converted HTML -> TipTap -> HTML and compared with the matching
``*.expected.html`` (whitespace between blocks dropped, tag spelling
normalized, tables degraded).  ``notes.md`` covers the plain-text screen.
"""
from __future__ import annotations

from pathlib import Path

import pytest

from tiptapify.converter.blocks import BlockIdGenerator, tiptap_to_blocks
from tiptapify.converter.markdown import markdown_to_tiptap, tiptap_to_plain_text
from tiptapify.converter.native import extract_plain_text
from tiptapify.converter.tables import contains_table_nodes
from tiptapify.converter.tiptap_to_html import tiptap_to_html
from tiptapify.models import BlockType

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def _read(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


def _types(doc: dict) -> list[str]:
    return [node["type"] for node in doc["content"]]


@pytest.fixture
def basic_result(converter):
    return converter.convert(_read("basic.html"))


@pytest.fixture
def complex_result(converter):
    return converter.convert(_read("complex.html"))


class TestBasicNote:
    """basic.html uses only the supported vocabulary."""

    def test_converts_without_warnings(self, basic_result):
        assert basic_result.warnings == []

    def test_top_level_structure(self, basic_result):
        assert _types(basic_result.document) == [
            "heading", "paragraph", "heading", "bulletList", "orderedList",
            "blockquote", "codeBlock", "horizontalRule", "paragraph",
        ]

    def test_matches_expected_html(self, basic_result):
        expected = _read("basic.expected.html").rstrip("\n")
        assert tiptap_to_html(basic_result.document) == expected

    def test_code_block_keeps_language_and_newlines(self, basic_result):
        code = basic_result.document["content"][6]
        assert code["attrs"] == {"language": "python"}
        assert code["content"][0]["text"] == 'def hello():\n    return "Hello, World!"'

    def test_link_href_decoded(self, basic_result):
        item = basic_result.document["content"][3]["content"][0]
        link = item["content"][0]["content"][1]
        assert link["marks"] == [{"type": "link", "attrs": {"href": "https://example.com/docs?page=1&lang=en"}}]

    def test_expected_html_is_stable(self, converter):
        expected = _read("basic.expected.html").rstrip("\n")
        assert tiptap_to_html(converter.convert(expected).document) == expected

    def test_plain_text_keeps_content(self, basic_result):
        text = extract_plain_text(basic_result.document)
        for fragment in ("Weekly Notes", "release", "docs", "Second", "Hello, World!", "Done & dusted."):
            assert fragment in text


class TestComplexNote:
    """complex.html carries legacy tags, a table and deep lists."""

    def test_converts_without_warnings(self, complex_result):
        assert complex_result.warnings == []

    def test_matches_expected_html(self, complex_result):
        expected = _read("complex.expected.html").rstrip("\n")
        assert tiptap_to_html(complex_result.document) == expected

    def test_no_table_nodes(self, complex_result):
        assert not contains_table_nodes(complex_result.document["content"])

    def test_empty_div_dropped(self, complex_result):
        assert _types(complex_result.document).count("paragraph") == 9

    def test_expected_html_is_stable(self, converter):
        expected = _read("complex.expected.html").rstrip("\n")
        assert tiptap_to_html(converter.convert(expected).document) == expected

    def test_block_editor_view(self, complex_result):
        blocks = tiptap_to_blocks(complex_result.document, BlockIdGenerator())
        assert len(blocks) == 10
        assert blocks[0].spans[0].marks.bold
        assert blocks[1].text == "Packing list:\npassport\ncharger"
        assert blocks[7].type == BlockType.BULLET_LIST
        assert blocks[7].text == "Level 1"


class TestPlainTextNote:
    """notes.md as typed on the plain-text screen."""

    @pytest.fixture
    def document(self):
        return markdown_to_tiptap(_read("notes.md"))

    def test_top_level_structure(self, document):
        assert _types(document) == [
            "heading", "paragraph", "bulletList", "orderedList", "blockquote",
            "paragraph", "paragraph", "paragraph", "paragraph",
            "codeBlock", "horizontalRule",
        ]

    def test_inline_marks(self, document):
        assert document["content"][1]["content"] == [
            {"type": "text", "text": "Pick up "},
            {"type": "text", "text": "oat milk", "marks": [{"type": "bold"}]},
            {"type": "text", "text": " and "},
            {"type": "text", "text": "fresh", "marks": [{"type": "italic"}]},
            {"type": "text", "text": " bread."},
        ]

    def test_nested_list(self, document):
        pears = document["content"][2]["content"][1]
        assert [child["type"] for child in pears["content"]] == ["paragraph", "bulletList"]

    def test_table_degraded(self, document):
        rows = [node["content"][0]["text"] for node in document["content"][5:9]]
        assert rows == ["📊 TABLE", "Item | Qty", "---", "eggs | 12"]

    def test_code_block(self, document):
        assert document["content"][9] == {
            "type": "codeBlock",
            "attrs": {"language": "sh"},
            "content": [{"type": "text", "text": "echo done"}],
        }

    def test_text_round_trip_is_stable(self, document):
        assert markdown_to_tiptap(tiptap_to_plain_text(document)) == document
