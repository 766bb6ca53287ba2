"""HTML → TipTap conversion.

:class:`HtmlToTipTapConverter` orchestrates the pipeline:

1. **Clean** — optional repair of double-escaped markup; corruption
   heuristics are logged.
2. **Parse** — :class:`~tiptapify.converter.html_parser.HtmlParser` builds
   the generic element tree.
3. **Map** — every element is mapped onto TipTap nodes and marks with the
   fixed tag table below.
4. **Validate** — the result goes through
   :func:`~tiptapify.converter.validator.validate_document`.

Tag table::

    p            -> paragraph           ul / ol      -> bulletList / orderedList
    h1 .. h6     -> heading(level)      li           -> listItem (inline runs
    blockquote   -> blockquote                          wrapped in paragraphs)
    pre          -> codeBlock (text)    br / hr      -> hardBreak / horizontalRule
    div          -> paragraph, spliced blocks, or dropped when empty
    table        -> paragraphs (see :mod:`tiptapify.converter.tables`)

Inline tags become marks (``strong``/``b`` bold, ``em``/``i`` italic, ``u``
underline, ``s``/``strike`` strike, ``code`` code, ``a`` link).  When the
inline element wraps exactly one text node the mark is appended to that
node's marks; otherwise the element's whole text is flattened into a single
text node carrying only the outer mark, so ``<b>x <i>y</i></b>`` yields one
bold ``"x y"`` node.  Stored notes were written under this rule, which is
why nested formatting inside a multi-child wrapper is not reconstructed.
"""

from __future__ import annotations

import json
import re
import sys
from collections.abc import Callable as _Callable
from typing import Any

from tiptapify.config import TiptapifyConfig
from tiptapify.converter.html_parser import HtmlParser
from tiptapify.converter.html_utils import (
    extract_text,
    looks_corrupted,
    repair_escaped_markup,
    strip_tags,
    unescape_html,
)
from tiptapify.converter.marks import TAG_MARKS, merge_mark
from tiptapify.converter.tables import rows_to_paragraphs, row_text, cell_text
from tiptapify.converter.validator import (
    empty_document,
    group_blocks,
    inline_content,
    is_inline_node,
    validate_document,
)
from tiptapify.errors import TiptapifyConversionError
from tiptapify.models import ConversionResult, ConversionWarning, ElementKind, ParsedElement
from tiptapify.observability import get_logger

log = get_logger("tiptapify.converter")

FRAGMENT = "fragment"
"""Node type whose ``content`` is spliced into the parent (tables, divs)."""

_TABLE_SECTION = "tableSection"

_HEADING_RE = re.compile(r"^h([1-6])$")

_LANGUAGE_RE = re.compile(r"(?:^|\s)language-([\w+#.-]+)")

# Errors a single malformed element may raise while being mapped.
_RECOVERABLE = (KeyError, TypeError, IndexError, AttributeError, ValueError, TiptapifyConversionError)


class _ElementMapper:
    """Maps parsed elements onto TipTap nodes.

    ``inline`` tells whether the element sits in an inline context, where
    whitespace-only text is significant (``<b>a</b> <i>b</i>``).  Between
    block elements it is formatting noise and dropped.
    """

    def __init__(self, config: TiptapifyConfig) -> None:
        self._config = config

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def convert(self, element: ParsedElement, inline: bool = False) -> dict[str, Any] | None:
        if element.kind == ElementKind.TEXT:
            return self._convert_text(element, inline)

        if element.kind != ElementKind.ELEMENT or not element.tag_name:
            raise TiptapifyConversionError(
                "Parsed element has neither text nor a tag name",
                context={"kind": str(element.kind), "direction": "html_to_tiptap"},
            )

        tag = element.tag_name.lower()

        heading = _HEADING_RE.match(tag)
        if heading:
            return self._convert_heading(element, int(heading.group(1)))

        if tag in TAG_MARKS:
            return self._convert_mark(element, TAG_MARKS[tag])

        handler = _ELEMENT_HANDLERS.get(tag)
        if handler is not None:
            return handler(self, element)

        text = unescape_html(extract_text(element.children))
        if text.strip():
            return {"type": "text", "text": text}
        return None

    def convert_children(self, element: ParsedElement, inline: bool) -> list[dict[str, Any]]:
        """Convert children, dropping ``None`` and splicing fragments."""
        nodes: list[dict[str, Any]] = []
        for child in element.children:
            node = self.convert(child, inline)
            if node is None:
                continue
            if node["type"] == FRAGMENT:
                nodes.extend(node["content"])
            else:
                nodes.append(node)
        return nodes

    # ------------------------------------------------------------------
    # Text and marks
    # ------------------------------------------------------------------

    def _convert_text(self, element: ParsedElement, inline: bool) -> dict[str, Any] | None:
        text = unescape_html(element.text or "")
        if not text or (not inline and not text.strip()):
            return None
        return {"type": "text", "text": text}

    def _convert_mark(self, element: ParsedElement, mark_type: str) -> dict[str, Any]:
        mark: dict[str, Any] | None = {"type": mark_type}
        if mark_type == "link":
            href = element.attributes.get("href")
            mark = {"type": "link", "attrs": {"href": unescape_html(href)}} if href else None

        children = self.convert_children(element, inline=True)
        if len(children) == 1 and children[0]["type"] == "text":
            node = dict(children[0])
            if mark is not None:
                node["marks"] = merge_mark(node.get("marks"), mark)
            return node

        node = {"type": "text", "text": unescape_html(extract_text(element.children))}
        if mark is not None:
            node["marks"] = [mark]
        return node

    # ------------------------------------------------------------------
    # Text blocks
    # ------------------------------------------------------------------

    def _convert_paragraph(self, element: ParsedElement) -> dict[str, Any]:
        children = self.convert_children(element, inline=True)
        return {"type": "paragraph", "content": inline_content(children)}

    def _convert_heading(self, element: ParsedElement, level: int) -> dict[str, Any]:
        children = self.convert_children(element, inline=True)
        return {"type": "heading", "attrs": {"level": level}, "content": inline_content(children)}

    def _convert_div(self, element: ParsedElement) -> dict[str, Any] | None:
        children = self._degrade_orphans(self.convert_children(element, inline=True))
        if any(not is_inline_node(child) for child in children):
            return {"type": FRAGMENT, "content": group_blocks(children)}
        if not any(child["type"] == "hardBreak" or child["text"].strip() for child in children):
            return None
        return {"type": "paragraph", "content": inline_content(children)}

    def _convert_code_block(self, element: ParsedElement) -> dict[str, Any]:
        node: dict[str, Any] = {
            "type": "codeBlock",
            "content": [{"type": "text", "text": unescape_html(extract_text(element.children))}],
        }
        language = _code_language(element)
        if language:
            node["attrs"] = {"language": language}
        return node

    def _convert_hard_break(self, element: ParsedElement) -> dict[str, Any]:
        return {"type": "hardBreak"}

    def _convert_rule(self, element: ParsedElement) -> dict[str, Any]:
        return {"type": "horizontalRule"}

    # ------------------------------------------------------------------
    # Containers
    # ------------------------------------------------------------------

    def _convert_list(self, element: ParsedElement) -> dict[str, Any] | None:
        list_type = "orderedList" if element.tag_name == "ol" else "bulletList"
        items = [
            child for child in self.convert_children(element, inline=False)
            if child["type"] == "listItem"
        ]
        if not items:
            return None
        return {"type": list_type, "content": items}

    def _convert_list_item(self, element: ParsedElement) -> dict[str, Any]:
        children: list[dict[str, Any]] = []
        for child in self._degrade_orphans(self.convert_children(element, inline=True)):
            if child["type"] == "listItem":
                children.extend(child["content"])
            else:
                children.append(child)
        return {"type": "listItem", "content": group_blocks(children)}

    def _convert_blockquote(self, element: ParsedElement) -> dict[str, Any]:
        children = self._degrade_orphans(self.convert_children(element, inline=False))
        return {"type": "blockquote", "content": group_blocks(children)}

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def _convert_table(self, element: ParsedElement) -> dict[str, Any]:
        rows: list[dict[str, Any]] = []
        for child in self.convert_children(element, inline=False):
            if child["type"] == "tableRow":
                rows.append(child)
            elif child["type"] == _TABLE_SECTION:
                rows.extend(child["content"])
        return {"type": FRAGMENT, "content": rows_to_paragraphs(rows, self._config)}

    def _convert_table_section(self, element: ParsedElement) -> dict[str, Any] | None:
        rows = [
            child for child in self.convert_children(element, inline=False)
            if child["type"] == "tableRow"
        ]
        return {"type": _TABLE_SECTION, "content": rows} if rows else None

    def _convert_table_row(self, element: ParsedElement) -> dict[str, Any]:
        cells = [
            child for child in self.convert_children(element, inline=False)
            if child["type"] in ("tableCell", "tableHeader")
        ]
        return {"type": "tableRow", "content": cells}

    def _convert_table_cell(self, element: ParsedElement) -> dict[str, Any]:
        cell_type = "tableHeader" if element.tag_name == "th" else "tableCell"
        children = self.convert_children(element, inline=True)
        return {
            "type": cell_type,
            "content": [{"type": "paragraph", "content": inline_content(children)}],
        }

    def _degrade_orphans(self, nodes: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Flatten table parts found outside a table into plain paragraphs."""
        result: list[dict[str, Any]] = []
        separator = self._config.table_cell_separator
        for node in nodes:
            node_type = node["type"]
            if node_type == _TABLE_SECTION:
                rows = node["content"]
            elif node_type == "tableRow":
                rows = [node]
            elif node_type in ("tableCell", "tableHeader"):
                text = cell_text(node)
                if text:
                    result.append(_text_paragraph(text))
                continue
            else:
                result.append(node)
                continue
            result.extend(
                _text_paragraph(text)
                for text in (row_text(row, separator) for row in rows)
                if text
            )
        return result


def _text_paragraph(text: str) -> dict[str, Any]:
    return {"type": "paragraph", "content": [{"type": "text", "text": text}]}


def _code_language(element: ParsedElement) -> str | None:
    """Language from ``class="language-x"`` on the ``pre`` or its ``code``."""
    candidates = [element] + [
        child for child in element.children
        if child.kind == ElementKind.ELEMENT and child.tag_name == "code"
    ]
    for candidate in candidates:
        match = _LANGUAGE_RE.search(candidate.attributes.get("class", ""))
        if match:
            return match.group(1)
    return None


_ElementHandler = _Callable[["_ElementMapper", ParsedElement], "dict[str, Any] | None"]

_ELEMENT_HANDLERS: dict[str, _ElementHandler] = {
    "p": _ElementMapper._convert_paragraph,
    "div": _ElementMapper._convert_div,
    "pre": _ElementMapper._convert_code_block,
    "br": _ElementMapper._convert_hard_break,
    "hr": _ElementMapper._convert_rule,
    "ul": _ElementMapper._convert_list,
    "ol": _ElementMapper._convert_list,
    "li": _ElementMapper._convert_list_item,
    "blockquote": _ElementMapper._convert_blockquote,
    "table": _ElementMapper._convert_table,
    "thead": _ElementMapper._convert_table_section,
    "tbody": _ElementMapper._convert_table_section,
    "tfoot": _ElementMapper._convert_table_section,
    "tr": _ElementMapper._convert_table_row,
    "th": _ElementMapper._convert_table_cell,
    "td": _ElementMapper._convert_table_cell,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def element_to_tiptap(
    element: ParsedElement,
    config: TiptapifyConfig | None = None,
) -> dict[str, Any] | None:
    """Map one parsed element onto a TipTap node.

    Returns ``None`` for elements that produce nothing (an empty ``div``,
    whitespace between blocks).  Tables return a ``"fragment"`` node whose
    ``content`` is the list of paragraphs that replaces the table.
    """
    return _ElementMapper(config or TiptapifyConfig()).convert(element)


class HtmlToTipTapConverter:
    """Convert HTML from the editing surface into a TipTap document.

    Parameters
    ----------
    config:
        Engine configuration (table marker, parser options, debug dumps).

    Examples
    --------
    >>> converter = HtmlToTipTapConverter()
    >>> result = converter.convert("<p>Hello <strong>world</strong></p>")
    >>> result.document["content"][0]["content"][1]
    {'type': 'text', 'text': 'world', 'marks': [{'type': 'bold'}]}
    """

    def __init__(self, config: TiptapifyConfig | None = None) -> None:
        self._config = config or TiptapifyConfig()
        self._mapper = _ElementMapper(self._config)

    def convert(self, html: Any) -> ConversionResult:
        """Full pipeline: clean -> parse -> map -> validate.  Never raises."""
        warnings: list[ConversionWarning] = []

        if not isinstance(html, str) or not html.strip():
            return ConversionResult(document=empty_document(), warnings=warnings)

        source = html
        if self._config.repair_escaped_markup:
            source = repair_escaped_markup(source)
        if looks_corrupted(source):
            warnings.append(ConversionWarning(
                code="SUSPECT_INPUT",
                message="HTML looks corrupted (leaked JSON or excessive entities)",
                context={"length": len(source)},
            ))
            log.warning(
                "Detected potentially corrupted HTML content",
                extra={"extra_fields": {"op": "html_to_tiptap", "length": len(source)}},
            )

        parser = HtmlParser(
            legacy_close_search=self._config.legacy_close_search,
            max_depth=self._config.max_parse_depth,
        )
        elements = parser.parse(source)
        warnings.extend(parser.warnings)

        if self._config.debug_dump_parsed:
            print(
                "[tiptapify] Parsed elements:",
                json.dumps([e.to_dict() for e in elements], indent=2, ensure_ascii=False),
                file=sys.stderr,
            )

        try:
            content = self.convert_elements(elements, warnings)
        except RecursionError:
            log.warning(
                "HTML nested too deeply, falling back to plain text",
                extra={"extra_fields": {"op": "html_to_tiptap", "length": len(html)}},
            )
            warnings.append(ConversionWarning(
                code="CONVERSION_FALLBACK",
                message="Conversion failed; content kept as plain text",
            ))
            text = strip_tags(html).strip()
            content = [_text_paragraph(text)] if text else []

        document = validate_document({"type": "doc", "content": content}, warnings, self._config)

        if self._config.debug_dump_document:
            print(
                "[tiptapify] TipTap document:",
                json.dumps(document, indent=2, ensure_ascii=False),
                file=sys.stderr,
            )

        return ConversionResult(document=document, warnings=warnings)

    def convert_elements(
        self,
        elements: list[ParsedElement],
        warnings: list[ConversionWarning] | None = None,
    ) -> list[dict[str, Any]]:
        """Map top-level elements, skipping any that fail individually."""
        content: list[dict[str, Any]] = []
        for element in elements:
            try:
                node = self._mapper.convert(element)
            except _RECOVERABLE as exc:
                log.warning(
                    "HTML element skipped",
                    extra={"extra_fields": {
                        "op": "html_to_tiptap",
                        "tag": element.tag_name,
                        "error": str(exc),
                    }},
                )
                if warnings is not None:
                    warnings.append(ConversionWarning(
                        code="ELEMENT_SKIPPED",
                        message=f"Element could not be converted: {exc}",
                        context={"tag": element.tag_name},
                    ))
                continue
            if node is None:
                continue
            if node["type"] == FRAGMENT:
                content.extend(node["content"])
            else:
                content.append(node)
        return self._mapper._degrade_orphans(content)


def html_to_tiptap(html: Any, config: TiptapifyConfig | None = None) -> dict[str, Any]:
    """Convert an HTML string into a TipTap document.

    ``None``, non-strings and blank strings yield the empty document.
    """
    return HtmlToTipTapConverter(config).convert(html).document
