"""Markdown-style plain text ⇄ TipTap.

The plain-text editing screen lets users type notes with lightweight
markup (``# Heading``, ``- item``, ``**bold**`` ...).  This module parses
that text with mistune's AST renderer into TipTap documents and renders
TipTap documents back to the same markup.

Supported syntax:

* blocks: ATX headings, bullet and ordered lists (nested), block quotes,
  fenced and indented code, thematic breaks, pipe tables (degraded to text
  paragraphs like every other table);
* inline: ``**bold**``, ``*italic*``, ``~~strike~~``, ```code```,
  ``[text](url)`` and bare URLs, ``<u>underline</u>``, line breaks.

Unlike the HTML path, nested inline formatting is preserved: every text
node carries the marks of all enclosing inline tokens.
"""

from __future__ import annotations

import re
from typing import Any

import mistune

from tiptapify.config import TiptapifyConfig
from tiptapify.converter.marks import MARK_ORDER
from tiptapify.converter.tables import row_text, rows_to_paragraphs
from tiptapify.converter.validator import (
    empty_document,
    group_blocks,
    heading_level,
    inline_content,
    node_attrs,
    validate_document,
)

# mistune inline token -> TipTap mark type.
_INLINE_MARKS: dict[str, str] = {
    "strong": "bold",
    "emphasis": "italic",
    "strikethrough": "strike",
}

_SKIP_TYPES: frozenset[str] = frozenset({"blank_line"})

_UNDERLINE_OPEN_RE = re.compile(r"^<u>$", re.IGNORECASE)
_UNDERLINE_CLOSE_RE = re.compile(r"^</u>$", re.IGNORECASE)

# Characters escaped anywhere in rendered text.
_ESCAPE_RE = re.compile(r"([\\`*_\[\]~<])")
# Block markers escaped at the start of a line.
_LINE_START_RE = re.compile(r"^(\s*)(?:([#>+=-])|(\d+)\.)(?=[\s=-]|$)", re.MULTILINE)


class MarkdownParser:
    """Parse markdown-style text into normalized mistune tokens.

    Only the token shapes used by :func:`markdown_to_tiptap` are kept: block
    tokens keep ``attrs`` and ``children`` (``raw`` for code), inline tokens
    keep ``raw``, ``attrs`` and ``children``.  ``block_text`` (tight list
    item content) is folded into ``paragraph``.
    """

    def __init__(self) -> None:
        self._parser = mistune.create_markdown(
            renderer="ast",
            plugins=["strikethrough", "table", "url"],
        )

    def parse(self, text: str) -> list[dict]:
        tokens = self._parser(text)
        if isinstance(tokens, str):
            return []
        return self._normalize_tokens(tokens)

    def _normalize_tokens(self, tokens: list[dict]) -> list[dict]:
        result: list[dict] = []
        for token in tokens:
            if token.get("type") in _SKIP_TYPES:
                continue
            result.append(self._normalize_token(token))
        return result

    def _normalize_token(self, token: dict) -> dict:
        token_type = token.get("type", "")
        if token_type == "block_text":
            token_type = "paragraph"

        result: dict = {"type": token_type}
        attrs = token.get("attrs")
        if attrs:
            result["attrs"] = dict(attrs)

        if token_type == "block_code":
            # mistune keeps the trailing newline of the fence body
            raw = token.get("raw", "")
            result["raw"] = raw[:-1] if raw.endswith("\n") else raw
            return result

        if "raw" in token:
            result["raw"] = token["raw"]
        children = token.get("children")
        if children:
            result["children"] = self._normalize_tokens(children)
        return result


# ---------------------------------------------------------------------------
# Tokens -> TipTap
# ---------------------------------------------------------------------------

class _TipTapBuilder:
    """Builds TipTap nodes from normalized tokens."""

    def __init__(self, config: TiptapifyConfig) -> None:
        self._config = config

    def blocks(self, tokens: list[dict]) -> list[dict[str, Any]]:
        nodes: list[dict[str, Any]] = []
        for token in tokens:
            nodes.extend(self.block(token))
        return nodes

    def block(self, token: dict) -> list[dict[str, Any]]:
        token_type = token["type"]
        attrs = token.get("attrs") or {}
        children = token.get("children") or []

        if token_type == "heading":
            level = min(max(int(attrs.get("level", 1)), 1), 6)
            return [{"type": "heading", "attrs": {"level": level}, "content": self.inline(children)}]
        if token_type == "paragraph":
            return [{"type": "paragraph", "content": self.inline(children)}]
        if token_type == "list":
            list_type = "orderedList" if attrs.get("ordered") else "bulletList"
            items = [self._list_item(child) for child in children if child["type"] == "list_item"]
            return [{"type": list_type, "content": items}] if items else []
        if token_type == "block_quote":
            return [{"type": "blockquote", "content": group_blocks(self.blocks(children))}]
        if token_type == "block_code":
            node: dict[str, Any] = {
                "type": "codeBlock",
                "content": [{"type": "text", "text": token.get("raw", "")}],
            }
            info = (attrs.get("info") or "").split()
            if info:
                node["attrs"] = {"language": info[0]}
            return [node]
        if token_type == "thematic_break":
            return [{"type": "horizontalRule"}]
        if token_type == "table":
            return rows_to_paragraphs(self._table_rows(children), self._config)
        if token_type == "block_html":
            text = token.get("raw", "").strip()
            return [{"type": "paragraph", "content": inline_content([{"type": "text", "text": text}])}]
        return []

    def _list_item(self, token: dict) -> dict[str, Any]:
        return {"type": "listItem", "content": group_blocks(self.blocks(token.get("children") or []))}

    def _table_rows(self, tokens: list[dict]) -> list[dict[str, Any]]:
        rows: list[dict[str, Any]] = []
        for part in tokens:
            if part["type"] == "table_head":
                rows.append(self._table_row(part.get("children") or []))
            elif part["type"] == "table_body":
                rows.extend(
                    self._table_row(row.get("children") or [])
                    for row in part.get("children") or []
                    if row["type"] == "table_row"
                )
        return rows

    def _table_row(self, cells: list[dict]) -> dict[str, Any]:
        return {
            "type": "tableRow",
            "content": [
                {
                    "type": "tableCell",
                    "content": [{"type": "paragraph", "content": self.inline(cell.get("children") or [])}],
                }
                for cell in cells
                if cell["type"] == "table_cell"
            ],
        }

    # ------------------------------------------------------------------
    # Inline
    # ------------------------------------------------------------------

    def inline(self, tokens: list[dict]) -> list[dict[str, Any]]:
        nodes: list[dict[str, Any]] = []
        self._inline_into(tokens, [], nodes)
        return inline_content(_merge_adjacent(nodes))

    def _inline_into(self, tokens: list[dict], marks: list[dict], out: list[dict[str, Any]]) -> None:
        underline = False
        for token in tokens:
            token_type = token["type"]
            active = marks + [{"type": "underline"}] if underline else marks

            if token_type == "text":
                _append_text(out, token.get("raw", ""), active)
            elif token_type == "codespan":
                _append_text(out, token.get("raw", ""), active + [{"type": "code"}])
            elif token_type in ("softbreak", "linebreak"):
                out.append({"type": "hardBreak"})
            elif token_type in _INLINE_MARKS:
                mark = {"type": _INLINE_MARKS[token_type]}
                self._inline_into(token.get("children") or [], active + [mark], out)
            elif token_type == "link":
                href = (token.get("attrs") or {}).get("url", "")
                mark = {"type": "link", "attrs": {"href": href}}
                self._inline_into(token.get("children") or [], active + [mark], out)
            elif token_type == "image":
                self._inline_into(token.get("children") or [], active, out)
            elif token_type == "inline_html":
                raw = token.get("raw", "")
                if _UNDERLINE_OPEN_RE.match(raw):
                    underline = True
                elif _UNDERLINE_CLOSE_RE.match(raw):
                    underline = False
                else:
                    _append_text(out, raw, active)


def _append_text(out: list[dict[str, Any]], text: str, marks: list[dict]) -> None:
    if not text:
        return
    node: dict[str, Any] = {"type": "text", "text": text}
    ordered = _canonical_marks(marks)
    if ordered:
        node["marks"] = ordered
    out.append(node)


def _canonical_marks(marks: list[dict]) -> list[dict]:
    by_type: dict[str, dict] = {}
    for mark in marks:
        by_type.setdefault(mark["type"], mark)
    return [by_type[mark_type] for mark_type in MARK_ORDER if mark_type in by_type]


def _merge_adjacent(nodes: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Join neighbouring text nodes that carry identical marks."""
    merged: list[dict[str, Any]] = []
    for node in nodes:
        previous = merged[-1] if merged else None
        if (
            previous is not None
            and node["type"] == "text"
            and previous["type"] == "text"
            and previous.get("marks") == node.get("marks")
        ):
            merged[-1] = {**previous, "text": previous["text"] + node["text"]}
        else:
            merged.append(node)
    return merged


def markdown_to_tiptap(text: Any, config: TiptapifyConfig | None = None) -> dict[str, Any]:
    """Parse markdown-style text into a validated TipTap document.

    ``None``, non-strings and blank text yield the empty document.
    """
    if not isinstance(text, str) or not text.strip():
        return empty_document()
    tokens = MarkdownParser().parse(text)
    config = config or TiptapifyConfig()
    content = _TipTapBuilder(config).blocks(tokens)
    return validate_document({"type": "doc", "content": content}, config=config)


# ---------------------------------------------------------------------------
# TipTap -> text
# ---------------------------------------------------------------------------

def markdown_escape(text: str) -> str:
    """Escape inline markup characters and line-leading block markers."""
    escaped = _ESCAPE_RE.sub(r"\\\1", text)
    return _LINE_START_RE.sub(_escape_line_start, escaped)


def _escape_line_start(match: re.Match) -> str:
    if match.group(2):
        return f"{match.group(1)}\\{match.group(2)}"
    return f"{match.group(1)}{match.group(3)}\\."


def render_inline(nodes: list[Any]) -> str:
    """Render inline TipTap nodes as markdown-style text.

    Wrapping order (innermost first)::

        code -> bold -> italic -> strike -> underline -> link
    """
    parts: list[str] = []
    for node in nodes:
        if not isinstance(node, dict):
            continue
        if node.get("type") == "hardBreak":
            parts.append("\n")
            continue
        text = node.get("text")
        if node.get("type") != "text" or not isinstance(text, str) or not text:
            continue

        marks = node.get("marks") if isinstance(node.get("marks"), list) else []
        types = {m["type"]: m for m in marks if isinstance(m, dict) and isinstance(m.get("type"), str)}
        if "code" in types:
            rendered = f"`{text}`"
        else:
            rendered = markdown_escape(text)
        if "bold" in types:
            rendered = f"**{rendered}**"
        if "italic" in types:
            rendered = f"*{rendered}*"
        if "strike" in types:
            rendered = f"~~{rendered}~~"
        if "underline" in types:
            rendered = f"<u>{rendered}</u>"
        if "link" in types:
            href = str(node_attrs(types["link"]).get("href") or "").replace("(", "%28").replace(")", "%29")
            rendered = f"[{rendered}]({href})"
        parts.append(rendered)
    return "".join(parts)


def tiptap_to_plain_text(doc: Any) -> str:
    """Render a TipTap document as markdown-style text.

    Blocks are separated by blank lines; list items sit on consecutive
    lines with nested lists indented by two spaces per level.  Tables (if
    any survived) render their rows pipe-joined.
    """
    content = doc.get("content") if isinstance(doc, dict) else None
    if not isinstance(content, list):
        return ""
    blocks = [_render_block(node) for node in content]
    return "\n\n".join(block for block in blocks if block is not None)


def _render_block(node: Any) -> str | None:
    if not isinstance(node, dict):
        return None
    node_type = node.get("type")
    children = node.get("content") if isinstance(node.get("content"), list) else []

    if node_type == "heading":
        return f"{'#' * heading_level(node)} {render_inline(children)}"
    if node_type == "paragraph":
        return render_inline(children)
    if node_type in ("bulletList", "orderedList"):
        return _render_list(node, 0)
    if node_type == "blockquote":
        inner = "\n\n".join(b for b in map(_render_block, children) if b is not None)
        return "\n".join(f"> {line}" if line else ">" for line in inner.split("\n"))
    if node_type == "codeBlock":
        code = "".join(
            child["text"] for child in children
            if isinstance(child, dict) and isinstance(child.get("text"), str)
        )
        language = node_attrs(node).get("language") or ""
        return f"```{language}\n{code}\n```"
    if node_type == "horizontalRule":
        return "---"
    if node_type == "table":
        return "\n".join(
            text for text in (row_text(row, " | ") for row in children if isinstance(row, dict)) if text
        )
    if children:
        return render_inline(children) or None
    return None


def _render_list(node: dict, depth: int) -> str:
    ordered = node.get("type") == "orderedList"
    indent = "  " * depth
    lines: list[str] = []
    for number, item in enumerate(node.get("content") or [], start=1):
        if not isinstance(item, dict):
            continue
        bullet = f"{number}." if ordered else "-"
        text_parts: list[str] = []
        nested: list[str] = []
        for child in item.get("content") or []:
            if not isinstance(child, dict):
                continue
            if child.get("type") in ("bulletList", "orderedList"):
                nested.append(_render_list(child, depth + 1))
            elif child.get("type") == "paragraph":
                text_parts.append(render_inline(child.get("content") or []))
        text = " ".join(text_parts).replace("\n", "\n" + indent + "  ")
        lines.append(f"{indent}{bullet} {text}")
        lines.extend(nested)
    return "\n".join(lines)
