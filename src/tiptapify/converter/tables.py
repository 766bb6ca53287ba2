"""Table degradation.

The mobile editing surface cannot render tables, so a table never survives
as a ``table`` node.  It is flattened into plain paragraphs::

    📊 TABLE        (bold marker)
    A | B           (header row)
    ---             (divider, only when there is more than one row)
    1 | 2

Rows whose cells are all empty are skipped, as are empty cells inside a
row.  The same text layout is used when an externally produced ``table``
node has to be serialized to HTML, wrapped in a styled container, so that
HTML → TipTap → HTML stays visually stable.
"""

from __future__ import annotations

from typing import Any

from tiptapify.config import TiptapifyConfig
from tiptapify.converter.html_utils import escape_html

TABLE_NODE_TYPES: frozenset[str] = frozenset({"table", "tableRow", "tableCell", "tableHeader"})

_CONTAINER_STYLE = (
    "margin: 16px 0; padding: 12px; background-color: #f9fafb; "
    "border-radius: 8px; border-left: 4px solid #0ea5e9;"
)
_MARKER_STYLE = "margin: 0 0 8px 0; font-weight: bold; color: #0ea5e9;"
_ROW_STYLE = "margin: 4px 0; font-family: monospace; color: #374151;"
_DIVIDER_STYLE = "margin: 4px 0; color: #9ca3af;"


def _paragraph(text: str, marks: list[dict] | None = None) -> dict[str, Any]:
    node: dict[str, Any] = {"type": "text", "text": text}
    if marks:
        node["marks"] = marks
    return {"type": "paragraph", "content": [node]}


def _children(node: dict[str, Any]) -> list[Any]:
    content = node.get("content")
    return content if isinstance(content, list) else []


def cell_text(cell: dict[str, Any], joiner: str = "") -> str:
    """Concatenate the text nodes of every paragraph inside *cell*."""
    parts: list[str] = []
    for paragraph in _children(cell):
        if not isinstance(paragraph, dict):
            continue
        parts.append("".join(
            child["text"]
            for child in _children(paragraph)
            if isinstance(child, dict) and child.get("type") == "text" and isinstance(child.get("text"), str)
        ))
    return joiner.join(parts).strip()


def row_text(row: dict[str, Any], separator: str, joiner: str = "") -> str:
    """Pipe-join the non-empty cell texts of *row*."""
    texts = [
        cell_text(cell, joiner)
        for cell in _children(row)
        if isinstance(cell, dict)
    ]
    return separator.join(text for text in texts if text)


def rows_to_paragraphs(rows: list[dict[str, Any]], config: TiptapifyConfig) -> list[dict[str, Any]]:
    """Degrade collected ``tableRow`` nodes into a paragraph sequence."""
    if not rows:
        return [_paragraph(config.empty_table_text)]

    nodes = [_paragraph(config.table_marker, [{"type": "bold"}])]
    for index, row in enumerate(rows):
        text = row_text(row, config.table_cell_separator)
        if not text:
            continue
        nodes.append(_paragraph(text))
        if index == 0 and len(rows) > 1:
            nodes.append(_paragraph("---"))
    return nodes


def degrade_table_node(node: dict[str, Any], config: TiptapifyConfig) -> list[dict[str, Any]]:
    """Paragraphs replacing a ``table`` node or an orphan row or cell.

    Orphan rows and cells keep only their text, without the marker.
    """
    node_type = node.get("type")
    if node_type == "table":
        rows = [
            row for row in _children(node)
            if isinstance(row, dict) and row.get("type") == "tableRow"
        ]
        return rows_to_paragraphs(rows, config)
    if node_type == "tableRow":
        text = row_text(node, config.table_cell_separator)
    else:
        text = cell_text(node)
    return [_paragraph(text)] if text else []


def table_to_html(node: dict[str, Any], config: TiptapifyConfig) -> str:
    """Serialize a ``table`` node as a styled block of text rows."""
    rows = [
        row for row in _children(node)
        if isinstance(row, dict) and row.get("type") == "tableRow"
    ]
    if not rows:
        return f"<p>{escape_html(config.empty_table_text)}</p>"

    parts = [
        f'<div style="{_CONTAINER_STYLE}">',
        f'<p style="{_MARKER_STYLE}">{escape_html(config.table_marker)}</p>',
    ]
    for index, row in enumerate(rows):
        text = row_text(row, config.table_cell_separator, joiner=" ")
        if not text:
            continue
        parts.append(f'<p style="{_ROW_STYLE}">{escape_html(text)}</p>')
        if index == 0 and len(rows) > 1:
            parts.append(f'<p style="{_DIVIDER_STYLE}">---</p>')
    parts.append("</div>")
    return "".join(parts)


def contains_table_nodes(nodes: list[Any]) -> bool:
    """Return True if *nodes* or any descendant is a table-related node."""
    stack = list(nodes)
    while stack:
        node = stack.pop()
        if not isinstance(node, dict):
            continue
        if isinstance(node.get("type"), str) and node["type"] in TABLE_NODE_TYPES:
            return True
        content = node.get("content")
        if isinstance(content, list):
            stack.extend(content)
    return False
