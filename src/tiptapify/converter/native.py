"""TipTap document to native render blocks.

The view-only screen renders notes without an HTML surface: it walks the
TipTap JSON directly and draws a flat list of
:class:`~tiptapify.models.NativeBlock` objects whose text is split into
styled :class:`~tiptapify.models.TextSegment` runs.  Lists keep one
``listItem`` child block per item; code blocks carry a single ``code``
segment.

Documents of external provenance should go through
:func:`~tiptapify.converter.validator.validate_document` first
(:meth:`tiptapify.engine.NoteConverter.to_native_blocks` does this).
"""

from __future__ import annotations

from typing import Any

from tiptapify.converter.validator import heading_level, node_attrs
from tiptapify.models import NativeBlock, TextSegment

# TipTap mark type -> TextSegment flag.
_SEGMENT_FLAGS: dict[str, str] = {
    "bold": "bold",
    "italic": "italic",
    "underline": "underline",
    "code": "code",
    "strike": "strike",
}


def is_valid_tiptap_content(content: Any) -> bool:
    """True when *content* is a ``{"type": "doc", "content": [...]}`` dict."""
    return (
        isinstance(content, dict)
        and content.get("type") == "doc"
        and isinstance(content.get("content"), list)
    )


def parse_tiptap_document(content: Any) -> dict[str, Any] | None:
    """Return *content* as a TipTap document, or ``None`` if it is not one."""
    return content if is_valid_tiptap_content(content) else None


def extract_plain_text(node: Any) -> str:
    """Concatenated text of *node* and its descendants."""
    if not isinstance(node, dict):
        return ""
    text = node.get("text")
    if isinstance(text, str) and text:
        return text
    return "".join(extract_plain_text(child) for child in _content(node))


def extract_text_segments(node: Any) -> list[TextSegment]:
    """Styled text runs of *node* in document order.

    ``hardBreak`` nodes produce a ``"\\n"`` segment.
    """
    if not isinstance(node, dict):
        return []
    if node.get("type") == "hardBreak":
        return [TextSegment("\n")]

    text = node.get("text")
    if isinstance(text, str) and text:
        segment = TextSegment(text)
        marks = node.get("marks")
        for mark in marks if isinstance(marks, list) else []:
            if not isinstance(mark, dict) or not isinstance(mark.get("type"), str):
                continue
            flag = _SEGMENT_FLAGS.get(mark["type"])
            if flag is not None:
                setattr(segment, flag, True)
            elif mark["type"] == "link":
                segment.href = node_attrs(mark).get("href")
        return [segment]

    segments: list[TextSegment] = []
    for child in _content(node):
        segments.extend(extract_text_segments(child))
    return segments


def convert_to_native_blocks(document: dict[str, Any]) -> list[NativeBlock]:
    """Convert a TipTap document into render blocks.

    Node types without a native rendering (``horizontalRule``, tables) are
    skipped.
    """
    blocks: list[NativeBlock] = []
    for node in _content(document):
        block = _node_to_native(node)
        if block is not None:
            blocks.append(block)
    return blocks


def _node_to_native(node: Any) -> NativeBlock | None:
    if not isinstance(node, dict):
        return None
    node_type = node.get("type")
    children = _content(node)

    if node_type == "heading":
        return NativeBlock("heading", _segments(children), level=heading_level(node))
    if node_type == "paragraph":
        return NativeBlock("paragraph", _segments(children))
    if node_type in ("bulletList", "orderedList"):
        items = [block for block in map(_node_to_native, children) if block is not None]
        return NativeBlock(node_type, [], children=items)
    if node_type == "listItem":
        first = children[0] if children else None
        return NativeBlock("listItem", _segments(_content(first) if isinstance(first, dict) else []))
    if node_type == "blockquote":
        segments: list[TextSegment] = []
        for child in children:
            if isinstance(child, dict):
                segments.extend(_segments(_content(child)))
        return NativeBlock("blockquote", segments)
    if node_type == "codeBlock":
        code = "\n".join(extract_plain_text(child) for child in children)
        return NativeBlock("codeBlock", [TextSegment(code, code=True)])
    return None


def _segments(nodes: list[Any]) -> list[TextSegment]:
    segments: list[TextSegment] = []
    for node in nodes:
        segments.extend(extract_text_segments(node))
    return segments


def _content(node: Any) -> list[Any]:
    content = node.get("content") if isinstance(node, dict) else None
    return content if isinstance(content, list) else []
