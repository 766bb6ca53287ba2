"""TipTap ⇄ block-editor conversion and range formatting.

The block editor works on a flat list of :class:`~tiptapify.models.EditorBlock`
objects, one per top-level TipTap node, each holding a list of
:class:`~tiptapify.models.TextSpan` runs with a flat mark set.

Two simplifications are part of the contract with the block editor:

* a list becomes a single block built from its **first** item only, and
  :func:`blocks_to_tiptap` always writes single-item lists back;
* node types without a block equivalent (``horizontalRule``, tables) are
  skipped on load.

Block IDs are UI-only.  They are minted by a :class:`BlockIdGenerator`
passed in by the caller so that conversions stay free of module state and
tests can rely on reproducible IDs.
"""

from __future__ import annotations

import itertools
from collections.abc import Callable
from typing import Any

from tiptapify.converter.marks import flags_to_marks, marks_to_flags
from tiptapify.converter.validator import empty_text, heading_level
from tiptapify.models import MARK_NAMES, BlockType, EditorBlock, TextMarks, TextSpan

IdFactory = Callable[[], str]


class BlockIdGenerator:
    """Mints ``<prefix>_<n>`` IDs from a private counter.

    >>> ids = BlockIdGenerator()
    >>> ids(), ids()
    ('block_0', 'block_1')
    """

    def __init__(self, prefix: str = "block", start: int = 0) -> None:
        self._prefix = prefix
        self._counter = itertools.count(start)

    def __call__(self) -> str:
        return f"{self._prefix}_{next(self._counter)}"


_LIST_BLOCK_TYPES = (BlockType.BULLET_LIST, BlockType.ORDERED_LIST)


# ---------------------------------------------------------------------------
# TipTap -> blocks
# ---------------------------------------------------------------------------

def tiptap_to_blocks(doc: Any, id_factory: IdFactory | None = None) -> list[EditorBlock]:
    """Convert a TipTap document into editor blocks.

    Parameters
    ----------
    doc:
        A TipTap document.  ``None`` or a document without content yields a
        single empty paragraph block.
    id_factory:
        Callable returning a fresh block ID; a new :class:`BlockIdGenerator`
        is used when omitted.

    Returns
    -------
    list[EditorBlock]
        Never empty.
    """
    next_id = id_factory or BlockIdGenerator()
    content = doc.get("content") if isinstance(doc, dict) else None

    blocks: list[EditorBlock] = []
    for node in content if isinstance(content, list) else []:
        block = _node_to_block(node, next_id)
        if block is not None:
            blocks.append(block)

    return blocks or [create_empty_block(BlockType.PARAGRAPH, id_factory=next_id)]


def _node_to_block(node: Any, next_id: IdFactory) -> EditorBlock | None:
    if not isinstance(node, dict):
        return None
    node_type = node.get("type")
    children = _content(node)

    if node_type == "heading":
        return EditorBlock(next_id(), BlockType.HEADING, extract_spans(children), level=heading_level(node))
    if node_type == "paragraph":
        return EditorBlock(next_id(), BlockType.PARAGRAPH, extract_spans(children))
    if node_type in ("bulletList", "orderedList"):
        return EditorBlock(next_id(), BlockType(node_type), extract_spans(_first_item_inline(children)))
    if node_type == "blockquote":
        return EditorBlock(next_id(), BlockType.BLOCKQUOTE, _blockquote_spans(children))
    if node_type == "codeBlock":
        return EditorBlock(next_id(), BlockType.CODE_BLOCK, extract_spans(children))
    return None


def _content(node: dict) -> list[Any]:
    content = node.get("content")
    return content if isinstance(content, list) else []


def _first_item_inline(items: list[Any]) -> list[Any]:
    """Inline content of the first paragraph of the first list item."""
    if not items or not isinstance(items[0], dict):
        return []
    item_content = _content(items[0])
    if not item_content or not isinstance(item_content[0], dict):
        return []
    return _content(item_content[0])


def _blockquote_spans(children: list[Any]) -> list[TextSpan]:
    # Paragraphs inside the quote are joined with a line break span.
    spans: list[TextSpan] = []
    for child in children:
        if not isinstance(child, dict):
            continue
        if child.get("type") in ("text", "hardBreak"):
            spans.extend(extract_spans([child]))
            continue
        if spans:
            spans.append(TextSpan("\n"))
        spans.extend(extract_spans(_content(child)))
    return spans or [TextSpan("")]


def extract_spans(nodes: list[Any]) -> list[TextSpan]:
    """Flatten inline TipTap nodes into spans; ``hardBreak`` becomes ``"\\n"``."""
    spans: list[TextSpan] = []
    for node in nodes:
        if not isinstance(node, dict):
            continue
        if node.get("type") == "text":
            text = node.get("text")
            spans.append(TextSpan(text if isinstance(text, str) else "", marks_to_flags(node.get("marks"))))
        elif node.get("type") == "hardBreak":
            spans.append(TextSpan("\n"))
    return spans or [TextSpan("")]


# ---------------------------------------------------------------------------
# blocks -> TipTap
# ---------------------------------------------------------------------------

def blocks_to_tiptap(blocks: list[EditorBlock]) -> dict[str, Any]:
    """Convert editor blocks back into a TipTap document.

    Lists are written as single-item lists.  An empty block list yields the
    canonical empty document.
    """
    content = [_block_to_node(block) for block in blocks]
    if not content:
        content = [{"type": "paragraph", "content": [empty_text()]}]
    return {"type": "doc", "content": content}


def _block_to_node(block: EditorBlock) -> dict[str, Any]:
    block_type = BlockType(block.type)

    if block_type == BlockType.CODE_BLOCK:
        return {"type": "codeBlock", "content": [{"type": "text", "text": block.text}]}

    inline = spans_to_nodes(block.spans)
    if block_type == BlockType.HEADING:
        return {"type": "heading", "attrs": {"level": block.level or 1}, "content": inline}
    if block_type in _LIST_BLOCK_TYPES:
        item = {"type": "listItem", "content": [{"type": "paragraph", "content": inline}]}
        return {"type": block_type.value, "content": [item]}
    if block_type == BlockType.BLOCKQUOTE:
        return {"type": "blockquote", "content": [{"type": "paragraph", "content": inline}]}
    return {"type": "paragraph", "content": inline}


def spans_to_nodes(spans: list[TextSpan]) -> list[dict[str, Any]]:
    """Inline TipTap nodes for *spans*.

    Newlines split a span into text nodes separated by ``hardBreak`` nodes.
    The result always holds at least one text node.
    """
    nodes: list[dict[str, Any]] = []
    for span in spans:
        marks = flags_to_marks(span.marks)
        for index, part in enumerate(span.text.split("\n")):
            if index:
                nodes.append({"type": "hardBreak"})
            if not part:
                continue
            node: dict[str, Any] = {"type": "text", "text": part}
            if marks:
                node["marks"] = marks
            nodes.append(node)
    if not any(node["type"] == "text" for node in nodes):
        return [empty_text()]
    return nodes


# ---------------------------------------------------------------------------
# Range formatting
# ---------------------------------------------------------------------------

def apply_format(spans: list[TextSpan], start: int, end: int, mark: str) -> list[TextSpan]:
    """Toggle *mark* over the character range ``[start, end)``.

    Every span overlapping the range is split into up to three pieces: the
    part before the range (unchanged), the overlap (mark added if absent,
    removed if present) and the part after the range (unchanged).  Spans
    outside the range are returned as they are.

    Parameters
    ----------
    spans:
        The spans of one block.  Not modified.
    start, end:
        Character offsets into the concatenated span text.  An empty or
        inverted range returns a copy of *spans*.
    mark:
        One of ``bold``, ``italic``, ``underline``, ``strikethrough``,
        ``code``.

    Raises
    ------
    ValueError
        If *mark* is not a supported mark name.
    """
    if mark not in MARK_NAMES:
        raise ValueError(f"unknown inline mark {mark!r}; expected one of {', '.join(MARK_NAMES)}")
    if start >= end:
        return list(spans)

    result: list[TextSpan] = []
    position = 0
    for span in spans:
        span_start = position
        span_end = position + len(span.text)
        position = span_end

        if span_end <= start or span_start >= end or not span.text:
            result.append(span)
            continue

        cut_start = max(start, span_start) - span_start
        cut_end = min(end, span_end) - span_start
        before = span.text[:cut_start]
        selected = span.text[cut_start:cut_end]
        after = span.text[cut_end:]

        if before:
            result.append(TextSpan(before, span.marks))
        result.append(TextSpan(selected, _toggle(span.marks, mark)))
        if after:
            result.append(TextSpan(after, span.marks))
    return result


def _toggle(marks: TextMarks | None, mark: str) -> TextMarks | None:
    toggled = (marks or TextMarks()).toggled(mark)
    return None if toggled.is_empty() else toggled


def create_empty_block(
    type: BlockType | str,
    level: int | None = None,
    id_factory: IdFactory | None = None,
) -> EditorBlock:
    """A new block of *type* holding one empty span."""
    next_id = id_factory or BlockIdGenerator()
    return EditorBlock(next_id(), BlockType(type), [TextSpan("")], level=level)
