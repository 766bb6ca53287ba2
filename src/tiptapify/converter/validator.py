"""Self-healing validator for TipTap documents.

:func:`validate_document` is the enforcement point for the structural
invariants every document leaving the engine must satisfy:

1. The root is ``{"type": "doc", "content": [...]}`` with at least one node
   (minimum: one empty paragraph).
2. Every ``paragraph`` and ``heading`` has a non-empty ``content`` list
   holding at least one text node (the text may be ``""``).
3. ``bulletList`` / ``orderedList`` hold only ``listItem`` children and a
   ``listItem`` holds only block nodes.
4. No table node appears anywhere; tables are degraded to text paragraphs.

Run it on any document whose provenance is external (loaded from storage,
received from another client) before serializing or rendering it.  It is a
total function: anything unusable is repaired or dropped, never raised.
The input is not mutated; repaired nodes are new dicts.
"""

from __future__ import annotations

from typing import Any

from tiptapify.config import TiptapifyConfig
from tiptapify.converter.tables import TABLE_NODE_TYPES, contains_table_nodes, degrade_table_node
from tiptapify.errors import TiptapifyValidationError
from tiptapify.models import ConversionWarning
from tiptapify.observability import get_logger

log = get_logger("tiptapify.validator")

INLINE_NODE_TYPES: frozenset[str] = frozenset({"text", "hardBreak"})
LIST_NODE_TYPES: frozenset[str] = frozenset({"bulletList", "orderedList"})
TEXTBLOCK_NODE_TYPES: frozenset[str] = frozenset({"paragraph", "heading"})


def empty_text() -> dict[str, Any]:
    return {"type": "text", "text": ""}


def empty_paragraph() -> dict[str, Any]:
    return {"type": "paragraph", "content": [empty_text()]}


def empty_document() -> dict[str, Any]:
    """The canonical empty document: one paragraph with one empty text node."""
    return {"type": "doc", "content": [empty_paragraph()]}


def node_attrs(node: dict[str, Any]) -> dict[str, Any]:
    """``attrs`` of *node*, or ``{}`` when missing or not a dict."""
    attrs = node.get("attrs")
    return attrs if isinstance(attrs, dict) else {}


def heading_level(node: dict[str, Any]) -> int:
    """Heading level clamped to 1..6; anything unusable counts as ``1``."""
    level = node_attrs(node).get("level", 1)
    if isinstance(level, bool) or not isinstance(level, (int, float, str)):
        return 1
    try:
        level = int(level)
    except (ValueError, OverflowError):
        return 1
    return min(max(level, 1), 6)


def is_inline_node(node: Any) -> bool:
    """True for a text node with string ``text`` or a ``hardBreak``."""
    if not isinstance(node, dict):
        return False
    if node.get("type") == "text":
        return isinstance(node.get("text"), str)
    return node.get("type") == "hardBreak"


def inline_content(nodes: list[Any]) -> list[dict[str, Any]]:
    """Filter *nodes* to valid inline nodes, guaranteeing one text node."""
    valid = [_clean_text_node(node) for node in nodes if is_inline_node(node)]
    if not any(node["type"] == "text" for node in valid):
        return [empty_text()]
    return valid


def group_blocks(nodes: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Wrap runs of inline nodes among *nodes* into paragraphs.

    A run made only of whitespace text is dropped when block siblings exist.
    Returns ``[empty paragraph]`` when nothing remains.
    """
    groups: list[list[dict[str, Any]] | dict[str, Any]] = []
    run: list[dict[str, Any]] = []
    for node in nodes:
        if is_inline_node(node):
            run.append(node)
            continue
        if run:
            groups.append(run)
            run = []
        groups.append(node)
    if run:
        groups.append(run)

    has_blocks = any(isinstance(group, dict) for group in groups)
    blocks: list[dict[str, Any]] = []
    for group in groups:
        if isinstance(group, dict):
            blocks.append(group)
        elif not (has_blocks and _is_blank_run(group)):
            blocks.append({"type": "paragraph", "content": inline_content(group)})
    return blocks or [empty_paragraph()]


def _is_blank_run(run: list[dict[str, Any]]) -> bool:
    return all(node["type"] == "text" and not node["text"].strip() for node in run)


def _clean_text_node(node: dict[str, Any]) -> dict[str, Any]:
    if node.get("type") == "text" and "marks" in node and not isinstance(node["marks"], list):
        return {key: value for key, value in node.items() if key != "marks"}
    return node


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def validate_document(
    doc: Any,
    warnings: list[ConversionWarning] | None = None,
    config: TiptapifyConfig | None = None,
) -> dict[str, Any]:
    """Normalize any value into a document satisfying the invariants.

    Parameters
    ----------
    doc:
        Anything; typically a TipTap document loaded from storage.
    warnings:
        Optional list collecting a :class:`ConversionWarning` per dropped
        node.
    config:
        Supplies the marker and separator texts of degraded tables.

    Returns
    -------
    dict
        A valid TipTap document.  A value that is not
        ``{"type": "doc", "content": [...]}`` yields the empty document.
    """
    if not isinstance(doc, dict) or doc.get("type") != "doc" or not isinstance(doc.get("content"), list):
        return empty_document()

    config = config or TiptapifyConfig()
    content: list[dict[str, Any]] = []
    for index, node in enumerate(doc["content"]):
        try:
            content.extend([_repair_node(part) for part in _without_tables([node], config)])
        except TiptapifyValidationError as exc:
            _drop(warnings, exc.message, index)
        except RecursionError:
            _drop(warnings, "Node nested too deeply", index)

    if not content:
        return empty_document()
    return {"type": "doc", "content": content}


def _is_table_node(node: Any) -> bool:
    return isinstance(node, dict) and isinstance(node.get("type"), str) and node["type"] in TABLE_NODE_TYPES


def _without_tables(nodes: list[Any], config: TiptapifyConfig) -> list[Any]:
    """Replace table nodes at any depth of *nodes* with text paragraphs."""
    if not contains_table_nodes(nodes):
        return nodes
    result: list[Any] = []
    for node in nodes:
        if _is_table_node(node):
            log.debug("Table degraded", extra={"extra_fields": {"op": "validate", "type": node["type"]}})
            result.extend(degrade_table_node(node, config))
        elif isinstance(node, dict) and isinstance(node.get("content"), list):
            result.append({**node, "content": _without_tables(node["content"], config)})
        else:
            result.append(node)
    return result


def _drop(warnings: list[ConversionWarning] | None, message: str, index: int) -> None:
    log.debug(message, extra={"extra_fields": {"op": "validate", "index": index}})
    if warnings is not None:
        warnings.append(ConversionWarning(
            code="NODE_DROPPED", message=message, context={"index": index},
        ))


def _repair_node(node: Any) -> dict[str, Any]:
    """Return a repaired copy of *node* or raise if it must be dropped."""
    if not isinstance(node, dict) or not node.get("type") or not isinstance(node["type"], str):
        raise TiptapifyValidationError(
            "Node has no type",
            context={"node": repr(node)[:200]},
        )

    node_type = node["type"]
    content = node.get("content")

    if node_type in INLINE_NODE_TYPES and not is_inline_node(node):
        raise TiptapifyValidationError("Text node has no text", context={"node": repr(node)[:200]})

    if node_type in TEXTBLOCK_NODE_TYPES:
        if not isinstance(content, list) or not content:
            return {**node, "content": [empty_text()]}
        return {**node, "content": inline_content(content)}

    if node_type in LIST_NODE_TYPES:
        items = [
            _repair_node(child)
            for child in (content if isinstance(content, list) else [])
            if isinstance(child, dict) and child.get("type") == "listItem"
        ]
        if not items:
            raise TiptapifyValidationError(f"{node_type} has no list items")
        return {**node, "content": items}

    if node_type in ("listItem", "blockquote"):
        children: list[dict[str, Any]] = []
        for child in content if isinstance(content, list) else []:
            if is_inline_node(child):
                children.append(child)
                continue
            try:
                children.append(_repair_node(child))
            except TiptapifyValidationError:
                continue
        return {**node, "content": group_blocks(children)}

    return node
