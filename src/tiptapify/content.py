"""Helpers for note content as it comes out of storage.

Stored notes are not uniform: recent ones hold a TipTap document, older
mobile clients saved ``{"html": "..."}`` wrappers or bare HTML strings.
:func:`normalize_content` resolves any of these into both editor
representations; the remaining helpers answer the questions the note
screens ask before opening an editor.
"""

from __future__ import annotations

import re
from typing import Any

from tiptapify.config import TiptapifyConfig
from tiptapify.converter.html_to_tiptap import html_to_tiptap
from tiptapify.converter.tables import contains_table_nodes
from tiptapify.converter.tiptap_to_html import tiptap_to_html
from tiptapify.converter.validator import empty_document, validate_document
from tiptapify.models import NormalizedContent

WEB_ONLY_TABLE_REASON = (
    "This note contains tables and can only be edited on the web version "
    "for full functionality."
)

_HTML_TABLE_RE = re.compile(r"<(?:table|tr|td|th)\b[^>]*>", re.IGNORECASE)


def create_empty_document() -> dict[str, Any]:
    """A new document holding one empty paragraph."""
    return empty_document()


def has_content_text(content: Any) -> bool:
    """True when *content* holds at least one text node with non-blank text."""
    if not isinstance(content, dict) or not isinstance(content.get("content"), list):
        return False
    stack = list(content["content"])
    while stack:
        node = stack.pop()
        if not isinstance(node, dict):
            continue
        text = node.get("text")
        if node.get("type") == "text" and isinstance(text, str) and text.strip():
            return True
        children = node.get("content")
        if isinstance(children, list):
            stack.extend(children)
    return False


def has_tables_in_content(content: Any) -> bool:
    """Detect tables in any stored content shape.

    TipTap documents and node lists are searched for table nodes; HTML
    strings and legacy ``{"html": ...}`` wrappers for table tags.
    """
    if not content:
        return False
    if isinstance(content, str):
        return bool(_HTML_TABLE_RE.search(content))
    if isinstance(content, list):
        return contains_table_nodes(content)
    if not isinstance(content, dict):
        return False
    if content.get("type") == "doc" and isinstance(content.get("content"), list):
        return contains_table_nodes(content["content"])
    if isinstance(content.get("html"), str) and content["html"]:
        return bool(_HTML_TABLE_RE.search(content["html"]))
    if "content" in content:
        return has_tables_in_content(content["content"])
    return False


def is_web_only_note(content: Any) -> bool:
    """Notes with tables can only be edited on the web."""
    return has_tables_in_content(content)


def get_web_only_reason(content: Any) -> str:
    """User-facing explanation for :func:`is_web_only_note`, or ``""``."""
    return WEB_ONLY_TABLE_REASON if has_tables_in_content(content) else ""


def normalize_content(content: Any, config: TiptapifyConfig | None = None) -> NormalizedContent:
    """Resolve stored content into both HTML and a validated TipTap document.

    * TipTap document: validated, then rendered to HTML.
    * ``{"html": ...}`` wrapper or HTML string: the HTML is kept as is and
      converted to TipTap.
    * Anything else: empty HTML and the empty document.
    """
    if isinstance(content, dict) and content.get("type") == "doc":
        document = validate_document(content, config=config)
        return NormalizedContent(html=tiptap_to_html(document, config), tiptap=document)

    if isinstance(content, dict) and isinstance(content.get("html"), str) and content["html"]:
        return NormalizedContent(html=content["html"], tiptap=html_to_tiptap(content["html"], config))

    if isinstance(content, str):
        return NormalizedContent(html=content, tiptap=html_to_tiptap(content, config))

    return NormalizedContent(html="", tiptap=empty_document())
