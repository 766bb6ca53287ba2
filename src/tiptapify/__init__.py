"""tiptapify — TipTap ⇄ HTML ⇄ block conversion engine for rich-text notes.

Public re-exports
-----------------

* **Facade:** :class:`NoteConverter`
* **Configuration:** :class:`TiptapifyConfig`
* **Conversions:** the functions of :mod:`tiptapify.converter`
* **Content helpers:** :mod:`tiptapify.content`
* **Errors:** Every :class:`TiptapifyError` subclass and :class:`ErrorCode`
* **Models:** Block, span, native and result dataclasses

Usage::

    from tiptapify import NoteConverter

    converter = NoteConverter()
    doc = converter.html_to_tiptap("<h1>Title</h1><p>Body</p>").document
    blocks = converter.to_blocks(doc)
"""

from __future__ import annotations

# ── Configuration ───────────────────────────────────────────────────────
from tiptapify.config import DEFAULT_EMPTY_TABLE_TEXT, DEFAULT_TABLE_MARKER, TiptapifyConfig

# ── Content helpers ─────────────────────────────────────────────────────
from tiptapify.content import (
    create_empty_document,
    get_web_only_reason,
    has_content_text,
    has_tables_in_content,
    is_web_only_note,
    normalize_content,
)

# ── Conversions ─────────────────────────────────────────────────────────
from tiptapify.converter import (
    BlockIdGenerator,
    HtmlParser,
    HtmlToTipTapConverter,
    TipTapToHtmlRenderer,
    apply_format,
    blocks_to_tiptap,
    convert_to_native_blocks,
    create_empty_block,
    element_to_tiptap,
    extract_plain_text,
    extract_text_segments,
    html_to_tiptap,
    is_valid_tiptap_content,
    markdown_to_tiptap,
    node_to_html,
    parse_html,
    parse_tiptap_document,
    tiptap_to_blocks,
    tiptap_to_html,
    tiptap_to_plain_text,
    validate_document,
)

# ── Facade ──────────────────────────────────────────────────────────────
from tiptapify.engine import NoteConverter

# ── Errors ──────────────────────────────────────────────────────────────
from tiptapify.errors import (
    ErrorCode,
    TiptapifyConversionError,
    TiptapifyError,
    TiptapifyParseError,
    TiptapifyValidationError,
)

# ── Models ──────────────────────────────────────────────────────────────
from tiptapify.models import (
    BlockType,
    ConversionResult,
    ConversionWarning,
    EditorBlock,
    ElementKind,
    NativeBlock,
    NormalizedContent,
    ParsedElement,
    TextMarks,
    TextSegment,
    TextSpan,
)

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_EMPTY_TABLE_TEXT",
    "DEFAULT_TABLE_MARKER",
    "BlockIdGenerator",
    "BlockType",
    "ConversionResult",
    "ConversionWarning",
    "EditorBlock",
    "ElementKind",
    "ErrorCode",
    "HtmlParser",
    "HtmlToTipTapConverter",
    "NativeBlock",
    "NormalizedContent",
    "NoteConverter",
    "ParsedElement",
    "TextMarks",
    "TextSegment",
    "TextSpan",
    "TipTapToHtmlRenderer",
    "TiptapifyConfig",
    "TiptapifyConversionError",
    "TiptapifyError",
    "TiptapifyParseError",
    "TiptapifyValidationError",
    "apply_format",
    "blocks_to_tiptap",
    "convert_to_native_blocks",
    "create_empty_block",
    "create_empty_document",
    "element_to_tiptap",
    "extract_plain_text",
    "extract_text_segments",
    "get_web_only_reason",
    "has_content_text",
    "has_tables_in_content",
    "html_to_tiptap",
    "is_valid_tiptap_content",
    "is_web_only_note",
    "markdown_to_tiptap",
    "node_to_html",
    "normalize_content",
    "parse_html",
    "parse_tiptap_document",
    "tiptap_to_blocks",
    "tiptap_to_html",
    "tiptap_to_plain_text",
    "validate_document",
]
