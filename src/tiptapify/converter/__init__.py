"""HTML ↔ TipTap ↔ block conversion pipeline.

Public API:

- :class:`HtmlToTipTapConverter` — HTML → TipTap document.
- :class:`TipTapToHtmlRenderer` — TipTap document → HTML.
- :class:`HtmlParser` / :func:`parse_html` — HTML → generic element tree.
- :func:`validate_document` — repair any value into a valid document.
- :func:`tiptap_to_blocks` / :func:`blocks_to_tiptap` — block editor model.
- :func:`apply_format` — toggle a mark over a character range of spans.
- :func:`convert_to_native_blocks` — TipTap → view-only render blocks.
- :func:`markdown_to_tiptap` / :func:`tiptap_to_plain_text` — plain-text editor.
"""

from tiptapify.converter.blocks import (
    BlockIdGenerator,
    apply_format,
    blocks_to_tiptap,
    create_empty_block,
    tiptap_to_blocks,
)
from tiptapify.converter.html_parser import HtmlParser, parse_html
from tiptapify.converter.html_to_tiptap import HtmlToTipTapConverter, element_to_tiptap, html_to_tiptap
from tiptapify.converter.markdown import markdown_to_tiptap, tiptap_to_plain_text
from tiptapify.converter.native import (
    convert_to_native_blocks,
    extract_plain_text,
    extract_text_segments,
    is_valid_tiptap_content,
    parse_tiptap_document,
)
from tiptapify.converter.tiptap_to_html import TipTapToHtmlRenderer, node_to_html, tiptap_to_html
from tiptapify.converter.validator import validate_document

__all__ = [
    "BlockIdGenerator",
    "HtmlParser",
    "HtmlToTipTapConverter",
    "TipTapToHtmlRenderer",
    "apply_format",
    "blocks_to_tiptap",
    "convert_to_native_blocks",
    "create_empty_block",
    "element_to_tiptap",
    "extract_plain_text",
    "extract_text_segments",
    "html_to_tiptap",
    "is_valid_tiptap_content",
    "markdown_to_tiptap",
    "node_to_html",
    "parse_html",
    "parse_tiptap_document",
    "tiptap_to_blocks",
    "tiptap_to_html",
    "tiptap_to_plain_text",
    "validate_document",
]
