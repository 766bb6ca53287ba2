"""The :class:`NoteConverter` facade.

Bundles one :class:`~tiptapify.config.TiptapifyConfig` with every
conversion the note screens need, and reports metrics for each call.

Usage::

    from tiptapify import NoteConverter

    converter = NoteConverter(table_marker="[TABLE]")
    result = converter.html_to_tiptap("<p>Hello <b>world</b></p>")
    html = converter.tiptap_to_html(result.document)

Data flow::

    editing surface --HTML--> html_to_tiptap --TipTap--> storage
    storage --TipTap--> validate --> tiptap_to_html --> editing surface
                                 \\-> to_native_blocks --> viewer
    storage --TipTap--> to_blocks <--> from_blocks (block editor)
"""

from __future__ import annotations

import time
from typing import Any

from tiptapify.config import TiptapifyConfig
from tiptapify.content import normalize_content
from tiptapify.converter.blocks import IdFactory, apply_format, blocks_to_tiptap, tiptap_to_blocks
from tiptapify.converter.html_to_tiptap import HtmlToTipTapConverter
from tiptapify.converter.markdown import markdown_to_tiptap, tiptap_to_plain_text
from tiptapify.converter.native import convert_to_native_blocks
from tiptapify.converter.tiptap_to_html import TipTapToHtmlRenderer
from tiptapify.converter.validator import validate_document
from tiptapify.models import (
    ConversionResult,
    ConversionWarning,
    EditorBlock,
    NativeBlock,
    NormalizedContent,
    TextSpan,
)
from tiptapify.observability import NoopMetricsHook, get_logger

log = get_logger("tiptapify.engine")


class NoteConverter:
    """Conversion facade for rich-text notes.

    Parameters
    ----------
    config:
        A ready-made configuration.  Mutually exclusive with *kwargs*.
    **kwargs:
        Forwarded to :class:`TiptapifyConfig` when *config* is not given.
    """

    def __init__(self, config: TiptapifyConfig | None = None, **kwargs: Any) -> None:
        if config is not None and kwargs:
            raise TypeError("pass either a TiptapifyConfig or keyword options, not both")
        self._config = config or TiptapifyConfig(**kwargs)
        self._metrics = self._config.metrics if self._config.metrics is not None else NoopMetricsHook()
        self._html_converter = HtmlToTipTapConverter(self._config)
        self._renderer = TipTapToHtmlRenderer(self._config)

    @property
    def config(self) -> TiptapifyConfig:
        return self._config

    # ------------------------------------------------------------------
    # HTML
    # ------------------------------------------------------------------

    def html_to_tiptap(self, html: Any) -> ConversionResult:
        """Convert editor HTML into a TipTap document plus warnings."""
        t0 = time.monotonic()
        result = self._html_converter.convert(html)
        self._record("html_to_tiptap", t0, result.warnings)
        return result

    def tiptap_to_html(self, content: Any) -> str:
        """Render stored content to HTML.

        TipTap documents are validated before rendering; the other accepted
        shapes (node list, ``{"html": ...}``, HTML string) are passed to
        :meth:`TipTapToHtmlRenderer.render` unchanged.
        """
        t0 = time.monotonic()
        warnings: list[ConversionWarning] = []
        if isinstance(content, dict) and content.get("type") == "doc":
            content = validate_document(content, warnings, self._config)
        html = self._renderer.render(content)
        self._record("tiptap_to_html", t0, warnings)
        return html

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self, doc: Any) -> dict[str, Any]:
        """Repair *doc* so it satisfies the document invariants."""
        warnings: list[ConversionWarning] = []
        t0 = time.monotonic()
        document = validate_document(doc, warnings, self._config)
        self._record("validate", t0, warnings)
        return document

    # ------------------------------------------------------------------
    # Block editor
    # ------------------------------------------------------------------

    def to_blocks(self, doc: Any, id_factory: IdFactory | None = None) -> list[EditorBlock]:
        """TipTap document → editor blocks (lists keep their first item)."""
        t0 = time.monotonic()
        blocks = tiptap_to_blocks(doc, id_factory)
        self._record("tiptap_to_blocks", t0)
        return blocks

    def from_blocks(self, blocks: list[EditorBlock]) -> dict[str, Any]:
        t0 = time.monotonic()
        document = blocks_to_tiptap(blocks)
        self._record("blocks_to_tiptap", t0)
        return document

    def apply_format(self, spans: list[TextSpan], start: int, end: int, mark: str) -> list[TextSpan]:
        return apply_format(spans, start, end, mark)

    # ------------------------------------------------------------------
    # Native viewer and plain-text editor
    # ------------------------------------------------------------------

    def to_native_blocks(self, content: Any) -> list[NativeBlock]:
        """Validate *content* and convert it into render blocks."""
        t0 = time.monotonic()
        warnings: list[ConversionWarning] = []
        blocks = convert_to_native_blocks(validate_document(content, warnings, self._config))
        self._record("tiptap_to_native", t0, warnings)
        return blocks

    def markdown_to_tiptap(self, text: Any) -> dict[str, Any]:
        t0 = time.monotonic()
        document = markdown_to_tiptap(text, self._config)
        self._record("markdown_to_tiptap", t0)
        return document

    def to_plain_text(self, doc: Any) -> str:
        t0 = time.monotonic()
        text = tiptap_to_plain_text(doc)
        self._record("tiptap_to_markdown", t0)
        return text

    def normalize(self, content: Any) -> NormalizedContent:
        """Resolve stored content into both HTML and TipTap."""
        t0 = time.monotonic()
        normalized = normalize_content(content, self._config)
        self._record("normalize", t0)
        return normalized

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _record(
        self,
        direction: str,
        t0: float,
        warnings: list[ConversionWarning] | None = None,
    ) -> None:
        elapsed_ms = (time.monotonic() - t0) * 1000
        tags = {"direction": direction}
        self._metrics.increment("tiptapify.conversions_total", tags=tags)
        self._metrics.timing("tiptapify.conversion_duration_ms", elapsed_ms, tags=tags)
        if warnings:
            self._metrics.increment(
                "tiptapify.conversion_warnings_total", value=len(warnings), tags=tags,
            )
            log.info(
                "Conversion produced warnings",
                extra={"extra_fields": {
                    "op": direction,
                    "warnings": len(warnings),
                    "codes": sorted({w.code for w in warnings}),
                    "elapsed_ms": round(elapsed_ms, 2),
                }},
            )
