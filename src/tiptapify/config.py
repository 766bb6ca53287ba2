"""Engine configuration for tiptapify.

:class:`TiptapifyConfig` captures every tuneable knob of the conversion
engine.  Instances are passed to the converters, the renderer and the
:class:`~tiptapify.engine.NoteConverter` facade.  All fields have defaults
that reproduce the behaviour expected by the mobile editing surface.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

DEFAULT_TABLE_MARKER = "📊 TABLE"
"""Text of the bold paragraph emitted in place of a degraded table."""

DEFAULT_EMPTY_TABLE_TEXT = "📊 [Empty Table]"
"""Text emitted for a table element that contains no rows."""


@dataclass
class TiptapifyConfig:
    """Complete configuration for the conversion engine.

    Parameters
    ----------
    table_marker:
        Text of the bold marker paragraph that precedes the rows of a
        table degraded to paragraphs.
    empty_table_text:
        Paragraph text used for a table without any rows.
    table_cell_separator:
        String joining the cell texts of one table row.
    legacy_close_search:
        Locate closing tags with a plain substring search instead of the
        depth-tracked scan.  A tag nested inside a tag of the same name is
        then closed too early.  Only useful to reproduce output produced by
        older clients.
    max_parse_depth:
        Maximum element nesting the HTML parser structures.  Deeper markup
        is kept as literal text.
    repair_escaped_markup:
        Before parsing, strip leaked TipTap JSON fragments, collapse
        double-encoded entities and un-escape entity-encoded tags of the
        supported vocabulary.  Off by default because it also rewrites
        literal ``&lt;p&gt;`` typed by a user.
    link_fallback_href:
        ``href`` written for a ``link`` mark that has no ``href`` attribute.
    metrics:
        Optional :class:`~tiptapify.observability.MetricsHook`.
    debug_dump_parsed:
        Write the parsed element tree to *stderr* on each HTML conversion.
    debug_dump_document:
        Write the resulting TipTap document to *stderr* on each HTML
        conversion.
    """

    # ── Tables ──────────────────────────────────────────────────────────
    table_marker: str = DEFAULT_TABLE_MARKER

    empty_table_text: str = DEFAULT_EMPTY_TABLE_TEXT

    table_cell_separator: str = " | "

    # ── Parsing ─────────────────────────────────────────────────────────
    legacy_close_search: bool = False

    max_parse_depth: int = 128

    repair_escaped_markup: bool = False

    # ── Serialization ───────────────────────────────────────────────────
    link_fallback_href: str = "#"

    # ── Observability ──────────────────────────────────────────────────
    metrics: Any | None = None

    # ── Debug ───────────────────────────────────────────────────────────
    debug_dump_parsed: bool = False

    debug_dump_document: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.max_parse_depth < 1:
            raise ValueError(f"max_parse_depth must be >= 1, got {self.max_parse_depth}")
        if not self.table_marker:
            raise ValueError("table_marker must be a non-empty string")
        if not self.table_cell_separator:
            raise ValueError("table_cell_separator must be a non-empty string")
