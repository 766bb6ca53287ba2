"""Public data models for the tiptapify engine.

TipTap nodes and documents themselves stay plain ``dict`` trees (they are
exchanged as opaque JSON with the storage layer); this module holds the
transient parse tree, the flat block-editor model, the native rendering
model and the result/warning types.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class ElementKind(str, Enum):
    """Kind of a :class:`ParsedElement`."""

    ELEMENT = "element"
    TEXT = "text"


class BlockType(str, Enum):
    """Block types supported by the block-based editor."""

    PARAGRAPH = "paragraph"
    HEADING = "heading"
    BULLET_LIST = "bulletList"
    ORDERED_LIST = "orderedList"
    BLOCKQUOTE = "blockquote"
    CODE_BLOCK = "codeBlock"


# ---------------------------------------------------------------------------
# HTML parse tree
# ---------------------------------------------------------------------------

@dataclass
class ParsedElement:
    """One node of the generic tree produced by :func:`parse_html`.

    Attributes
    ----------
    kind:
        ``ElementKind.ELEMENT`` for tags, ``ElementKind.TEXT`` for text runs.
    tag_name:
        Lower-cased tag name (elements only).
    text:
        Raw text with whitespace preserved and entities still encoded
        (text nodes only).
    attributes:
        Attribute values as written in the markup.
    children:
        Child nodes, in document order.
    """

    kind: ElementKind
    tag_name: str | None = None
    text: str | None = None
    attributes: dict[str, str] = field(default_factory=dict)
    children: list[ParsedElement] = field(default_factory=list)

    @classmethod
    def text_node(cls, text: str) -> ParsedElement:
        return cls(kind=ElementKind.TEXT, text=text)

    @classmethod
    def element(
        cls,
        tag_name: str,
        attributes: dict[str, str] | None = None,
        children: list[ParsedElement] | None = None,
    ) -> ParsedElement:
        return cls(
            kind=ElementKind.ELEMENT,
            tag_name=tag_name,
            attributes=attributes or {},
            children=children or [],
        )

    def to_dict(self) -> dict:
        """Return a JSON-friendly representation (used by debug dumps)."""
        if self.kind == ElementKind.TEXT:
            return {"type": "text", "text": self.text or ""}
        result: dict = {"type": "element", "tagName": self.tag_name}
        if self.attributes:
            result["attributes"] = dict(self.attributes)
        if self.children:
            result["children"] = [child.to_dict() for child in self.children]
        return result


# ---------------------------------------------------------------------------
# Block editor model
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TextMarks:
    """Flat, order-free mark set of a :class:`TextSpan`."""

    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False
    code: bool = False

    def toggled(self, mark: str) -> TextMarks:
        """Return a copy with *mark* flipped.

        Raises
        ------
        ValueError
            If *mark* is not one of the five supported marks.
        """
        if mark not in MARK_NAMES:
            raise ValueError(f"unknown inline mark {mark!r}")
        return replace(self, **{mark: not getattr(self, mark)})

    def is_empty(self) -> bool:
        return not any(getattr(self, name) for name in MARK_NAMES)

    def active(self) -> list[str]:
        """Names of the marks that are set, in declaration order."""
        return [name for name in MARK_NAMES if getattr(self, name)]


MARK_NAMES: tuple[str, ...] = tuple(f.name for f in fields(TextMarks))
"""Names accepted by :meth:`TextMarks.toggled` and ``apply_format``."""


@dataclass
class TextSpan:
    """A contiguous run of text sharing one flat mark set.

    ``marks`` is ``None`` when no mark is set.
    """

    text: str
    marks: TextMarks | None = None


@dataclass
class EditorBlock:
    """One block of the flat, single-level block editor.

    Block IDs are UI-only: they are never persisted or compared across
    sessions.
    """

    id: str
    type: BlockType
    spans: list[TextSpan] = field(default_factory=lambda: [TextSpan("")])
    level: int | None = None

    @property
    def text(self) -> str:
        return "".join(span.text for span in self.spans)


# ---------------------------------------------------------------------------
# Native rendering model
# ---------------------------------------------------------------------------

@dataclass
class TextSegment:
    """A styled text run for the view-only native renderer."""

    text: str
    bold: bool = False
    italic: bool = False
    underline: bool = False
    code: bool = False
    strike: bool = False
    href: str | None = None


@dataclass
class NativeBlock:
    """A renderer-friendly block derived from a TipTap document.

    ``children`` is only populated for list blocks (one ``listItem`` entry
    per item).
    """

    type: str
    segments: list[TextSegment] = field(default_factory=list)
    level: int | None = None
    children: list[NativeBlock] | None = None


# ---------------------------------------------------------------------------
# Conversion results
# ---------------------------------------------------------------------------

@dataclass
class ConversionWarning:
    """A non-fatal anomaly encountered during a conversion.

    Attributes
    ----------
    code:
        A machine-readable warning code (e.g. ``"ELEMENT_SKIPPED"``).
    message:
        A human-readable description of the issue.
    context:
        Arbitrary structured data for diagnostics.
    """

    code: str
    message: str
    context: dict = field(default_factory=dict)


@dataclass
class ConversionResult:
    """Result of an HTML → TipTap conversion.

    Attributes
    ----------
    document:
        The TipTap document; always satisfies the structural invariants.
    warnings:
        Non-fatal anomalies (skipped elements, absorbed markup, fallbacks).
    """

    document: dict
    warnings: list[ConversionWarning] = field(default_factory=list)


@dataclass
class NormalizedContent:
    """Stored note content resolved into both editor representations."""

    html: str
    tiptap: dict
