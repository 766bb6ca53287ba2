"""Inline mark vocabulary shared by every converter.

TipTap stores marks as an ordered list of ``{"type": ..., "attrs": ...}``
dicts; the block editor uses the flat :class:`~tiptapify.models.TextMarks`
set.  The tables here are the single source for tag ↔ mark and
mark ↔ flag names.

HTML wrapping order is fixed, innermost first::

    bold -> italic -> underline -> strike -> code -> link

regardless of the order the marks appear in the node.  Mark order carries no
meaning, so ``<a><code><s><u><em><strong>x</strong></em></u></s></code></a>``
is the one HTML spelling of a text node that carries all six marks.
"""

from __future__ import annotations

from tiptapify.converter.html_utils import escape_html
from tiptapify.models import TextMarks

# HTML tag -> TipTap mark type.
TAG_MARKS: dict[str, str] = {
    "strong": "bold",
    "b": "bold",
    "em": "italic",
    "i": "italic",
    "u": "underline",
    "s": "strike",
    "strike": "strike",
    "code": "code",
    "a": "link",
}

MARK_ORDER: tuple[str, ...] = ("bold", "italic", "underline", "strike", "code", "link")

# TipTap mark type -> HTML tag used on output (link is handled separately).
_MARK_TAGS: dict[str, str] = {
    "bold": "strong",
    "italic": "em",
    "underline": "u",
    "strike": "s",
    "code": "code",
}

# TipTap mark type <-> TextMarks field.
MARK_FLAGS: dict[str, str] = {
    "bold": "bold",
    "italic": "italic",
    "underline": "underline",
    "strike": "strikethrough",
    "code": "code",
}
FLAG_MARKS: dict[str, str] = {flag: mark for mark, flag in MARK_FLAGS.items()}


def merge_mark(marks: list[dict] | None, mark: dict) -> list[dict]:
    """Return a copy of *marks* with *mark* appended unless its type is present."""
    merged = [dict(m) for m in marks or []]
    if all(m.get("type") != mark["type"] for m in merged):
        merged.append(mark)
    return merged


def wrap_marks(text: str, marks: list[dict] | None, *, fallback_href: str = "#") -> str:
    """Escape *text* and wrap it in the tags of *marks* in the fixed order."""
    html = escape_html(text)
    if not marks:
        return html

    by_type: dict[str, dict] = {}
    for mark in marks:
        if isinstance(mark, dict) and isinstance(mark.get("type"), str):
            by_type.setdefault(mark["type"], mark)

    for mark_type in MARK_ORDER:
        mark = by_type.get(mark_type)
        if mark is None:
            continue
        if mark_type == "link":
            attrs = mark.get("attrs")
            href = (attrs.get("href") if isinstance(attrs, dict) else None) or fallback_href
            html = f'<a href="{escape_html(str(href))}">{html}</a>'
        else:
            tag = _MARK_TAGS[mark_type]
            html = f"<{tag}>{html}</{tag}>"
    return html


def marks_to_flags(marks: list[dict] | None) -> TextMarks | None:
    """Collapse a TipTap mark list into a flat :class:`TextMarks` set.

    Marks without a flag equivalent (``link``) are dropped.
    """
    if not isinstance(marks, list):
        return None
    flags = {
        MARK_FLAGS[m["type"]]: True
        for m in marks
        if isinstance(m, dict) and isinstance(m.get("type"), str) and m["type"] in MARK_FLAGS
    }
    if not flags:
        return None
    return TextMarks(**flags)


def flags_to_marks(flags: TextMarks | None) -> list[dict]:
    """Expand a flat mark set into a TipTap mark list in :data:`MARK_ORDER`."""
    if flags is None:
        return []
    active = {FLAG_MARKS[name] for name in flags.active()}
    return [{"type": mark_type} for mark_type in MARK_ORDER if mark_type in active]
