"""Attribute and entity helpers shared by both conversion directions."""

from __future__ import annotations

import html
import re

from tiptapify.models import ElementKind, ParsedElement

_ESCAPE_MAP: dict[str, str] = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
}

_ESCAPE_RE = re.compile(r"[&<>\"']")

# name="value" or name='value'; the closing quote must match the opening one.
_ATTR_RE = re.compile(r"""([\w:-]+)\s*=\s*(?:"([^"]*)"|'([^']*)')""")

_TAG_RE = re.compile(r"<[^>]*>")


def escape_html(text: str) -> str:
    """Escape the five HTML-significant characters."""
    return _ESCAPE_RE.sub(lambda m: _ESCAPE_MAP[m.group(0)], text)


def unescape_html(text: str) -> str:
    """Decode character references (``&amp;``, ``&#39;``, ``&nbsp;`` ...)."""
    return html.unescape(text)


def parse_attributes(tag_content: str) -> dict[str, str]:
    """Extract quoted attributes from the inside of a tag.

    Unquoted and valueless attributes are ignored and values are returned
    exactly as written (no entity decoding).  When an attribute repeats,
    the last occurrence wins.

    >>> parse_attributes('a href="https://x.io" target=\\'_blank\\'')
    {'href': 'https://x.io', 'target': '_blank'}
    """
    attributes: dict[str, str] = {}
    for match in _ATTR_RE.finditer(tag_content):
        value = match.group(2) if match.group(2) is not None else match.group(3)
        attributes[match.group(1).lower()] = value
    return attributes


def extract_text(elements: list[ParsedElement]) -> str:
    """Concatenate the raw text of *elements* and all their descendants."""
    parts: list[str] = []
    stack = list(reversed(elements))
    while stack:
        element = stack.pop()
        if element.kind == ElementKind.TEXT:
            parts.append(element.text or "")
        elif element.children:
            stack.extend(reversed(element.children))
    return "".join(parts)


def strip_tags(markup: str) -> str:
    """Remove anything that looks like a tag and decode entities."""
    return unescape_html(_TAG_RE.sub("", markup))


# ---------------------------------------------------------------------------
# Input clean-up for markup that went through broken save paths
# ---------------------------------------------------------------------------

_JSON_FRAGMENT_RE = re.compile(r'\{"type":"[^"]+","content":\[[^\]]*\]\}')

_DOUBLE_ENCODED: tuple[tuple[str, str], ...] = (
    ("&amp;lt;", "&lt;"),
    ("&amp;gt;", "&gt;"),
    ("&amp;amp;", "&amp;"),
    ("&amp;quot;", "&quot;"),
    ("&amp;#39;", "&#39;"),
)

_ESCAPED_TAG_RE = re.compile(
    r"&lt;(/?(?:p|h[1-6]|strong|b|em|i|u|s|br|table|tbody|thead|tfoot|tr|td|th"
    r"|ul|ol|li|div|span|code|pre|blockquote|a)(?:\s[^&]*?)?)&gt;",
    re.IGNORECASE,
)

_ENTITY_RE = re.compile(r"&[a-zA-Z0-9#]+;")


def repair_escaped_markup(markup: str) -> str:
    """Undo the damage of double serialization.

    Removes TipTap JSON fragments that leaked into the HTML, collapses
    double-encoded entities and turns entity-encoded tags of the supported
    vocabulary back into real tags.
    """
    cleaned = _JSON_FRAGMENT_RE.sub("", markup)
    for encoded, single in _DOUBLE_ENCODED:
        cleaned = cleaned.replace(encoded, single)
    return _ESCAPED_TAG_RE.sub(r"<\1>", cleaned)


def looks_corrupted(markup: str) -> bool:
    """Heuristic: leaked TipTap JSON or an entity for every ten characters."""
    if '{"type":"' in markup and '","content":[' in markup:
        return True
    return len(_ENTITY_RE.findall(markup)) > len(markup) / 10
