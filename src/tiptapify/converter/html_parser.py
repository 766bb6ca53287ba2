"""Hand-written HTML tokenizer/parser.

The editing surface hands us an HTML string and there is no DOM to lean on,
so :class:`HtmlParser` performs a single left-to-right scan with a cursor
and builds a generic :class:`~tiptapify.models.ParsedElement` tree.

Scanning rules:

* Text up to the next tag becomes a text node with its whitespace intact.
  A ``<`` that cannot start a tag (``a < b``) stays part of the text.
* Closing tags are skipped.  Void tags (``br``, ``hr``, ``img``, ``input``
  and the rest of the HTML void set) and tags ending in ``/`` become
  childless elements.  Comments, doctypes and processing instructions are
  dropped.
* Any other tag is a container: its matching close tag is located, the
  inner markup is parsed recursively and the cursor jumps past the close.

Malformed input is absorbed, never raised:

* an opening tag without ``>`` turns the rest of the input into one text
  node;
* a container without a matching close turns everything from that tag
  onward into one text node.

Close-tag matching counts nested tags of the same name.  The historical
behaviour (take the first literal ``</name>``) is available through
``legacy_close_search=True``; with it ``<ul><li><ul><li>x</li></ul></li></ul>``
closes the outer ``li`` at the inner ``</li>``.
"""

from __future__ import annotations

import re
from functools import lru_cache

from tiptapify.converter.html_utils import parse_attributes
from tiptapify.errors import ErrorCode, TiptapifyParseError
from tiptapify.models import ConversionWarning, ElementKind, ParsedElement
from tiptapify.observability import get_logger

log = get_logger("tiptapify.parser")

VOID_TAGS: frozenset[str] = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
})

# A "<" only opens a tag when followed by a name, "/", "!" or "?".
_TAG_START_RE = re.compile(r"<[A-Za-z/!?]")

_TAG_NAME_RE = re.compile(r"[^\s/>]+")


@lru_cache(maxsize=64)
def _same_name_tag_re(name: str) -> re.Pattern[str]:
    """Match opening and closing tags called *name* (case-insensitive)."""
    return re.compile(
        r"<(/?)" + re.escape(name) + r"(?=[\s/>])([^>]*)>",
        re.IGNORECASE,
    )


class HtmlParser:
    """Single-pass HTML scanner producing a :class:`ParsedElement` forest.

    A parser instance is cheap; create one per call.  Anomalies found while
    scanning are recorded in :attr:`warnings`.

    Parameters
    ----------
    legacy_close_search:
        Find closing tags by literal substring search, ignoring nesting.
    max_depth:
        Deepest element nesting that is structured.  The content of an
        element beyond this depth is kept as a single text node.
    """

    def __init__(self, *, legacy_close_search: bool = False, max_depth: int = 128) -> None:
        self._legacy = legacy_close_search
        self._max_depth = max_depth
        self._source = ""
        self.warnings: list[ConversionWarning] = []

    def parse(self, html: str | None) -> list[ParsedElement]:
        """Parse *html* into a list of top-level elements.  Never raises."""
        self.warnings = []
        if not html:
            return []
        self._source = html
        try:
            return self._parse_range(0, len(html), 0)
        except RecursionError:
            self._warn(
                "PARSE_RECURSION_LIMIT",
                "Markup nested too deeply; kept as text",
                length=len(html),
            )
            return [ParsedElement.text_node(html)]

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def _parse_range(self, start: int, end: int, depth: int) -> list[ParsedElement]:
        src = self._source
        elements: list[ParsedElement] = []
        pos = start

        while pos < end:
            match = _TAG_START_RE.search(src, pos, end)
            if match is None:
                _append_text(elements, src[pos:end])
                break

            tag_start = match.start()
            if tag_start > pos:
                _append_text(elements, src[pos:tag_start])

            try:
                pos = self._consume_tag(tag_start, end, depth, elements)
            except TiptapifyParseError as exc:
                self._warn(exc.code, exc.message, **exc.context)
                _append_text(elements, src[tag_start:end])
                break

        return elements

    def _consume_tag(
        self,
        tag_start: int,
        end: int,
        depth: int,
        elements: list[ParsedElement],
    ) -> int:
        """Handle the tag at *tag_start* and return the new cursor."""
        src = self._source

        if src.startswith("<!--", tag_start):
            close = src.find("-->", tag_start + 4, end)
            if close == -1:
                raise TiptapifyParseError(
                    "Unterminated comment",
                    code=ErrorCode.UNTERMINATED_TAG,
                    context={"position": tag_start, "tag": "!--"},
                )
            return close + 3

        tag_end = src.find(">", tag_start + 1, end)
        if tag_end == -1:
            raise TiptapifyParseError(
                "Opening tag has no closing '>'",
                code=ErrorCode.UNTERMINATED_TAG,
                context={"position": tag_start},
            )

        content = src[tag_start + 1:tag_end]

        # Closing tag, doctype or processing instruction.
        if content.startswith(("/", "!", "?")):
            return tag_end + 1

        raw_name = _TAG_NAME_RE.match(content).group(0)
        name = raw_name.lower()
        attributes = parse_attributes(content[len(raw_name):])

        if name in VOID_TAGS or content.rstrip().endswith("/"):
            elements.append(ParsedElement.element(name, attributes))
            return tag_end + 1

        close_start, close_end = self._find_close(raw_name, tag_end + 1, end)
        if close_start == -1:
            raise TiptapifyParseError(
                f"No closing tag for <{name}>",
                code=ErrorCode.UNCLOSED_ELEMENT,
                context={"position": tag_start, "tag": name},
            )

        if depth + 1 >= self._max_depth:
            self._warn(
                "PARSE_DEPTH_LIMIT",
                f"<{name}> nested deeper than {self._max_depth}; kept as text",
                position=tag_start,
                tag=name,
            )
            children: list[ParsedElement] = []
            _append_text(children, src[tag_end + 1:close_start])
        else:
            children = self._parse_range(tag_end + 1, close_start, depth + 1)

        elements.append(ParsedElement.element(name, attributes, children))
        return close_end

    def _find_close(self, raw_name: str, start: int, end: int) -> tuple[int, int]:
        """Locate the close tag of a container opened just before *start*.

        Returns ``(-1, -1)`` when there is none.
        """
        src = self._source

        if self._legacy:
            closing = f"</{raw_name}>"
            pos = src.find(closing, start, end)
            if pos == -1:
                return -1, -1
            return pos, pos + len(closing)

        open_count = 1
        for match in _same_name_tag_re(raw_name.lower()).finditer(src, start, end):
            if match.group(1):
                open_count -= 1
                if open_count == 0:
                    return match.start(), match.end()
            elif not match.group(2).rstrip().endswith("/"):
                open_count += 1
        return -1, -1

    def _warn(self, code: str, message: str, **context: object) -> None:
        code = code.value if isinstance(code, ErrorCode) else code
        self.warnings.append(ConversionWarning(code=code, message=message, context=dict(context)))
        log.debug(message, extra={"extra_fields": {"op": "parse_html", "code": code, **context}})


def _append_text(elements: list[ParsedElement], text: str) -> None:
    """Append *text*, merging it into a trailing text node."""
    if not text:
        return
    if elements and elements[-1].kind == ElementKind.TEXT:
        elements[-1].text = (elements[-1].text or "") + text
    else:
        elements.append(ParsedElement.text_node(text))


def parse_html(
    html: str | None,
    *,
    legacy_close_search: bool = False,
    max_depth: int = 128,
) -> list[ParsedElement]:
    """Parse an HTML string into a generic element tree.  Never raises.

    >>> [e.tag_name for e in parse_html("<p>a</p><hr>")]
    ['p', 'hr']
    """
    parser = HtmlParser(legacy_close_search=legacy_close_search, max_depth=max_depth)
    return parser.parse(html)
