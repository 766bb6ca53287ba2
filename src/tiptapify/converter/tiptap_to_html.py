"""TipTap document to HTML renderer.

The structural inverse of :mod:`tiptapify.converter.html_to_tiptap`: every
supported node type maps back onto the tag it was parsed from, so that for
documents restricted to supported nodes and marks::

    html_to_tiptap(tiptap_to_html(doc)) == validate_document(doc)

Usage::

    from tiptapify.converter.tiptap_to_html import TipTapToHtmlRenderer

    renderer = TipTapToHtmlRenderer()
    html = renderer.render(document)

Rendering never raises.  Unknown node types recurse into ``content`` when
they have one and otherwise emit their escaped ``text``.
"""

from __future__ import annotations

from collections.abc import Callable as _Callable
from typing import Any

from tiptapify.config import TiptapifyConfig
from tiptapify.converter.html_utils import escape_html
from tiptapify.converter.marks import wrap_marks
from tiptapify.converter.tables import table_to_html
from tiptapify.converter.validator import heading_level, node_attrs
from tiptapify.observability import get_logger

log = get_logger("tiptapify.renderer")

EMPTY_HTML = "<p></p>"

_LIST_TAGS: dict[str, str] = {
    "bulletList": "ul",
    "orderedList": "ol",
}


class TipTapToHtmlRenderer:
    """Renders TipTap nodes to an HTML string.

    Parameters
    ----------
    config:
        Engine configuration; ``link_fallback_href`` and the table fallback
        texts are used here.
    """

    def __init__(self, config: TiptapifyConfig | None = None) -> None:
        self._config = config or TiptapifyConfig()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render(self, content: Any) -> str:
        """Render any stored content shape to HTML.

        Parameters
        ----------
        content:
            A TipTap document, a bare list of nodes, any object with a
            ``content`` list, a legacy ``{"html": "..."}`` wrapper, or an
            HTML string (returned unchanged).

        Returns
        -------
        str
            The HTML markup; ``"<p></p>"`` when nothing renders.
        """
        if isinstance(content, str):
            return content
        if isinstance(content, dict) and isinstance(content.get("html"), str) and "content" not in content:
            return content["html"]

        if isinstance(content, list):
            nodes = content
        elif isinstance(content, dict) and isinstance(content.get("content"), list):
            nodes = content["content"]
        else:
            return EMPTY_HTML

        try:
            html = self.render_nodes(nodes)
        except RecursionError:
            log.warning(
                "TipTap document nested too deeply to render",
                extra={"extra_fields": {"op": "tiptap_to_html", "nodes": len(nodes)}},
            )
            return EMPTY_HTML
        return html or EMPTY_HTML

    def render_nodes(self, nodes: list[Any]) -> str:
        return "".join(self.render_node(node) for node in nodes)

    def render_node(self, node: Any) -> str:
        """Render one node; non-dict entries render as nothing."""
        if not isinstance(node, dict):
            return ""

        node_type = node.get("type")
        if not isinstance(node_type, str):
            return self._render_unknown(node)
        renderer = _NODE_RENDERERS.get(node_type)
        if renderer is not None:
            return renderer(self, node)
        if node_type in _LIST_TAGS:
            return self._render_list(node, _LIST_TAGS[node_type])
        return self._render_unknown(node)

    # ------------------------------------------------------------------
    # Node renderers
    # ------------------------------------------------------------------

    def _render_text(self, node: dict) -> str:
        text = node.get("text")
        if not isinstance(text, str):
            return ""
        marks = node.get("marks")
        return wrap_marks(
            text,
            marks if isinstance(marks, list) else None,
            fallback_href=self._config.link_fallback_href,
        )

    def _render_paragraph(self, node: dict) -> str:
        return f"<p>{self._render_children(node)}</p>"

    def _render_heading(self, node: dict) -> str:
        level = heading_level(node)
        return f"<h{level}>{self._render_children(node)}</h{level}>"

    def _render_list(self, node: dict, tag: str) -> str:
        return f"<{tag}>{self._render_children(node)}</{tag}>"

    def _render_list_item(self, node: dict) -> str:
        # The leading paragraph renders inline unless it is blank and has
        # siblings; later ones keep their <p>.
        children = _children(node)
        parts: list[str] = []
        for index, child in enumerate(children):
            if (
                index == 0
                and isinstance(child, dict)
                and child.get("type") == "paragraph"
                and (len(children) == 1 or _has_visible_text(child))
            ):
                parts.append(self._render_children(child))
            else:
                parts.append(self.render_node(child))
        return f"<li>{''.join(parts)}</li>"

    def _render_blockquote(self, node: dict) -> str:
        return f"<blockquote>{self._render_children(node)}</blockquote>"

    def _render_code_block(self, node: dict) -> str:
        text = "".join(
            child["text"]
            for child in _children(node)
            if isinstance(child, dict) and child.get("type") == "text" and isinstance(child.get("text"), str)
        )
        language = node_attrs(node).get("language")
        if language:
            return f'<pre><code class="language-{escape_html(str(language))}">{escape_html(text)}</code></pre>'
        return f"<pre><code>{escape_html(text)}</code></pre>"

    def _render_hard_break(self, node: dict) -> str:
        return "<br>"

    def _render_horizontal_rule(self, node: dict) -> str:
        return "<hr>"

    def _render_table(self, node: dict) -> str:
        return table_to_html(node, self._config)

    def _render_table_part(self, node: dict) -> str:
        # Rows and cells outside a table render as a one-row table.
        if node.get("type") == "tableRow":
            return table_to_html({"type": "table", "content": [node]}, self._config)
        row = {"type": "tableRow", "content": [node]}
        return table_to_html({"type": "table", "content": [row]}, self._config)

    def _render_unknown(self, node: dict) -> str:
        if isinstance(node.get("content"), list):
            return self._render_children(node)
        text = node.get("text")
        return escape_html(text) if isinstance(text, str) else ""

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _render_children(self, node: dict) -> str:
        return self.render_nodes(_children(node))


def _children(node: dict) -> list[Any]:
    content = node.get("content")
    return content if isinstance(content, list) else []


def _has_visible_text(node: dict) -> bool:
    return any(
        isinstance(child, dict) and isinstance(child.get("text"), str) and child["text"].strip()
        for child in _children(node)
    )


# ------------------------------------------------------------------
# Node renderer dispatch table
# ------------------------------------------------------------------

_NodeRenderer = _Callable[["TipTapToHtmlRenderer", dict], str]

_NODE_RENDERERS: dict[str, _NodeRenderer] = {
    "text": TipTapToHtmlRenderer._render_text,
    "paragraph": TipTapToHtmlRenderer._render_paragraph,
    "heading": TipTapToHtmlRenderer._render_heading,
    "listItem": TipTapToHtmlRenderer._render_list_item,
    "blockquote": TipTapToHtmlRenderer._render_blockquote,
    "codeBlock": TipTapToHtmlRenderer._render_code_block,
    "hardBreak": TipTapToHtmlRenderer._render_hard_break,
    "horizontalRule": TipTapToHtmlRenderer._render_horizontal_rule,
    "table": TipTapToHtmlRenderer._render_table,
    "tableRow": TipTapToHtmlRenderer._render_table_part,
    "tableCell": TipTapToHtmlRenderer._render_table_part,
    "tableHeader": TipTapToHtmlRenderer._render_table_part,
}


# ------------------------------------------------------------------
# Convenience functions
# ------------------------------------------------------------------

def node_to_html(node: Any, config: TiptapifyConfig | None = None) -> str:
    """Render a single TipTap node.  Never raises."""
    renderer = TipTapToHtmlRenderer(config)
    try:
        return renderer.render_node(node)
    except RecursionError:
        log.warning(
            "TipTap node nested too deeply to render",
            extra={"extra_fields": {"op": "node_to_html"}},
        )
        return ""


def tiptap_to_html(content: Any, config: TiptapifyConfig | None = None) -> str:
    """Render stored note content to HTML (see :meth:`TipTapToHtmlRenderer.render`)."""
    return TipTapToHtmlRenderer(config).render(content)
