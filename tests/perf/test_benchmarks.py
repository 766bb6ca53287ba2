"""Performance benchmarks for the tiptapify engine.

Run with: pytest tests/perf/ -v -s
"""
import subprocess
import sys
import time

from tiptapify.converter.blocks import BlockIdGenerator, apply_format, blocks_to_tiptap, tiptap_to_blocks
from tiptapify.converter.html_to_tiptap import HtmlToTipTapConverter
from tiptapify.converter.markdown import markdown_to_tiptap, tiptap_to_plain_text
from tiptapify.converter.tiptap_to_html import TipTapToHtmlRenderer
from tiptapify.converter.validator import validate_document
from tiptapify.models import TextSpan


def _make_large_html(n_sections: int = 100) -> str:
    """Generate a note with headings, formatted paragraphs, lists and code."""
    parts = ["<h1>Large Note</h1>"]
    for i in range(n_sections):
        parts.append(f"<h2>Section {i}</h2>")
        parts.append(f"<p>Paragraph {i} with <strong>bold</strong> and <em>italic</em> text.</p>")
        parts.append(f"<ul><li>Item {i}a</li><li>Item {i}b<ul><li>nested</li></ul></li></ul>")
        if i % 5 == 0:
            parts.append(f'<pre><code class="language-python">def func_{i}():\n    return {i}</code></pre>')
        if i % 10 == 0:
            parts.append(f"<blockquote><p>A quote in section {i}</p></blockquote>")
            parts.append("<table><tr><th>A</th><th>B</th></tr><tr><td>1</td><td>2</td></tr></table>")
    return "\n".join(parts)


def _make_large_markdown(n_sections: int = 100) -> str:
    lines = ["# Large Note\n"]
    for i in range(n_sections):
        lines.append(f"## Section {i}\n")
        lines.append(f"Paragraph {i} with **bold** and *italic* and `code`.\n")
        lines.append(f"- Item {i}a\n- Item {i}b\n")
    return "\n".join(lines)


class TestImportPerformance:
    """Benchmark package import time (< 500ms)."""

    def test_import_time_under_500ms(self):
        """Import 'tiptapify' in a fresh subprocess, best of 3 runs."""
        code = (
            "import time; "
            "t0 = time.perf_counter(); "
            "import tiptapify; "
            "elapsed = (time.perf_counter() - t0) * 1000; "
            "print(f'{elapsed:.2f}')"
        )
        times = []
        for _ in range(3):
            result = subprocess.run(
                [sys.executable, "-c", code],
                capture_output=True,
                text=True,
                timeout=10,
            )
            assert result.returncode == 0, f"Import failed: {result.stderr}"
            times.append(float(result.stdout.strip()))
        best_ms = min(times)
        print(f"\n  Package import times: {times} best={best_ms:.2f}ms")
        assert best_ms < 500, f"Import too slow: best {best_ms:.2f}ms of {times} (limit: 500ms)"

    def test_version_accessible(self):
        import tiptapify

        assert tiptapify.__version__ == "0.1.0"


class TestHtmlConverterPerformance:
    """Benchmark HTML -> TipTap."""

    def test_small_note_under_20ms(self):
        converter = HtmlToTipTapConverter()
        html = "<h1>Hello</h1><p>World with <strong>bold</strong> text.</p><ul><li>a</li><li>b</li></ul>"

        start = time.perf_counter()
        for _ in range(100):
            converter.convert(html)
        elapsed = time.perf_counter() - start

        avg_ms = (elapsed / 100) * 1000
        print(f"\n  Small note convert: {avg_ms:.2f}ms avg")
        assert avg_ms < 20, f"Small note conversion too slow: {avg_ms:.2f}ms"

    def test_large_note_under_1s(self):
        converter = HtmlToTipTapConverter()
        html = _make_large_html(100)

        start = time.perf_counter()
        result = converter.convert(html)
        elapsed_ms = (time.perf_counter() - start) * 1000

        print(
            f"\n  Large note convert (100 sections):"
            f" {elapsed_ms:.2f}ms, {len(result.document['content'])} nodes"
        )
        assert elapsed_ms < 1000, f"Large note conversion too slow: {elapsed_ms:.2f}ms"


class TestRendererPerformance:
    """Benchmark TipTap -> HTML and validation."""

    def test_render_large_document_under_100ms(self):
        document = HtmlToTipTapConverter().convert(_make_large_html(20)).document
        renderer = TipTapToHtmlRenderer()

        start = time.perf_counter()
        for _ in range(10):
            renderer.render(document)
        elapsed = time.perf_counter() - start

        avg_ms = (elapsed / 10) * 1000
        print(f"\n  Render {len(document['content'])} nodes: {avg_ms:.2f}ms avg")
        assert avg_ms < 100, f"Rendering too slow: {avg_ms:.2f}ms"

    def test_validate_large_document_under_50ms(self):
        document = HtmlToTipTapConverter().convert(_make_large_html(100)).document

        start = time.perf_counter()
        for _ in range(10):
            validate_document(document)
        elapsed = time.perf_counter() - start

        avg_ms = (elapsed / 10) * 1000
        print(f"\n  Validate {len(document['content'])} nodes: {avg_ms:.2f}ms avg")
        assert avg_ms < 50, f"Validation too slow: {avg_ms:.2f}ms"


class TestBlockEditorPerformance:
    """Benchmark the block editor path."""

    def test_blocks_round_trip_under_100ms(self):
        document = HtmlToTipTapConverter().convert(_make_large_html(100)).document

        start = time.perf_counter()
        blocks = tiptap_to_blocks(document, BlockIdGenerator())
        blocks_to_tiptap(blocks)
        elapsed_ms = (time.perf_counter() - start) * 1000

        print(f"\n  Blocks round trip ({len(blocks)} blocks): {elapsed_ms:.2f}ms")
        assert elapsed_ms < 100, f"Block conversion too slow: {elapsed_ms:.2f}ms"

    def test_apply_format_on_long_block_under_10ms(self):
        spans = [TextSpan(f"word{i} ") for i in range(1000)]
        total = sum(len(span.text) for span in spans)

        start = time.perf_counter()
        for _ in range(10):
            apply_format(spans, total // 4, total // 2, "bold")
        elapsed = time.perf_counter() - start

        avg_ms = (elapsed / 10) * 1000
        print(f"\n  apply_format over {len(spans)} spans: {avg_ms:.2f}ms avg")
        assert avg_ms < 10, f"apply_format too slow: {avg_ms:.2f}ms"


class TestMarkdownPerformance:
    def test_large_text_round_trip_under_1s(self):
        text = _make_large_markdown(100)

        start = time.perf_counter()
        document = markdown_to_tiptap(text)
        tiptap_to_plain_text(document)
        elapsed_ms = (time.perf_counter() - start) * 1000

        print(f"\n  Markdown round trip (100 sections): {elapsed_ms:.2f}ms")
        assert elapsed_ms < 1000, f"Markdown round trip too slow: {elapsed_ms:.2f}ms"
