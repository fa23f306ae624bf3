"""Markdown + LaTeX rendering shared by the Qt player, the web player and
the printable documents.

Question text is authored as Markdown with ``$...$`` math. MarkdownIt turns
it into HTML with raw HTML disabled, so authored text cannot inject markup;
MathJax typesets the math when the document is displayed or printed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import html

from markdown_it import MarkdownIt

MATHJAX_SCRIPT = "https://cdn.jsdelivr.net/npm/mathjax@3/es5/tex-mml-chtml.js"

MATHJAX_HEAD = (
    "<script>window.MathJax = { tex: { inlineMath: [['$','$']], displayMath: [['$$','$$']] } };</script>\n"
    f"<script defer src=\"{MATHJAX_SCRIPT}\"></script>"
)


@dataclass(slots=True)
class MarkdownMathRenderer:
    """Converts markdown-with-math into HTML fragments or full documents."""

    _markdown: MarkdownIt = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._markdown = (
            MarkdownIt("commonmark", {"html": False})
            .enable("table")
            .enable("strikethrough")
        )

    def render_fragment(self, markdown_text: str) -> str:
        sanitized = (markdown_text or "").strip()
        if not sanitized:
            return "<p><em>No content provided.</em></p>"
        return self._markdown.render(sanitized)

    def render_inline(self, markdown_text: str) -> str:
        """Render without the wrapping paragraph, for option labels and table cells."""
        sanitized = (markdown_text or "").strip()
        if not sanitized:
            return ""
        return self._markdown.renderInline(sanitized)

    def render_full_document(
        self,
        markdown_text: str,
        title: str = "ClinkerQuiz",
        font_size: int = 14,
        text_color: str = "#111827",
    ) -> str:
        """Standalone document for the Qt web view."""
        fragment = self.render_fragment(markdown_text)
        return f"""<!doctype html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <title>{html.escape(title)}</title>
    <style>
      body {{ font-family: 'Segoe UI', system-ui, sans-serif; margin: 0; padding: 1rem; background: transparent; color: {text_color}; }}
      .question-html {{ font-size: {font_size}pt; line-height: 1.5; }}
    </style>
    {MATHJAX_HEAD}
  </head>
  <body>
    <div class=\"question-html\">{fragment}</div>
  </body>
</html>"""


renderer = MarkdownMathRenderer()
# MarkdownIt is safe for concurrent read-only renders, so the Qt thread and
# the API thread share this instance.
