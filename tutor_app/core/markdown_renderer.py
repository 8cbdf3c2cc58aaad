"""Markdown rendering for chapter summaries and introductions.

Summary text is authored in markdown (bold drop-ins, bullet lists, the odd
table). It is rendered to an HTML fragment on the server so every client gets
the same markup. Raw HTML inside the stored text is not passed through.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from markdown_it import MarkdownIt

from tutor_app.constants.reader_constants import NO_CONTENT_MESSAGE


@dataclass(slots=True)
class MarkdownRenderer:
    """Converts chapter markdown into HTML fragments."""

    enable_html: bool = False
    _markdown: MarkdownIt = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._markdown = (
            MarkdownIt("commonmark", {"html": self.enable_html})
            .enable("table")
            .enable("strikethrough")
        )

    def render_fragment(self, markdown_text: str | None) -> str:
        """Render a markdown string into an HTML fragment."""

        sanitized = (markdown_text or "").strip()
        if not sanitized:
            return f"<p><em>{NO_CONTENT_MESSAGE}</em></p>"
        return self._markdown.render(sanitized)


# MarkdownIt is safe for concurrent read-only renders, so the FastAPI worker
# threads share this instance.
renderer = MarkdownRenderer()
