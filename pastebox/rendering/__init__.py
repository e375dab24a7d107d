from __future__ import annotations

from dataclasses import dataclass

from jinja2 import Environment, PackageLoader, select_autoescape
from markdown_it import MarkdownIt
from markupsafe import Markup

from pastebox.domain.models import FORMAT_MARKDOWN


HTML_CONTENT_TYPE = "text/html; charset=utf-8"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"

# CommonMark with raw HTML passthrough, plus GitHub-style tables.
_markdown = MarkdownIt("commonmark").enable("table")

_templates = Environment(
    loader=PackageLoader("pastebox", "templates"),
    autoescape=select_autoescape(["html", "xml"]),
)


@dataclass(frozen=True)
class RenderedPaste:
    body: str
    content_type: str


def accepts_html(accept_header: str | None) -> bool:
    """Browsers list ``text/html`` in Accept; API clients and curl do not."""
    return "text/html" in (accept_header or "")


def render_markdown(content: str) -> str:
    """Convert Markdown text to HTML. The output is not sanitized."""
    return _markdown.render(content)


def render_page(paste_id: str, content: str) -> str:
    template = _templates.get_template("paste.html")
    return template.render(
        paste_id=paste_id,
        body=Markup(render_markdown(content)),
    )


def render_raw(content: str) -> RenderedPaste:
    return RenderedPaste(body=content, content_type=TEXT_CONTENT_TYPE)


def render_paste(
    paste_id: str,
    content: str,
    stored_format: str | None,
    wants_html: bool,
    format_override: bool = False,
) -> RenderedPaste:
    """
    Pick the representation of a paste for a public GET.

    Only markdown pastes requested by a browser, without a ``format``
    override, are rendered to HTML. Everything else is returned verbatim as
    plain text.
    """
    if stored_format == FORMAT_MARKDOWN and wants_html and not format_override:
        return RenderedPaste(
            body=render_page(paste_id, content),
            content_type=HTML_CONTENT_TYPE,
        )
    return render_raw(content)
