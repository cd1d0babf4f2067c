"""Render laid-out transcript pages to standalone HTML."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .layout import TERM_COLUMN_LABEL, build_preview

if typ.TYPE_CHECKING:
    from transcript_designer.document.models import Document

    from .models import PreviewPage

DEFAULT_TEMPLATE = "transcript_preview.jinja"


class HtmlPreviewRenderer:
    """Render :class:`PreviewPage` objects through the A4 page template."""

    def __init__(
        self,
        *,
        templates_dir: Path | None = None,
        template_name: str = DEFAULT_TEMPLATE,
    ) -> None:
        """Initialize the Jinja environment.

        Parameters
        ----------
        templates_dir : Path, optional
            Directory containing Jinja templates; defaults to the package
            ``templates`` directory.
        template_name : str, optional
            Page template to render. Defaults to ``transcript_preview.jinja``.
        """
        default_templates = Path(__file__).resolve().parents[1] / "templates"
        self.templates_dir = templates_dir or default_templates
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.template = self.env.get_template(template_name)

    def render(self, page: PreviewPage, *, title: str | None = None) -> str:
        """Return the HTML for ``page``.

        The output depends only on ``page`` and ``title``, so rendering the
        same page twice produces identical text.
        """
        context = {
            "page": page,
            "title": title or page.header.document_title or "Transcript Preview",
            "term_column_label": TERM_COLUMN_LABEL,
        }
        html = self.template.render(**context)
        if not html.endswith("\n"):
            html += "\n"
        return html

    def render_document(self, document: Document, *, title: str | None = None) -> str:
        """Lay out ``document`` and render it in one step."""
        return self.render(build_preview(document), title=title)


__all__ = ["DEFAULT_TEMPLATE", "HtmlPreviewRenderer"]
