"""Transcript preview file pipeline.

This module turns a saved :class:`~transcript_designer.document.Document` into
a standalone ``preview.html`` artefact. :class:`PreviewPageBuilder` lays the
document out with :func:`~transcript_designer.preview.layout.build_preview`,
renders it through :class:`HtmlPreviewRenderer`, and writes UTF-8 HTML to the
requested path.

Typical usage mirrors the CLI ``preview`` command:

>>> from pathlib import Path
>>> from transcript_designer.document import default_document
>>> builder = PreviewPageBuilder(default_document(), Path("public/preview.html"))
>>> output_path = builder.run()  # doctest: +SKIP
>>> print(output_path)  # doctest: +SKIP
public/preview.html
"""

from __future__ import annotations

import logging
import typing as typ

from .layout import build_preview
from .renderer import HtmlPreviewRenderer

if typ.TYPE_CHECKING:
    from pathlib import Path

    from transcript_designer.document.models import Document

logger = logging.getLogger(__name__)


class PreviewPageBuilder:
    """Render a document preview and write it to disk."""

    def __init__(
        self,
        document: Document,
        output: Path,
        *,
        title: str | None = None,
        renderer: HtmlPreviewRenderer | None = None,
    ) -> None:
        """Store the document and output path.

        Parameters
        ----------
        document : Document
            The document to preview.
        output : Path
            Destination HTML file; parent directories are created on ``run``.
        title : str, optional
            HTML ``<title>``; defaults to the document title.
        renderer : HtmlPreviewRenderer, optional
            Renderer to reuse; a default renderer is created when omitted.
        """
        self.document = document
        self.output = output
        self.title = title
        self.renderer = renderer or HtmlPreviewRenderer()

    def run(self) -> Path:
        """Render and write the preview HTML, returning the output path."""
        page = build_preview(self.document)
        html = self.renderer.render(page, title=self.title)
        self.output.parent.mkdir(parents=True, exist_ok=True)
        self.output.write_text(html, encoding="utf-8")
        logger.info("Wrote preview to %s", self.output)
        return self.output


__all__ = ["PreviewPageBuilder"]
