"""Utilities for laying out, rendering, and writing transcript previews."""

from .builder import PreviewPageBuilder
from .layout import build_preview, strip_outclass_suffix, visible_columns
from .models import (
    Column,
    CourseTableBlock,
    PreviewPage,
    SummaryBlock,
    SummaryField,
    TableRow,
    TermTable,
)
from .renderer import HtmlPreviewRenderer

__all__ = [
    "Column",
    "CourseTableBlock",
    "HtmlPreviewRenderer",
    "PreviewPage",
    "PreviewPageBuilder",
    "SummaryBlock",
    "SummaryField",
    "TableRow",
    "TermTable",
    "build_preview",
    "strip_outclass_suffix",
    "visible_columns",
]
