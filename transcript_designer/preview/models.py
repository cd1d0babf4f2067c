"""Laid-out page structures produced by the preview projection."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    from transcript_designer.document.models import (
        StudentDetails,
        TranscriptFooter,
        TranscriptHeader,
    )


@dc.dataclass(frozen=True, slots=True)
class Column:
    """One rendered column: the ``Course``/``ColumnConfig`` key and its header."""

    key: str
    label: str


@dc.dataclass(frozen=True, slots=True)
class TableRow:
    """A rendered course row.

    Attributes
    ----------
    course_id : str
        Identifier of the source course.
    term_label : str | None
        Term name shown in the list layout's ``Term`` column; ``None`` in the
        grid layout, where the term is the table caption instead.
    code : str
        Course code, the first half of the identity cell.
    name : str
        Course name, the second half of the identity cell.
    cells : tuple[str, ...]
        Values for the enabled optional columns, aligned with the table's
        ``columns``.
    """

    course_id: str
    term_label: str | None
    code: str
    name: str
    cells: tuple[str, ...]


@dc.dataclass(frozen=True, slots=True)
class TermTable:
    """A self-contained boxed table for one term (grid layout)."""

    term_id: str
    title: str
    rows: tuple[TableRow, ...]


@dc.dataclass(frozen=True, slots=True)
class CourseTableBlock:
    """A block of course tables rendered with one column configuration.

    In the ``grid`` format ``term_tables`` holds one table per term and
    ``rows`` is empty; in the ``list`` format ``rows`` holds every course
    flattened across terms and ``term_tables`` is empty.
    """

    format: str
    section_label: str
    columns: tuple[Column, ...]
    term_tables: tuple[TermTable, ...] = ()
    rows: tuple[TableRow, ...] = ()
    kind: typ.Literal["courses"] = "courses"

    def all_rows(self) -> list[TableRow]:
        """Return every course row in render order."""
        if self.format == "list":
            return list(self.rows)
        return [row for table in self.term_tables for row in table.rows]


@dc.dataclass(frozen=True, slots=True)
class SummaryField:
    """A label/value pair inside a summary block."""

    label: str
    value: str


@dc.dataclass(frozen=True, slots=True)
class SummaryBlock:
    """A rendered summary section."""

    section_id: str
    type: str
    fields: tuple[SummaryField, ...]
    kind: typ.Literal["summary"] = "summary"


PreviewBlock = CourseTableBlock | SummaryBlock


@dc.dataclass(frozen=True, slots=True)
class PreviewPage:
    """The complete laid-out transcript page."""

    header: TranscriptHeader
    student: StudentDetails
    blocks: tuple[PreviewBlock, ...]
    footer: TranscriptFooter

    @property
    def course_blocks(self) -> list[CourseTableBlock]:
        """Return the course table blocks in render order."""
        return [block for block in self.blocks if isinstance(block, CourseTableBlock)]

    @property
    def summary_blocks(self) -> list[SummaryBlock]:
        """Return the summary blocks in render order."""
        return [block for block in self.blocks if isinstance(block, SummaryBlock)]


__all__ = [
    "Column",
    "CourseTableBlock",
    "PreviewBlock",
    "PreviewPage",
    "SummaryBlock",
    "SummaryField",
    "TableRow",
    "TermTable",
]
