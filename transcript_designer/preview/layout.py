"""Project a transcript :class:`Document` onto a laid-out preview page.

:func:`build_preview` is a pure function: the same document always yields an
equal :class:`~transcript_designer.preview.models.PreviewPage`. It decides
which course tables and summary blocks appear, in which order, and with which
columns:

1. Terms are split into InClass (anything not tagged ``OutClass``) and
   OutClass.
2. In unified mode a single table holds InClass then OutClass terms using the
   InClass column configuration, followed by the InClass and OutClass
   summaries.
3. Otherwise InClass terms (when present) and their summaries come first,
   then OutClass terms (when present) and their summaries, each table using
   its own column configuration.
4. Overall summaries always come last.

Example
-------
>>> from transcript_designer.document import default_document
>>> page = build_preview(default_document())
>>> [block.format for block in page.course_blocks]
['grid', 'list']
"""

from __future__ import annotations

import typing as typ

from transcript_designer._constants import (
    DEFAULT_COURSE_TYPE,
    FORMAT_LIST,
    IN_CLASS,
    OUT_CLASS,
    OUTCLASS_SUFFIX,
    OVERALL,
)
from transcript_designer.document.models import SystemValue

from .models import (
    Column,
    CourseTableBlock,
    PreviewBlock,
    PreviewPage,
    SummaryBlock,
    SummaryField,
    TableRow,
    TermTable,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from transcript_designer.document.models import (
        ColumnConfig,
        Course,
        Document,
        SummaryTableConfig,
        Term,
    )

UNIFIED_SECTION_LABEL = "Combined Terms"
TERM_COLUMN_LABEL = "Term"

# Optional columns in their fixed render order: (key, visibility flag, label field).
OPTIONAL_COLUMNS: tuple[tuple[str, str, str], ...] = (
    ("course_type", "show_course_type", "course_type_label"),
    ("credits", "show_credits", "credits_label"),
    ("grade", "show_grade", "grade_label"),
    ("gpa", "show_gpa", "gpa_label"),
    ("percentage", "show_percentage", "percentage_label"),
)


def build_preview(document: Document) -> PreviewPage:
    """Return the laid-out preview page for ``document``."""
    in_class_terms = document.terms_of_type(IN_CLASS)
    out_class_terms = document.terms_of_type(OUT_CLASS)
    configs = document.table_configs
    blocks: list[PreviewBlock] = []

    if document.is_unified_tables:
        blocks.append(
            build_course_block(
                [*in_class_terms, *out_class_terms],
                configs.in_class,
                UNIFIED_SECTION_LABEL,
            )
        )
        blocks.extend(_summary_blocks(document, IN_CLASS))
        blocks.extend(_summary_blocks(document, OUT_CLASS))
    else:
        if in_class_terms:
            blocks.append(build_course_block(in_class_terms, configs.in_class, IN_CLASS))
        blocks.extend(_summary_blocks(document, IN_CLASS))
        if out_class_terms:
            blocks.append(
                build_course_block(out_class_terms, configs.out_class, OUT_CLASS)
            )
        blocks.extend(_summary_blocks(document, OUT_CLASS))

    blocks.extend(_summary_blocks(document, OVERALL))
    return PreviewPage(
        header=document.header,
        student=document.student,
        blocks=tuple(blocks),
        footer=document.footer,
    )


def visible_columns(config: ColumnConfig) -> tuple[Column, ...]:
    """Return the enabled optional columns in their fixed order."""
    return tuple(
        Column(key=key, label=getattr(config, label_field))
        for key, flag, label_field in OPTIONAL_COLUMNS
        if getattr(config, flag)
    )


def build_course_block(
    terms: cabc.Sequence[Term], config: ColumnConfig, section_label: str
) -> CourseTableBlock:
    """Lay out ``terms`` with ``config`` in its grid or list format."""
    columns = visible_columns(config)
    if config.format == FORMAT_LIST:
        rows = tuple(
            _build_row(course, columns, term_label=strip_outclass_suffix(term.name))
            for term in terms
            for course in term.courses
        )
        return CourseTableBlock(
            format=FORMAT_LIST,
            section_label=section_label,
            columns=columns,
            rows=rows,
        )
    term_tables = tuple(
        TermTable(
            term_id=term.id,
            title=term.name,
            rows=tuple(_build_row(course, columns) for course in term.courses),
        )
        for term in terms
    )
    return CourseTableBlock(
        format=config.format,
        section_label=section_label,
        columns=columns,
        term_tables=term_tables,
    )


def strip_outclass_suffix(name: str) -> str:
    """Remove every ``(OutClass)`` marker, and the space before it, from a term name."""
    marker = OUTCLASS_SUFFIX.strip()
    label = name
    while marker in label:
        label = label.replace(OUTCLASS_SUFFIX, "").replace(marker, "")
    return label


def _build_row(
    course: Course, columns: tuple[Column, ...], *, term_label: str | None = None
) -> TableRow:
    return TableRow(
        course_id=course.id,
        term_label=term_label,
        code=course.code,
        name=course.name,
        cells=tuple(_cell_value(course, column.key) for column in columns),
    )


def _cell_value(course: Course, key: str) -> str:
    if key == "course_type":
        return course.course_type or DEFAULT_COURSE_TYPE
    return str(getattr(course, key))


def _summary_blocks(document: Document, section_type: str) -> list[SummaryBlock]:
    """Render the visible summary sections of ``section_type``."""
    values = document.system_values.get(section_type) or SystemValue()
    return [
        _build_summary_block(section, values)
        for section in document.summary_config.sections_of_type(section_type)
        if section.has_visible_fields
    ]


def _build_summary_block(section: SummaryTableConfig, values: SystemValue) -> SummaryBlock:
    fields: list[SummaryField] = []
    if section.show_credits_required:
        fields.append(SummaryField(section.credits_required_label, values.credits_required))
    if section.show_credits_awarded:
        fields.append(SummaryField(section.credits_awarded_label, values.credits_awarded))
    if section.show_cgpa:
        fields.append(SummaryField(section.cgpa_label, values.cgpa))
    return SummaryBlock(section_id=section.id, type=section.type, fields=tuple(fields))


__all__ = [
    "OPTIONAL_COLUMNS",
    "TERM_COLUMN_LABEL",
    "UNIFIED_SECTION_LABEL",
    "build_course_block",
    "build_preview",
    "strip_outclass_suffix",
    "visible_columns",
]
