"""Unit tests for the transcript preview layout projection.

The projection decides which course tables and summary blocks appear, in what
order, and with which columns. These tests build small documents directly
from the model dataclasses so each rule can be checked in isolation.
"""

from __future__ import annotations

import dataclasses as dc

import pytest

from transcript_designer import editor
from transcript_designer.document import (
    ColumnConfig,
    Course,
    Document,
    SummaryConfig,
    SummaryTableConfig,
    SystemValue,
    TableConfigs,
    Term,
    default_document,
)
from transcript_designer.preview import (
    CourseTableBlock,
    SummaryBlock,
    build_preview,
    strip_outclass_suffix,
    visible_columns,
)


def _course(course_id: str, **fields: str) -> Course:
    return Course(id=course_id, code=course_id.upper(), name=f"Course {course_id}", **fields)


def _document(*terms: Term, **changes: object) -> Document:
    """Return a minimal document with all summary sections hidden."""
    base = Document(
        course_data=terms,
        summary_config=SummaryConfig(
            sections=(
                SummaryTableConfig(id="in", type="InClass", is_visible=False),
                SummaryTableConfig(id="out", type="OutClass", is_visible=False),
                SummaryTableConfig(id="all", type="Overall", is_visible=False),
            )
        ),
    )
    return dc.replace(base, **changes)


IN_TERMS = (
    Term(id="t1", name="Term I", courses=(_course("a"), _course("b"))),
    Term(id="t2", name="Term II", courses=(_course("c"),)),
)
OUT_TERMS = (
    Term(id="o1", name="Term I (OutClass)", type="OutClass", courses=(_course("x"),)),
    Term(id="o2", name="Internship", type="OutClass", courses=(_course("y"),)),
)


def test_default_document_layout() -> None:
    """The starting design shows an InClass grid, its summary, then an OutClass list."""
    page = build_preview(default_document())

    kinds = [block.kind for block in page.blocks]
    assert kinds == ["courses", "summary", "courses"], f"Unexpected order {kinds!r}"
    in_block, out_block = page.course_blocks
    assert (in_block.format, in_block.section_label) == ("grid", "InClass")
    assert (out_block.format, out_block.section_label) == ("list", "OutClass")
    assert [table.title for table in in_block.term_tables] == ["Term I", "Term II"]
    (summary,) = page.summary_blocks
    assert [field.label for field in summary.fields] == [
        "Total Credits (InClass)",
        "Total Credits Awarded",
        "InClass CGPA",
    ]
    assert [field.value for field in summary.fields] == ["100", "72", "3.07"]


def test_grid_block_has_one_table_per_term() -> None:
    document = _document(*IN_TERMS)
    (block,) = build_preview(document).course_blocks

    assert block.format == "grid"
    assert [t.term_id for t in block.term_tables] == ["t1", "t2"]
    assert [c.key for c in block.columns] == ["credits", "grade", "gpa"]
    assert block.rows == ()
    assert [row.course_id for row in block.all_rows()] == ["a", "b", "c"]
    assert all(row.term_label is None for row in block.all_rows())


def test_split_mode_uses_each_class_configuration() -> None:
    configs = TableConfigs(
        in_class=ColumnConfig(show_grade=False),
        out_class=ColumnConfig(format="list", show_percentage=True, percentage_label="%"),
    )
    page = build_preview(_document(*IN_TERMS, *OUT_TERMS, table_configs=configs))
    in_block, out_block = page.course_blocks

    assert [c.key for c in in_block.columns] == ["credits", "gpa"]
    assert [c.label for c in out_block.columns] == ["Credits", "Grade", "GPA", "%"]
    assert [row.term_label for row in out_block.rows] == ["Term I", "Internship"]


def test_unified_mode_merges_terms_with_in_class_configuration() -> None:
    """One block holds InClass then OutClass terms under the InClass columns."""
    configs = TableConfigs(
        in_class=ColumnConfig(format="list", show_gpa=False),
        out_class=ColumnConfig(format="grid", show_percentage=True),
    )
    document = _document(
        OUT_TERMS[0], *IN_TERMS, OUT_TERMS[1], table_configs=configs, is_unified_tables=True
    )
    (block,) = build_preview(document).course_blocks

    assert block.format == "list"
    assert block.section_label == "Combined Terms"
    assert [c.key for c in block.columns] == ["credits", "grade"]
    assert [row.course_id for row in block.rows] == ["a", "b", "c", "x", "y"]
    assert [row.term_label for row in block.rows] == [
        "Term I",
        "Term I",
        "Term II",
        "Term I",
        "Internship",
    ]


def test_unified_summaries_follow_the_single_table() -> None:
    sections = SummaryConfig(
        sections=(
            SummaryTableConfig(id="all", type="Overall"),
            SummaryTableConfig(id="out", type="OutClass"),
            SummaryTableConfig(id="in", type="InClass"),
        )
    )
    document = _document(
        *IN_TERMS, *OUT_TERMS, summary_config=sections, is_unified_tables=True
    )
    blocks = build_preview(document).blocks

    assert isinstance(blocks[0], CourseTableBlock)
    assert [b.section_id for b in blocks[1:] if isinstance(b, SummaryBlock)] == [
        "in",
        "out",
        "all",
    ]


def test_split_grid_renders_a_block_per_class_type() -> None:
    """Two grid blocks, each boxing its own term with that term's courses."""
    in_term = Term(id="fall", name="Fall", courses=(_course("a"), _course("b")))
    out_term = Term(
        id="studio", name="Studio (OutClass)", type="OutClass", courses=(_course("x"),)
    )
    configs = TableConfigs(
        in_class=ColumnConfig(format="grid"), out_class=ColumnConfig(format="grid")
    )
    document = _document(
        in_term, out_term, table_configs=configs, is_unified_tables=False
    )
    in_block, out_block = build_preview(document).course_blocks

    assert (in_block.format, in_block.section_label) == ("grid", "InClass")
    assert (out_block.format, out_block.section_label) == ("grid", "OutClass")
    assert [t.term_id for t in in_block.term_tables] == ["fall"]
    assert [t.term_id for t in out_block.term_tables] == ["studio"]
    assert [len(t.rows) for t in in_block.term_tables] == [2]
    assert [len(t.rows) for t in out_block.term_tables] == [1]
    assert [row.course_id for row in in_block.term_tables[0].rows] == ["a", "b"]
    assert in_block.rows == () and out_block.rows == ()


def test_split_order_and_overall_last() -> None:
    sections = SummaryConfig(
        sections=(
            SummaryTableConfig(id="all", type="Overall"),
            SummaryTableConfig(id="out", type="OutClass"),
            SummaryTableConfig(id="in", type="InClass"),
        )
    )
    page = build_preview(_document(*IN_TERMS, *OUT_TERMS, summary_config=sections))
    labels = [
        block.section_label if isinstance(block, CourseTableBlock) else block.section_id
        for block in page.blocks
    ]
    assert labels == ["InClass", "in", "OutClass", "out", "all"]


def test_missing_class_type_omits_its_table_but_keeps_summary() -> None:
    sections = SummaryConfig(sections=(SummaryTableConfig(id="in", type="InClass"),))
    page = build_preview(_document(*OUT_TERMS, summary_config=sections))

    assert [block.section_label for block in page.course_blocks] == ["OutClass"]
    assert [block.section_id for block in page.summary_blocks] == ["in"]
    assert page.blocks[0].kind == "summary"


def test_terms_without_out_class_tag_count_as_in_class() -> None:
    odd = Term(id="z", name="Bridge", type="Elective", courses=(_course("z"),))  # type: ignore[arg-type]
    (block,) = build_preview(_document(odd)).course_blocks
    assert block.section_label == "InClass"


def test_section_with_no_enabled_fields_is_not_rendered() -> None:
    sections = SummaryConfig(
        sections=(
            SummaryTableConfig(
                id="in",
                type="InClass",
                show_credits_required=False,
                show_credits_awarded=False,
                show_cgpa=False,
            ),
        )
    )
    page = build_preview(_document(*IN_TERMS, summary_config=sections))
    assert page.summary_blocks == []


def test_summary_fields_follow_flags_and_missing_values_render_empty() -> None:
    sections = SummaryConfig(
        sections=(
            SummaryTableConfig(id="all", type="Overall", show_credits_awarded=False),
        )
    )
    page = build_preview(_document(summary_config=sections))
    (summary,) = page.summary_blocks
    assert [(f.label, f.value) for f in summary.fields] == [
        ("Total Credits", ""),
        ("CGPA", ""),
    ]

    valued = dc.replace(
        _document(summary_config=sections),
        system_values={"Overall": SystemValue(credits_required="130", cgpa="2.98")},
    )
    (summary,) = build_preview(valued).summary_blocks
    assert [f.value for f in summary.fields] == ["130", "2.98"]


def test_visible_columns_use_fixed_order() -> None:
    config = ColumnConfig(
        show_percentage=True,
        show_course_type=True,
        course_type_label="Kind",
    )
    assert [(c.key, c.label) for c in visible_columns(config)] == [
        ("course_type", "Kind"),
        ("credits", "Credits"),
        ("grade", "Grade"),
        ("gpa", "GPA"),
        ("percentage", "Percentage"),
    ]


def test_empty_course_type_renders_as_core() -> None:
    term = Term(
        id="t",
        name="Term I",
        courses=(_course("a"), _course("b", course_type="Elective")),
    )
    configs = TableConfigs(in_class=ColumnConfig(show_course_type=True, show_credits=False))
    (block,) = build_preview(_document(term, table_configs=configs)).course_blocks
    assert [row.cells[0] for row in block.all_rows()] == ["Core", "Elective"]


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("Term I (OutClass)", "Term I"),
        ("Term I (OutClass) (OutClass)", "Term I"),
        ("(OutClass)Summer", "Summer"),
        ("Internship", "Internship"),
    ],
)
def test_strip_outclass_suffix(name: str, expected: str) -> None:
    assert strip_outclass_suffix(name) == expected


def test_grid_titles_keep_full_term_names() -> None:
    configs = TableConfigs(out_class=ColumnConfig(format="grid"))
    page = build_preview(_document(*OUT_TERMS, table_configs=configs))
    (block,) = page.course_blocks
    assert [t.title for t in block.term_tables] == ["Term I (OutClass)", "Internship"]


def test_projection_is_pure() -> None:
    """The same document always yields an equal page."""
    document = editor.toggle_unified_tables(default_document())
    assert build_preview(document) == build_preview(document)
