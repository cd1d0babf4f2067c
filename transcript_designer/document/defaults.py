"""Canonical default document used for new templates and load-time backfills."""

from __future__ import annotations

import uuid

from transcript_designer._constants import (
    DOCUMENT_SCHEMA_VERSION,
    FORMAT_GRID,
    FORMAT_LIST,
    IN_CLASS,
    OUT_CLASS,
    OVERALL,
)

from .models import (
    ColumnConfig,
    Course,
    Document,
    StudentDetails,
    SummaryConfig,
    SummaryTableConfig,
    SystemValue,
    TableConfigs,
    Term,
    TranscriptFooter,
    TranscriptHeader,
)

STUDENT_VARIABLES: dict[str, tuple[str, ...]] = {
    "name": ("{{student.name}}", "{{user.name}}"),
    "roll_no": ("{{student.rollNo}}", "{{user.rollNo}}"),
    "status": ("{{student.status}}", "{{date}}"),
}

DEFAULT_TABLE_CONFIGS = TableConfigs(
    in_class=ColumnConfig(format=FORMAT_GRID),
    out_class=ColumnConfig(format=FORMAT_LIST),
)

DEFAULT_SUMMARY_SECTIONS: tuple[SummaryTableConfig, ...] = (
    SummaryTableConfig(
        id="inclass-default",
        type=IN_CLASS,
        is_visible=True,
        credits_required_label="Total Credits (InClass)",
        credits_awarded_label="Total Credits Awarded",
        cgpa_label="InClass CGPA",
    ),
    SummaryTableConfig(
        id="outclass-default",
        type=OUT_CLASS,
        is_visible=False,
        credits_required_label="Total Credits (OutClass)",
        credits_awarded_label="Total Credits Awarded",
        cgpa_label="OutClass CGPA",
    ),
    SummaryTableConfig(
        id="overall-default",
        type=OVERALL,
        is_visible=False,
        credits_required_label="Total Credits",
        credits_awarded_label="Total Credits Awarded",
        cgpa_label="Overall CGPA",
    ),
)

DEFAULT_SYSTEM_VALUES: dict[str, SystemValue] = {
    IN_CLASS: SystemValue(credits_required="100", credits_awarded="72", cgpa="3.07"),
    OUT_CLASS: SystemValue(credits_required="30", credits_awarded="20", cgpa="2.56"),
    OVERALL: SystemValue(credits_required="130", credits_awarded="92", cgpa="2.98"),
}

# (term name, class type, [(code, name, credits, grade, gpa, percentage, type)])
_SAMPLE_TERMS: tuple[tuple[str, str, tuple[tuple[str, ...], ...]], ...] = (
    (
        "Term I",
        IN_CLASS,
        (
            ("ADA1101", "Fundamentals of Statistics", "4", "B-", "2.33", "65%", "Core"),
            ("ENTP1001", "Art of Communication", "4", "D", "1.00", "45%", "Core"),
            ("ENTP1103", "Business and Legal Management", "4", "B", "2.67", "72%", "Elective"),
        ),
    ),
    (
        "Term II",
        IN_CLASS,
        (
            ("ENTP1102", "Fundamentals of Corporate Communication", "4", "A", "3.67", "88%", ""),
            (
                "ENTP1305",
                "Macroeconomics | How Economy Affects Business",
                "4",
                "B+",
                "3.00",
                "78%",
                "",
            ),
        ),
    ),
    (
        "Term I",
        OUT_CLASS,
        (("OC1201", "Dropshipping- First Paycheck Challenge", "10", "A", "3.67", "90%", ""),),
    ),
    (
        "Term II",
        OUT_CLASS,
        (("UGTBM28", "UG 28 Summer Internship 2025", "10", "A+", "4.00", "95%", ""),),
    ),
    (
        "Term III",
        OUT_CLASS,
        (("CCC28", "Content Creator Challenge", "10", "-", "-", "-", ""),),
    ),
)


def _new_id() -> str:
    return str(uuid.uuid4())


def default_course_data() -> tuple[Term, ...]:
    """Return the sample terms shown in a freshly created design."""
    terms: list[Term] = []
    for term_name, class_type, rows in _SAMPLE_TERMS:
        courses = tuple(
            Course(
                id=_new_id(),
                code=code,
                name=name,
                credits=credits,
                grade=grade,
                gpa=gpa,
                percentage=percentage,
                course_type=course_type or None,
            )
            for code, name, credits, grade, gpa, percentage, course_type in rows
        )
        terms.append(
            Term(id=_new_id(), name=term_name, type=class_type, courses=courses)  # type: ignore[arg-type]
        )
    return tuple(terms)


def default_document() -> Document:
    """Return the canonical starting document for a new template.

    Term and course identifiers are freshly generated on every call, so two
    default documents never share ids.
    """
    return Document(
        header=TranscriptHeader(
            institute_name="Masters' Union",
            sub_header="UG Programme in Technology and Business Management",
            document_title="Provisional Transcript",
            academic_year="Academic Year 2024 - 28",
            logo=None,
        ),
        student=StudentDetails(
            name="Rahul Sharma",
            roll_no="PGP/2023/1042",
            status="Awaiting",
        ),
        course_data=default_course_data(),
        table_configs=DEFAULT_TABLE_CONFIGS,
        is_unified_tables=False,
        summary_config=SummaryConfig(version=1, sections=DEFAULT_SUMMARY_SECTIONS),
        system_values=dict(DEFAULT_SYSTEM_VALUES),
        footer=TranscriptFooter(
            signature=None,
            signatory_name="Swati Ganeti",
            signatory_designation="Director, Undergraduate Programmes",
            footer_text="On behalf of the Academic Council",
            date="January 14, 2026",
            location="Gurugram, India",
        ),
        schema_version=DOCUMENT_SCHEMA_VERSION,
    )


__all__ = [
    "DEFAULT_SUMMARY_SECTIONS",
    "DEFAULT_SYSTEM_VALUES",
    "DEFAULT_TABLE_CONFIGS",
    "STUDENT_VARIABLES",
    "default_course_data",
    "default_document",
]
