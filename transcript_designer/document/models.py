"""Typed dataclasses describing transcript documents and saved templates."""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import datetime as dt  # noqa: TC003 - used for runtime type metadata
import typing as typ

from transcript_designer._constants import FORMAT_GRID, IN_CLASS

ClassType = typ.Literal["InClass", "OutClass"]
TableFormat = typ.Literal["grid", "list"]


class DocumentFormatError(ValueError):
    """Raised when a document payload cannot be decoded."""


@dc.dataclass(frozen=True, slots=True)
class TranscriptHeader:
    """Institute branding printed at the top of the page."""

    institute_name: str = ""
    sub_header: str = ""
    document_title: str = ""
    academic_year: str = ""
    logo: str | None = None


@dc.dataclass(frozen=True, slots=True)
class StudentDetails:
    """Student identity fields; values may embed ``{{...}}`` placeholders."""

    name: str = ""
    roll_no: str = ""
    status: str = ""


@dc.dataclass(frozen=True, slots=True)
class Course:
    """A single course row. Every display field is a free-form string."""

    id: str
    code: str = ""
    name: str = ""
    credits: str = ""
    grade: str = ""
    gpa: str = ""
    percentage: str = ""
    course_type: str | None = None


@dc.dataclass(frozen=True, slots=True)
class Term:
    """An academic period tagged InClass or OutClass."""

    id: str
    name: str
    type: ClassType = IN_CLASS
    courses: tuple[Course, ...] = ()


@dc.dataclass(frozen=True, slots=True)
class ColumnConfig:
    """Column visibility flags, display labels, and layout for one class type.

    Attributes
    ----------
    show_credits, show_grade, show_gpa, show_percentage, show_course_type : bool
        Whether the matching column is rendered.
    credits_label, grade_label, gpa_label, percentage_label, course_type_label : str
        Header text for the matching column, kept independently of visibility.
    format : str
        ``"grid"`` renders one boxed table per term, ``"list"`` renders one
        consolidated table with a term column.
    """

    show_credits: bool = True
    credits_label: str = "Credits"
    show_grade: bool = True
    grade_label: str = "Grade"
    show_gpa: bool = True
    gpa_label: str = "GPA"
    show_percentage: bool = False
    percentage_label: str = "Percentage"
    show_course_type: bool = False
    course_type_label: str = "Type"
    format: TableFormat = FORMAT_GRID


@dc.dataclass(frozen=True, slots=True)
class TableConfigs:
    """Column configuration per class type."""

    in_class: ColumnConfig = dc.field(default_factory=ColumnConfig)
    out_class: ColumnConfig = dc.field(default_factory=ColumnConfig)


@dc.dataclass(frozen=True, slots=True)
class SummaryTableConfig:
    """One summary block (credits and CGPA figures) for a category."""

    id: str
    type: str
    is_visible: bool = True
    show_credits_required: bool = True
    credits_required_label: str = "Total Credits"
    show_credits_awarded: bool = True
    credits_awarded_label: str = "Total Credits Awarded"
    show_cgpa: bool = True
    cgpa_label: str = "CGPA"

    @property
    def has_visible_fields(self) -> bool:
        """Return True when the section is shown and has a field enabled."""
        return self.is_visible and (
            self.show_credits_required or self.show_credits_awarded or self.show_cgpa
        )


@dc.dataclass(frozen=True, slots=True)
class SummaryConfig:
    """Ordered summary sections plus the section schema version."""

    version: int = 1
    sections: tuple[SummaryTableConfig, ...] = ()

    def sections_of_type(self, section_type: str) -> list[SummaryTableConfig]:
        """Return the sections for ``section_type`` in configured order."""
        return [section for section in self.sections if section.type == section_type]


@dc.dataclass(frozen=True, slots=True)
class SystemValue:
    """Externally supplied display figures for a summary category."""

    credits_required: str = ""
    credits_awarded: str = ""
    cgpa: str = ""


@dc.dataclass(frozen=True, slots=True)
class TranscriptFooter:
    """Signatory block printed at the bottom of the page."""

    signature: str | None = None
    signatory_name: str = ""
    signatory_designation: str = ""
    footer_text: str = ""
    date: str = ""
    location: str = ""


@dc.dataclass(frozen=True, slots=True)
class Document:
    """The full editable transcript payload."""

    header: TranscriptHeader = dc.field(default_factory=TranscriptHeader)
    student: StudentDetails = dc.field(default_factory=StudentDetails)
    course_data: tuple[Term, ...] = ()
    table_configs: TableConfigs = dc.field(default_factory=TableConfigs)
    is_unified_tables: bool = False
    summary_config: SummaryConfig = dc.field(default_factory=SummaryConfig)
    system_values: cabc.Mapping[str, SystemValue] = dc.field(default_factory=dict)
    footer: TranscriptFooter = dc.field(default_factory=TranscriptFooter)
    schema_version: int = 0

    def terms_of_type(self, class_type: ClassType) -> list[Term]:
        """Partition ``course_data``; anything not OutClass counts as InClass."""
        if class_type == IN_CLASS:
            return [term for term in self.course_data if term.type != "OutClass"]
        return [term for term in self.course_data if term.type == "OutClass"]


@dc.dataclass(frozen=True, slots=True)
class Template:
    """A saved, named Document plus its program/cohort/type mapping."""

    id: str
    name: str
    last_modified: dt.datetime
    data: Document
    types: tuple[str, ...] = ("transcript",)
    programs: tuple[str, ...] = ()
    cohorts: tuple[str, ...] = ()

    def matches(self, program: str, cohort: str, doc_type: str) -> bool:
        """Return True when this template is mapped to the given selection."""
        return (
            doc_type in self.types
            and program in self.programs
            and cohort in self.cohorts
        )


__all__ = [
    "ClassType",
    "ColumnConfig",
    "Course",
    "Document",
    "DocumentFormatError",
    "StudentDetails",
    "SummaryConfig",
    "SummaryTableConfig",
    "SystemValue",
    "TableConfigs",
    "TableFormat",
    "Template",
    "Term",
    "TranscriptFooter",
    "TranscriptHeader",
]
