"""Pure update operations applied to a transcript :class:`Document`.

Each function takes the current document plus the edit arguments and returns a
new document; nothing is ever modified in place, so any other holder of the
previous document keeps seeing the old values. Unchanged sub-objects are
shared between the old and the new document, which is safe because every
model dataclass is frozen.

Field names may be given either as attribute names (``roll_no``,
``show_gpa``) or in the camelCase spelling used by saved payloads
(``rollNo``, ``showGPA``).

Example
-------
>>> from transcript_designer.document import default_document
>>> before = default_document()
>>> after = toggle_column(before, "inClass", "showPercentage")
>>> before.table_configs.in_class.show_percentage
False
>>> after.table_configs.in_class.show_percentage
True
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ

from ._constants import TABLE_FORMATS
from .document.defaults import STUDENT_VARIABLES
from .document.helpers import _resolve_field
from .document.models import (
    ColumnConfig,
    Document,
    StudentDetails,
    SummaryTableConfig,
    TranscriptFooter,
    TranscriptHeader,
)

logger = logging.getLogger(__name__)

_CLASS_TYPE_ATTRS: dict[str, str] = {
    "inclass": "in_class",
    "in_class": "in_class",
    "outclass": "out_class",
    "out_class": "out_class",
}
SUMMARY_TOGGLE_FIELDS = ("show_credits_required", "show_credits_awarded", "show_cgpa")
SUMMARY_LABEL_FIELDS = ("credits_required_label", "credits_awarded_label", "cgpa_label")


def _table_attr(class_type: str) -> str:
    """Return the ``TableConfigs`` attribute for a class-type name."""
    try:
        return _CLASS_TYPE_ATTRS[class_type.lower()]
    except KeyError as exc:
        msg = f"Unknown class type '{class_type}'. Expected inClass or outClass."
        raise ValueError(msg) from exc


def update_header(document: Document, key: str, value: str | None) -> Document:
    """Set one header field."""
    field = _resolve_field(TranscriptHeader, key)
    header = dc.replace(document.header, **{field: value})
    return dc.replace(document, header=header)


def update_student(document: Document, key: str, value: str) -> Document:
    """Set one student field; placeholder tokens are kept verbatim."""
    field = _resolve_field(StudentDetails, key)
    student = dc.replace(document.student, **{field: value})
    return dc.replace(document, student=student)


def update_footer(document: Document, key: str, value: str | None) -> Document:
    """Set one footer field."""
    field = _resolve_field(TranscriptFooter, key)
    footer = dc.replace(document.footer, **{field: value})
    return dc.replace(document, footer=footer)


def append_student_variable(document: Document, key: str, token: str) -> Document:
    """Append a placeholder token to a student field.

    Raises
    ------
    ValueError
        If ``token`` is not one of the variables offered for that field.
    """
    field = _resolve_field(StudentDetails, key)
    allowed = STUDENT_VARIABLES.get(field, ())
    if token not in allowed:
        msg = f"Unknown variable '{token}' for '{field}'. Choose from: {', '.join(allowed)}"
        raise ValueError(msg)
    current = getattr(document.student, field)
    return update_student(document, field, f"{current}{token}")


def _replace_column_config(
    document: Document, class_type: str, **changes: object
) -> Document:
    attr = _table_attr(class_type)
    config: ColumnConfig = getattr(document.table_configs, attr)
    table_configs = dc.replace(
        document.table_configs, **{attr: dc.replace(config, **changes)}
    )
    return dc.replace(document, table_configs=table_configs)


def toggle_column(document: Document, class_type: str, column_flag: str) -> Document:
    """Flip one ``show_*`` flag in the named column configuration.

    Labels are left untouched, so toggling twice restores the original
    configuration exactly.
    """
    field = _resolve_field(ColumnConfig, column_flag)
    if not field.startswith("show_"):
        msg = f"'{column_flag}' is not a column visibility flag."
        raise ValueError(msg)
    config: ColumnConfig = getattr(document.table_configs, _table_attr(class_type))
    return _replace_column_config(
        document, class_type, **{field: not getattr(config, field)}
    )


def update_column_label(
    document: Document, class_type: str, label_field: str, text: str
) -> Document:
    """Set the header text for a column, independently of its visibility."""
    field = _resolve_field(ColumnConfig, label_field)
    if not field.endswith("_label"):
        msg = f"'{label_field}' is not a column label field."
        raise ValueError(msg)
    return _replace_column_config(document, class_type, **{field: text})


def update_table_format(document: Document, class_type: str, table_format: str) -> Document:
    """Switch a column configuration between ``grid`` and ``list`` layouts."""
    if table_format not in TABLE_FORMATS:
        msg = f"Unknown table format '{table_format}'. Expected grid or list."
        raise ValueError(msg)
    return _replace_column_config(document, class_type, format=table_format)


def toggle_unified_tables(document: Document) -> Document:
    """Flip between one merged course table and separate class-type tables."""
    return dc.replace(document, is_unified_tables=not document.is_unified_tables)


def _update_section(
    document: Document,
    section_id: str,
    change: typ.Callable[[SummaryTableConfig], SummaryTableConfig],
) -> Document:
    """Apply ``change`` to the section with ``section_id``; unknown ids are a no-op."""
    sections = document.summary_config.sections
    if not any(section.id == section_id for section in sections):
        logger.debug("Ignoring edit for unknown summary section %s", section_id)
        return document
    updated = tuple(
        change(section) if section.id == section_id else section
        for section in sections
    )
    summary_config = dc.replace(document.summary_config, sections=updated)
    return dc.replace(document, summary_config=summary_config)


def toggle_summary_section_visibility(document: Document, section_id: str) -> Document:
    """Show or hide a whole summary section."""
    return _update_section(
        document,
        section_id,
        lambda section: dc.replace(section, is_visible=not section.is_visible),
    )


def toggle_summary_field(document: Document, section_id: str, field: str) -> Document:
    """Flip one ``show_*`` flag of a summary section."""
    name = _resolve_field(SummaryTableConfig, field)
    if name not in SUMMARY_TOGGLE_FIELDS:
        msg = f"'{field}' is not a summary field flag."
        raise ValueError(msg)
    return _update_section(
        document,
        section_id,
        lambda section: dc.replace(section, **{name: not getattr(section, name)}),
    )


def update_summary_field_label(
    document: Document, section_id: str, field: str, text: str
) -> Document:
    """Set the custom label text of a summary field."""
    name = _resolve_field(SummaryTableConfig, field)
    if name not in SUMMARY_LABEL_FIELDS:
        msg = f"'{field}' is not a summary label field."
        raise ValueError(msg)
    return _update_section(
        document, section_id, lambda section: dc.replace(section, **{name: text})
    )


__all__ = [
    "SUMMARY_LABEL_FIELDS",
    "SUMMARY_TOGGLE_FIELDS",
    "append_student_variable",
    "toggle_column",
    "toggle_summary_field",
    "toggle_summary_section_visibility",
    "toggle_unified_tables",
    "update_column_label",
    "update_footer",
    "update_header",
    "update_student",
    "update_summary_field_label",
    "update_table_format",
]
