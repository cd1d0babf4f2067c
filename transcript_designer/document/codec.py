"""Convert documents and templates to and from their saved mapping shape.

Saved payloads use the camelCase keys the designer has always written
(``instituteName``, ``tableConfigs.inClass.showGPA``, ``isUnifiedTables``,
``lastModified`` and so on), so that older saved data stays readable. The
functions here translate between that shape and the frozen dataclasses in
:mod:`transcript_designer.document.models`; they do not upgrade legacy
payloads (see :mod:`transcript_designer.document.migrations`).

Example
-------
>>> from transcript_designer.document.defaults import default_document
>>> payload = encode_document(default_document())
>>> payload["tableConfigs"]["outClass"]["format"]
'list'
>>> decode_document(payload).table_configs.out_class.format
'list'
"""

from __future__ import annotations

import datetime as dt
import typing as typ
import uuid

from transcript_designer._constants import DOC_TYPES, OUT_CLASS, TABLE_FORMATS

from .helpers import (
    _coerce,
    _decode_flat,
    _encode_flat,
    _format_timestamp,
    _parse_timestamp,
    _string_tuple,
)
from .models import (
    ColumnConfig,
    Course,
    Document,
    DocumentFormatError,
    StudentDetails,
    SummaryConfig,
    SummaryTableConfig,
    SystemValue,
    TableConfigs,
    Template,
    Term,
    TranscriptFooter,
    TranscriptHeader,
)


def encode_document(document: Document) -> dict[str, typ.Any]:
    """Return the saved mapping shape for ``document``."""
    return {
        "header": _encode_flat(document.header),
        "student": _encode_flat(document.student),
        "courseData": [_encode_term(term) for term in document.course_data],
        "tableConfigs": {
            "inClass": _encode_flat(document.table_configs.in_class),
            "outClass": _encode_flat(document.table_configs.out_class),
        },
        "isUnifiedTables": document.is_unified_tables,
        "summaryConfig": {
            "version": document.summary_config.version,
            "sections": [
                _encode_flat(section) for section in document.summary_config.sections
            ],
        },
        "systemValues": {
            category: _encode_flat(value)
            for category, value in document.system_values.items()
        },
        "footer": _encode_flat(document.footer),
        "schemaVersion": document.schema_version,
    }


def _encode_term(term: Term) -> dict[str, typ.Any]:
    return {
        "id": term.id,
        "name": term.name,
        "type": term.type,
        "courses": [_encode_flat(course) for course in term.courses],
    }


def decode_document(payload: object) -> Document:
    """Build a :class:`Document` from a saved mapping.

    Parameters
    ----------
    payload : object
        Mapping in the saved camelCase shape. Absent keys fall back to the
        model defaults; terms and courses without an ``id`` get a fresh one.

    Returns
    -------
    Document
        The decoded, immutable document.

    Raises
    ------
    DocumentFormatError
        If the payload, or one of its nested sections, has the wrong shape
        or names an unknown table format.
    """
    if not isinstance(payload, typ.Mapping):
        msg = "Document payload must be a mapping."
        raise DocumentFormatError(msg)
    return Document(
        header=_decode_flat(TranscriptHeader, payload.get("header")),
        student=_decode_flat(StudentDetails, payload.get("student")),
        course_data=_decode_terms(payload.get("courseData")),
        table_configs=_decode_table_configs(payload.get("tableConfigs")),
        is_unified_tables=bool(payload.get("isUnifiedTables", False)),
        summary_config=_decode_summary_config(payload.get("summaryConfig")),
        system_values=_decode_system_values(payload.get("systemValues")),
        footer=_decode_flat(TranscriptFooter, payload.get("footer")),
        schema_version=typ.cast("int", _coerce(payload.get("schemaVersion", 0), "int")),
    )


def _decode_terms(entries: object) -> tuple[Term, ...]:
    match entries:
        case None:
            return ()
        case list() | tuple() as items:
            pass
        case _:
            msg = "'courseData' must be a list of terms."
            raise DocumentFormatError(msg)
    terms: list[Term] = []
    for entry in items:
        if not isinstance(entry, typ.Mapping):
            msg = "Each term in 'courseData' must be a mapping."
            raise DocumentFormatError(msg)
        class_type = OUT_CLASS if entry.get("type") == OUT_CLASS else "InClass"
        courses_raw = entry.get("courses") or []
        if not isinstance(courses_raw, list | tuple):
            msg = f"Term '{entry.get('name', '')}' courses must be a list."
            raise DocumentFormatError(msg)
        courses = tuple(
            _decode_flat(Course, course, required={"id": _new_id()})
            for course in courses_raw
        )
        terms.append(
            Term(
                id=str(entry.get("id") or _new_id()),
                name=str(entry.get("name", "")),
                type=class_type,
                courses=courses,
            )
        )
    return tuple(terms)


def _decode_table_configs(payload: object) -> TableConfigs:
    if payload is None:
        return TableConfigs()
    if not isinstance(payload, typ.Mapping):
        msg = "'tableConfigs' must be a mapping."
        raise DocumentFormatError(msg)
    return TableConfigs(
        in_class=_decode_column_config(payload.get("inClass")),
        out_class=_decode_column_config(payload.get("outClass")),
    )


def _decode_column_config(payload: object) -> ColumnConfig:
    config = _decode_flat(ColumnConfig, payload)
    if config.format not in TABLE_FORMATS:
        msg = f"Unknown table format '{config.format}'. Expected one of: grid, list"
        raise DocumentFormatError(msg)
    return config


def _decode_summary_config(payload: object) -> SummaryConfig:
    match payload:
        case None:
            return SummaryConfig()
        case list() | tuple() as sections:
            version: object = 1
        case {"sections": list() as sections, **rest}:
            version = rest.get("version", 1)
        case _:
            msg = "'summaryConfig' must hold a list of sections."
            raise DocumentFormatError(msg)
    decoded: list[SummaryTableConfig] = []
    for index, section in enumerate(sections):
        if not isinstance(section, typ.Mapping):
            msg = "Each summary section must be a mapping."
            raise DocumentFormatError(msg)
        decoded.append(
            _decode_flat(
                SummaryTableConfig,
                section,
                required={
                    "id": f"section-{index + 1}",
                    "type": str(section.get("type", "")),
                },
            )
        )
    return SummaryConfig(
        version=typ.cast("int", _coerce(version, "int")), sections=tuple(decoded)
    )


def _decode_system_values(payload: object) -> dict[str, SystemValue]:
    if payload is None:
        return {}
    if not isinstance(payload, typ.Mapping):
        msg = "'systemValues' must be a mapping of category to values."
        raise DocumentFormatError(msg)
    return {
        str(category): _decode_flat(SystemValue, values)
        for category, values in payload.items()
    }


def encode_template(template: Template) -> dict[str, typ.Any]:
    """Return the saved mapping shape for ``template``."""
    return {
        "id": template.id,
        "name": template.name,
        "lastModified": _format_timestamp(template.last_modified),
        "types": list(template.types),
        "programs": list(template.programs),
        "cohorts": list(template.cohorts),
        "data": encode_document(template.data),
    }


def decode_template(payload: object) -> Template:
    """Build a :class:`Template` from a saved mapping.

    The embedded ``data`` payload is decoded as-is; callers loading persisted
    data should upgrade it first (see :func:`template_from_payload`).
    Templates saved before type mapping existed default to ``transcript``.
    """
    match payload:
        case {"id": template_id, **rest} if template_id:
            pass
        case _:
            msg = "Template payload must be a mapping with an 'id'."
            raise DocumentFormatError(msg)
    last_modified = _parse_timestamp(rest.get("lastModified")) or dt.datetime.now(
        dt.UTC
    )
    types = tuple(t for t in _string_tuple(rest.get("types")) if t in DOC_TYPES)
    return Template(
        id=str(template_id),
        name=str(rest.get("name") or ""),
        last_modified=last_modified,
        data=decode_document(rest.get("data") or {}),
        types=types if "types" in rest else ("transcript",),
        programs=_string_tuple(rest.get("programs")),
        cohorts=_string_tuple(rest.get("cohorts")),
    )


def _new_id() -> str:
    return str(uuid.uuid4())


__all__ = [
    "decode_document",
    "decode_template",
    "encode_document",
    "encode_template",
]
