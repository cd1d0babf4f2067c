"""Transcript document model, defaults, codec, and load-time upgrades.

This subpackage holds the immutable dataclasses describing one transcript
layout (:class:`Document`) and a saved, mapped layout (:class:`Template`). It
also converts them to and from the camelCase mapping shape used in storage,
upgrades legacy payloads through a versioned migration chain, and reads and
writes standalone YAML document files.

Examples
--------
>>> from transcript_designer.document import default_document, encode_document
>>> document = default_document()
>>> document.table_configs.in_class.format
'grid'
>>> encode_document(document)["header"]["instituteName"]
"Masters' Union"
"""

from .codec import decode_document, decode_template, encode_document, encode_template
from .defaults import (
    DEFAULT_SUMMARY_SECTIONS,
    DEFAULT_SYSTEM_VALUES,
    DEFAULT_TABLE_CONFIGS,
    STUDENT_VARIABLES,
    default_document,
)
from .loader import (
    document_from_payload,
    dump_document,
    image_data_url,
    load_document,
    template_from_payload,
)
from .migrations import CURRENT_SCHEMA_VERSION, upgrade_payload
from .models import (
    ClassType,
    ColumnConfig,
    Course,
    Document,
    DocumentFormatError,
    StudentDetails,
    SummaryConfig,
    SummaryTableConfig,
    SystemValue,
    TableConfigs,
    TableFormat,
    Template,
    Term,
    TranscriptFooter,
    TranscriptHeader,
)

__all__ = [
    "CURRENT_SCHEMA_VERSION",
    "DEFAULT_SUMMARY_SECTIONS",
    "DEFAULT_SYSTEM_VALUES",
    "DEFAULT_TABLE_CONFIGS",
    "STUDENT_VARIABLES",
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
    "decode_document",
    "decode_template",
    "default_document",
    "document_from_payload",
    "dump_document",
    "encode_document",
    "encode_template",
    "image_data_url",
    "load_document",
    "template_from_payload",
    "upgrade_payload",
]
