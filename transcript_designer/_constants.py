"""Common literal values used across transcript_designer.

These constants keep storage keys and document vocabulary centralized so the
store, the workflow simulator, and tests can import the same values without
drifting. Intended for internal use within the transcript_designer package.

Examples
--------
>>> from transcript_designer import _constants
>>> _constants.TEMPLATES_KEY
'transcript_templates'
>>> _constants.OUTCLASS_SUFFIX.strip()
'(OutClass)'
"""

TEMPLATES_KEY = "transcript_templates"
AUDIT_LOG_KEY = "transcript_audit_log"
VIEW_KEY = "transcript_view"
ACTIVE_TEMPLATE_KEY = "transcript_active_template"
CALC_STATE_PREFIX = "calc_state"

IN_CLASS = "InClass"
OUT_CLASS = "OutClass"
OVERALL = "Overall"

DOC_TYPE_TRANSCRIPT = "transcript"
DOC_TYPE_TERM_REPORT = "term-report"
DOC_TYPES = (DOC_TYPE_TRANSCRIPT, DOC_TYPE_TERM_REPORT)

FORMAT_GRID = "grid"
FORMAT_LIST = "list"
TABLE_FORMATS = (FORMAT_GRID, FORMAT_LIST)

DOCUMENT_SCHEMA_VERSION = 3

OUTCLASS_SUFFIX = " (OutClass)"
DEFAULT_COURSE_TYPE = "Core"
