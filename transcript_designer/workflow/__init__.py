"""Simulated GPA calculation and document generation per program cohort."""

from .audit import AuditLog
from .models import (
    AuditRecord,
    CohortKey,
    GeneratedArtifact,
    TemplateMappingError,
    TermCalculation,
    WorkflowSnapshot,
    WorkflowStateError,
)
from .services import (
    CsvDocumentGenerator,
    DocumentGenerationService,
    RandomScoringService,
    ScoringService,
)
from .simulator import (
    ACTION_CALCULATE,
    ACTION_FINAL_DOCUMENT,
    ACTION_TERM_REPORT,
    WorkflowSimulator,
)

__all__ = [
    "ACTION_CALCULATE",
    "ACTION_FINAL_DOCUMENT",
    "ACTION_TERM_REPORT",
    "AuditLog",
    "AuditRecord",
    "CohortKey",
    "CsvDocumentGenerator",
    "DocumentGenerationService",
    "GeneratedArtifact",
    "RandomScoringService",
    "ScoringService",
    "TemplateMappingError",
    "TermCalculation",
    "WorkflowSimulator",
    "WorkflowSnapshot",
    "WorkflowStateError",
]
