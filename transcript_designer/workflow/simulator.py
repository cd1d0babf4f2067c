"""Mock GPA calculation and document generation for program cohorts.

:class:`WorkflowSimulator` tracks, per :class:`~.models.CohortKey`, which terms
have a calculated GPA, which term reports have been generated, and whether the
final transcript has been produced. Generation actions are gated on the
template store: a term report needs a template mapped to the ``term-report``
type for the selected program and cohort, and the final document needs a
``transcript`` template. A missing mapping raises
:class:`~.models.TemplateMappingError` before anything is changed or recorded.

Every successful action persists the updated snapshot and appends an
:class:`~.models.AuditRecord` to the shared history.

Example
-------
>>> from transcript_designer.storage import MemoryStorage
>>> from transcript_designer.store import TemplateStore
>>> from transcript_designer.workflow import (
...     CohortKey, CsvDocumentGenerator, RandomScoringService
... )
>>> storage = MemoryStorage()
>>> simulator = WorkflowSimulator(
...     TemplateStore(storage),
...     storage,
...     RandomScoringService(delay=0),
...     CsvDocumentGenerator(delay=0),
...     terms=["Term I", "Term II"],
... )
>>> key = CohortKey("PGP TBM", "Class of 2025")
>>> simulator.calculate_term_gpa(key, "Term I", "Admin").calculated
True
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import json
import logging
import typing as typ

from transcript_designer._constants import DOC_TYPE_TERM_REPORT, DOC_TYPE_TRANSCRIPT

from .audit import AuditLog
from .models import (
    TemplateMappingError,
    TermCalculation,
    WorkflowSnapshot,
    WorkflowStateError,
    decode_snapshot,
    encode_snapshot,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from transcript_designer.document.models import Template
    from transcript_designer.storage import StoragePort
    from transcript_designer.store import TemplateStore

    from .models import AuditRecord, CohortKey, GeneratedArtifact
    from .services import DocumentGenerationService, ScoringService

logger = logging.getLogger(__name__)

ACTION_CALCULATE = "calculate_tgpa"
ACTION_TERM_REPORT = "generate_term_report"
ACTION_FINAL_DOCUMENT = "generate_final_document"


class WorkflowSimulator:
    """Drive the simulated workflow for any number of program cohorts."""

    def __init__(
        self,
        store: TemplateStore,
        storage: StoragePort,
        scoring: ScoringService,
        generator: DocumentGenerationService,
        *,
        terms: cabc.Sequence[str],
        audit: AuditLog | None = None,
        clock: typ.Callable[[], dt.datetime] = lambda: dt.datetime.now(dt.UTC),
    ) -> None:
        """Bind the simulator to its collaborators.

        Parameters
        ----------
        store : TemplateStore
            Consulted to gate generation actions on template mappings.
        storage : StoragePort
            Holds one snapshot per cohort key.
        scoring : ScoringService
            Produces term GPA values.
        generator : DocumentGenerationService
            Produces term-report and final-document exports.
        terms : sequence of str
            Term identifiers in display order; new snapshots start with one
            uncalculated entry per term.
        audit : AuditLog, optional
            History sink; defaults to an :class:`AuditLog` over ``storage``.
        clock : callable, optional
            Returns the timestamp recorded for calculations.
        """
        self._store = store
        self._storage = storage
        self._scoring = scoring
        self._generator = generator
        self.terms = tuple(terms)
        self.audit = audit or AuditLog(storage)
        self._clock = clock

    def snapshot(self, key: CohortKey) -> WorkflowSnapshot:
        """Return the current snapshot for ``key``, including every configured term."""
        snapshot = self._load(key)
        for term_id in self.terms:
            if snapshot.term(term_id) is None:
                snapshot = snapshot.with_term(TermCalculation(term_id=term_id))
        return snapshot

    def history(self, key: CohortKey | None = None) -> list[AuditRecord]:
        """Return audit records for ``key``, or for every cohort when omitted."""
        if key is None:
            return self.audit.records()
        return self.audit.for_cohort(key)

    def calculate_term_gpa(self, key: CohortKey, term_id: str, actor: str) -> TermCalculation:
        """Score ``term_id`` and store the value with its timestamp.

        Raises
        ------
        WorkflowStateError
            If ``term_id`` is not a configured term.
        """
        snapshot = self.snapshot(key)
        current = snapshot.term(term_id)
        if current is None:
            msg = f"Unknown term {term_id!r}; expected one of: {', '.join(self.terms)}"
            raise WorkflowStateError(msg)
        value = self._scoring.score(key, term_id)
        updated = dc.replace(
            current, calculated=True, value=value, calculated_at=self._clock()
        )
        self._save(key, snapshot.with_term(updated))
        self.audit.append(key, ACTION_CALCULATE, actor, f"{term_id}: {value:.2f}")
        return updated

    def generate_term_report(
        self, key: CohortKey, term_id: str, actor: str
    ) -> GeneratedArtifact:
        """Generate the report for one calculated term.

        Raises
        ------
        TemplateMappingError
            If no ``term-report`` template is mapped to ``key``.
        WorkflowStateError
            If the term has no calculated GPA yet.
        """
        self._require_template(key, DOC_TYPE_TERM_REPORT)
        snapshot = self.snapshot(key)
        current = snapshot.term(term_id)
        if current is None or not current.calculated or current.value is None:
            msg = f"Calculate the TGPA for {term_id} before generating its report."
            raise WorkflowStateError(msg)
        artifact = self._generator.term_report(key, term_id, current.value)
        self._save(key, snapshot.with_term(dc.replace(current, report_generated=True)))
        self.audit.append(key, ACTION_TERM_REPORT, actor, term_id)
        return artifact

    def generate_final_document(self, key: CohortKey, actor: str) -> GeneratedArtifact:
        """Generate the final transcript export from the aggregate GPA.

        Raises
        ------
        TemplateMappingError
            If no ``transcript`` template is mapped to ``key``.
        WorkflowStateError
            If no term has a calculated GPA yet.
        """
        self._require_template(key, DOC_TYPE_TRANSCRIPT)
        snapshot = self.snapshot(key)
        aggregate = snapshot.aggregate
        through_term = snapshot.through_term
        if aggregate is None or through_term is None:
            msg = "Calculate at least one TGPA before generating the final document."
            raise WorkflowStateError(msg)
        artifact = self._generator.final_document(key, aggregate, through_term)
        self._save(key, dc.replace(snapshot, final_generated=True))
        self.audit.append(
            key,
            ACTION_FINAL_DOCUMENT,
            actor,
            f"CGPA {aggregate:.2f} through {through_term}",
        )
        return artifact

    def _require_template(self, key: CohortKey, doc_type: str) -> Template:
        template = self._store.find_for(key.program, key.cohort, doc_type)
        if template is None:
            msg = (
                f"No {doc_type} template is mapped to {key.program} / {key.cohort}. "
                "Map a template to this program and cohort first."
            )
            raise TemplateMappingError(msg)
        return template

    def _load(self, key: CohortKey) -> WorkflowSnapshot:
        raw = self._storage.load(key.storage_key())
        if raw is None:
            return WorkflowSnapshot()
        try:
            payload = json.loads(raw)
            if not isinstance(payload, dict):
                msg = "Workflow snapshot must be a JSON object."
                raise TypeError(msg)
            return decode_snapshot(payload)
        except (json.JSONDecodeError, TypeError, ValueError):
            logger.exception("Failed to load workflow state for %s; resetting", key)
            return WorkflowSnapshot()

    def _save(self, key: CohortKey, snapshot: WorkflowSnapshot) -> None:
        self._storage.save(key.storage_key(), json.dumps(encode_snapshot(snapshot)))


__all__ = [
    "ACTION_CALCULATE",
    "ACTION_FINAL_DOCUMENT",
    "ACTION_TERM_REPORT",
    "WorkflowSimulator",
]
