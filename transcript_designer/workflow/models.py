"""Data types for the mock GPA and document-generation workflow."""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from urllib.parse import quote

from transcript_designer._constants import CALC_STATE_PREFIX
from transcript_designer.document.helpers import _format_timestamp, _parse_timestamp

if typ.TYPE_CHECKING:
    import datetime as dt


class TemplateMappingError(LookupError):
    """Raised when no template is mapped to a program/cohort for a document type."""


class WorkflowStateError(RuntimeError):
    """Raised when a workflow action is attempted before its prerequisites."""


@dc.dataclass(frozen=True, slots=True)
class CohortKey:
    """Identify a (program, cohort) selection."""

    program: str
    cohort: str

    def storage_key(self) -> str:
        """Return the persisted key for this selection's workflow snapshot.

        Each component is percent-encoded so that values containing ``/``
        cannot collide with another pair.

        >>> CohortKey("PGP TBM", "Class of 2025").storage_key()
        'calc_state/PGP%20TBM/Class%20of%202025'
        """
        program = quote(self.program, safe="")
        cohort = quote(self.cohort, safe="")
        return f"{CALC_STATE_PREFIX}/{program}/{cohort}"


@dc.dataclass(frozen=True, slots=True)
class TermCalculation:
    term_id: str
    calculated: bool = False
    value: float | None = None
    calculated_at: dt.datetime | None = None
    report_generated: bool = False


@dc.dataclass(frozen=True, slots=True)
class WorkflowSnapshot:
    """Simulated workflow state for one :class:`CohortKey`."""

    terms: tuple[TermCalculation, ...] = ()
    final_generated: bool = False

    def term(self, term_id: str) -> TermCalculation | None:
        return next((t for t in self.terms if t.term_id == term_id), None)

    @property
    def aggregate(self) -> float | None:
        """Mean of the calculated term values, or ``None`` before any calculation."""
        values = [t.value for t in self.terms if t.calculated and t.value is not None]
        if not values:
            return None
        return round(sum(values) / len(values), 2)

    @property
    def through_term(self) -> str | None:
        """Last term, in snapshot order, that carries a calculated value."""
        calculated = [t.term_id for t in self.terms if t.calculated and t.value is not None]
        return calculated[-1] if calculated else None

    def with_term(self, updated: TermCalculation) -> WorkflowSnapshot:
        """Return a copy with ``updated`` replacing the entry of the same term."""
        if self.term(updated.term_id) is None:
            return dc.replace(self, terms=(*self.terms, updated))
        return dc.replace(
            self,
            terms=tuple(
                updated if t.term_id == updated.term_id else t for t in self.terms
            ),
        )


@dc.dataclass(frozen=True, slots=True)
class AuditRecord:
    """Immutable entry in the append-only workflow history."""

    id: str
    timestamp: dt.datetime
    program: str
    cohort: str
    action: str
    actor: str
    details: str | None = None


@dc.dataclass(frozen=True, slots=True)
class GeneratedArtifact:
    """A generated export ready to be written to disk."""

    filename: str
    content: str
    media_type: str = "text/csv"


def encode_snapshot(snapshot: WorkflowSnapshot) -> dict[str, typ.Any]:
    """Return the JSON-ready mapping for ``snapshot``."""
    return {
        "terms": [
            {
                "termId": term.term_id,
                "calculated": term.calculated,
                "value": term.value,
                "calculatedAt": _format_timestamp(term.calculated_at)
                if term.calculated_at
                else None,
                "reportGenerated": term.report_generated,
            }
            for term in snapshot.terms
        ],
        "finalGenerated": snapshot.final_generated,
    }


def decode_snapshot(payload: typ.Mapping[str, typ.Any]) -> WorkflowSnapshot:
    """Build a :class:`WorkflowSnapshot` from a stored mapping.

    Raises
    ------
    TypeError
        If ``terms`` is not a list.
    ValueError
        If a term entry lacks its ``termId``.
    """
    raw_terms = payload.get("terms", [])
    if not isinstance(raw_terms, list):
        msg = "Workflow snapshot 'terms' must be a list."
        raise TypeError(msg)
    terms: list[TermCalculation] = []
    for entry in raw_terms:
        if not isinstance(entry, dict) or "termId" not in entry:
            msg = "Workflow snapshot term entries need a 'termId'."
            raise ValueError(msg)
        value = entry.get("value")
        terms.append(
            TermCalculation(
                term_id=str(entry["termId"]),
                calculated=bool(entry.get("calculated", False)),
                value=float(value) if value is not None else None,
                calculated_at=_parse_timestamp(entry.get("calculatedAt")),
                report_generated=bool(entry.get("reportGenerated", False)),
            )
        )
    return WorkflowSnapshot(
        terms=tuple(terms),
        final_generated=bool(payload.get("finalGenerated", False)),
    )


def encode_audit_record(record: AuditRecord) -> dict[str, typ.Any]:
    return {
        "id": record.id,
        "timestamp": _format_timestamp(record.timestamp),
        "program": record.program,
        "cohort": record.cohort,
        "action": record.action,
        "actor": record.actor,
        "details": record.details,
    }


def decode_audit_record(payload: object) -> AuditRecord:
    """Build an :class:`AuditRecord` from a stored mapping."""
    if not isinstance(payload, typ.Mapping):
        msg = "Audit records must be JSON objects."
        raise TypeError(msg)
    timestamp = _parse_timestamp(payload.get("timestamp"))
    if timestamp is None:
        msg = "Audit records need a timestamp."
        raise ValueError(msg)
    details = payload.get("details")
    return AuditRecord(
        id=str(payload["id"]),
        timestamp=timestamp,
        program=str(payload["program"]),
        cohort=str(payload["cohort"]),
        action=str(payload["action"]),
        actor=str(payload.get("actor", "")),
        details=str(details) if details is not None else None,
    )


__all__ = [
    "AuditRecord",
    "CohortKey",
    "GeneratedArtifact",
    "TemplateMappingError",
    "TermCalculation",
    "WorkflowSnapshot",
    "WorkflowStateError",
    "decode_audit_record",
    "decode_snapshot",
    "encode_audit_record",
    "encode_snapshot",
]
