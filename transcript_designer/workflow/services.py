"""Scoring and document-generation services used by the workflow simulator.

Both concerns are external collaborators in a real deployment. The protocols
describe what the simulator needs; the bundled implementations only imitate
them: :class:`RandomScoringService` returns a uniformly random GPA after an
artificial delay, and :class:`CsvDocumentGenerator` emits a CSV export with a
fixed header row and one illustrative data row.
"""

from __future__ import annotations

import csv
import io
import logging
import random
import re
import time
import typing as typ

from .models import GeneratedArtifact

if typ.TYPE_CHECKING:
    from .models import CohortKey

logger = logging.getLogger(__name__)

MIN_SCORE = 3.0
MAX_SCORE = 4.0

TERM_REPORT_HEADER = ("Program", "Cohort", "Term", "Roll No", "Student Name", "TGPA")
FINAL_DOCUMENT_HEADER = (
    "Program",
    "Cohort",
    "Roll No",
    "Student Name",
    "CGPA",
    "Through Term",
)
SAMPLE_ROLL_NO = "MU-0001"
SAMPLE_STUDENT = "Sample Student"


class ScoringService(typ.Protocol):
    """Compute a term GPA for a cohort."""

    def score(self, key: CohortKey, term_id: str) -> float: ...


class DocumentGenerationService(typ.Protocol):
    """Produce export artifacts for a cohort."""

    def term_report(self, key: CohortKey, term_id: str, value: float) -> GeneratedArtifact: ...

    def final_document(
        self, key: CohortKey, aggregate: float, through_term: str
    ) -> GeneratedArtifact: ...


class RandomScoringService:
    """Return a random GPA between 3.0 and 4.0 after ``delay`` seconds."""

    def __init__(
        self,
        *,
        delay: float = 1.5,
        rng: random.Random | None = None,
        sleep: typ.Callable[[float], None] = time.sleep,
    ) -> None:
        self.delay = delay
        self._rng = rng or random.Random()  # noqa: S311 - placeholder values
        self._sleep = sleep

    def score(self, key: CohortKey, term_id: str) -> float:
        logger.debug("Scoring %s for %s/%s", term_id, key.program, key.cohort)
        if self.delay > 0:
            self._sleep(self.delay)
        return round(self._rng.uniform(MIN_SCORE, MAX_SCORE), 2)


class CsvDocumentGenerator:
    """Build CSV exports with a fixed header and one sample row."""

    def __init__(
        self,
        *,
        delay: float = 2.0,
        sleep: typ.Callable[[float], None] = time.sleep,
    ) -> None:
        self.delay = delay
        self._sleep = sleep

    def term_report(self, key: CohortKey, term_id: str, value: float) -> GeneratedArtifact:
        """Return the single-term metrics export."""
        self._wait()
        row = (key.program, key.cohort, term_id, SAMPLE_ROLL_NO, SAMPLE_STUDENT, f"{value:.2f}")
        return GeneratedArtifact(
            filename=_filename(key.program, key.cohort, term_id, "term_report"),
            content=_to_csv(TERM_REPORT_HEADER, row),
        )

    def final_document(
        self, key: CohortKey, aggregate: float, through_term: str
    ) -> GeneratedArtifact:
        """Return the aggregate metrics export."""
        self._wait()
        row = (
            key.program,
            key.cohort,
            SAMPLE_ROLL_NO,
            SAMPLE_STUDENT,
            f"{aggregate:.2f}",
            through_term,
        )
        return GeneratedArtifact(
            filename=_filename(key.program, key.cohort, "final_transcript"),
            content=_to_csv(FINAL_DOCUMENT_HEADER, row),
        )

    def _wait(self) -> None:
        if self.delay > 0:
            self._sleep(self.delay)


def _to_csv(header: typ.Sequence[str], row: typ.Sequence[str]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(header)
    writer.writerow(row)
    return buffer.getvalue()


def _filename(*parts: str) -> str:
    """Join ``parts`` into a filesystem-safe ``.csv`` name.

    >>> _filename("PGP TBM", "Class of 2025", "Term I", "term_report")
    'PGP_TBM_Class_of_2025_Term_I_term_report.csv'
    """
    slug = "_".join(re.sub(r"[^A-Za-z0-9]+", "_", part).strip("_") for part in parts)
    return f"{slug}.csv"


__all__ = [
    "FINAL_DOCUMENT_HEADER",
    "TERM_REPORT_HEADER",
    "CsvDocumentGenerator",
    "DocumentGenerationService",
    "RandomScoringService",
    "ScoringService",
]
