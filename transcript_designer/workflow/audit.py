"""Append-only history of workflow actions."""

from __future__ import annotations

import datetime as dt
import json
import logging
import typing as typ
import uuid

from transcript_designer._constants import AUDIT_LOG_KEY

from .models import AuditRecord, decode_audit_record, encode_audit_record

if typ.TYPE_CHECKING:
    from transcript_designer.storage import StoragePort

    from .models import CohortKey

logger = logging.getLogger(__name__)


class AuditLog:
    """Persisted list of :class:`AuditRecord` entries, oldest first."""

    def __init__(
        self,
        storage: StoragePort,
        *,
        clock: typ.Callable[[], dt.datetime] = lambda: dt.datetime.now(dt.UTC),
        id_factory: typ.Callable[[], str] = lambda: str(uuid.uuid4()),
    ) -> None:
        self._storage = storage
        self._clock = clock
        self._id_factory = id_factory

    def records(self) -> list[AuditRecord]:
        """Return every stored record; an unreadable log reads as empty."""
        raw = self._storage.load(AUDIT_LOG_KEY)
        if raw is None:
            return []
        try:
            payload = json.loads(raw)
            if not isinstance(payload, list):
                msg = "Audit log must be a JSON list."
                raise TypeError(msg)
            return [decode_audit_record(entry) for entry in payload]
        except (json.JSONDecodeError, TypeError, KeyError, ValueError):
            logger.exception("Failed to load audit log; treating it as empty")
            return []

    def for_cohort(self, key: CohortKey) -> list[AuditRecord]:
        return [
            record
            for record in self.records()
            if record.program == key.program and record.cohort == key.cohort
        ]

    def append(
        self, key: CohortKey, action: str, actor: str, details: str | None = None
    ) -> AuditRecord:
        """Record ``action`` for ``key`` and persist the extended log."""
        record = AuditRecord(
            id=self._id_factory(),
            timestamp=self._clock(),
            program=key.program,
            cohort=key.cohort,
            action=action,
            actor=actor,
            details=details,
        )
        payload = [encode_audit_record(entry) for entry in [*self.records(), record]]
        self._storage.save(AUDIT_LOG_KEY, json.dumps(payload))
        logger.info("%s by %s for %s/%s", action, actor, key.program, key.cohort)
        return record


__all__ = ["AuditLog"]
