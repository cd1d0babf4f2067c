"""Persisted collection of transcript templates.

:class:`TemplateStore` keeps the full list of saved templates in memory and
writes it through to a :class:`~transcript_designer.storage.StoragePort` after
every mutation. It also enforces the one real cross-template invariant of the
designer: a cohort may be claimed by at most one template at a time. Mapping a
cohort onto one template strips it from every other template.

:class:`Preferences` stores the small advisory keys (current view, active
template id) that are safe to lose.

Example
-------
>>> from transcript_designer.document import default_document
>>> from transcript_designer.storage import MemoryStorage
>>> store = TemplateStore(MemoryStorage())
>>> first = store.create("Fall Design", default_document())
>>> second = store.create("Spring Design", default_document())
>>> _ = store.patch_meta(first.id, cohorts=["Class of 2025"])
>>> _ = store.patch_meta(second.id, cohorts=["Class of 2025", "Class of 2026"])
>>> store.get(first.id).cohorts
()
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import json
import logging
import typing as typ
import uuid

from ._constants import ACTIVE_TEMPLATE_KEY, DOC_TYPES, TEMPLATES_KEY, VIEW_KEY
from .document.codec import encode_template
from .document.helpers import _string_tuple
from .document.loader import template_from_payload
from .document.models import DocumentFormatError, Template

if typ.TYPE_CHECKING:
    from .document.models import Document
    from .storage import StoragePort

logger = logging.getLogger(__name__)

_PATCHABLE_FIELDS = frozenset({"name", "programs", "cohorts", "types"})


def _utc_now() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


def _new_id() -> str:
    return str(uuid.uuid4())


class TemplateStore:
    """Write-through store for the list of saved templates."""

    def __init__(
        self,
        storage: StoragePort,
        *,
        clock: typ.Callable[[], dt.datetime] = _utc_now,
        id_factory: typ.Callable[[], str] = _new_id,
    ) -> None:
        """Load the template list from ``storage``.

        Parameters
        ----------
        storage : StoragePort
            Keyed blob store holding the template list under
            ``transcript_templates``.
        clock : callable, optional
            Returns the timestamp recorded as ``last_modified``; defaults to
            the current UTC time.
        id_factory : callable, optional
            Produces identifiers for new templates; defaults to UUID4 strings.

        Notes
        -----
        A missing entry loads as an empty list. A malformed entry is logged
        and also loads as an empty list, which the next write replaces.
        """
        self._storage = storage
        self._clock = clock
        self._id_factory = id_factory
        self._templates: list[Template] = self._load()

    def _load(self) -> list[Template]:
        raw = self._storage.load(TEMPLATES_KEY)
        if raw is None:
            return []
        try:
            payload = json.loads(raw)
            if not isinstance(payload, list):
                msg = "Saved templates must be a JSON list."
                raise DocumentFormatError(msg)
            return [template_from_payload(entry) for entry in payload]
        except (json.JSONDecodeError, DocumentFormatError):
            logger.exception("Failed to load templates; starting with an empty list")
            return []

    def _persist(self) -> None:
        payload = [encode_template(template) for template in self._templates]
        self._storage.save(TEMPLATES_KEY, json.dumps(payload))

    def list(self) -> list[Template]:
        """Return all templates."""
        return list(self._templates)

    def get(self, template_id: str) -> Template | None:
        """Return the template with ``template_id`` or ``None``."""
        return next((t for t in self._templates if t.id == template_id), None)

    def create(self, name: str, data: Document) -> Template:
        """Save ``data`` as a new template mapped to the ``transcript`` type."""
        template = Template(
            id=self._id_factory(),
            name=name,
            last_modified=self._clock(),
            data=data,
            types=("transcript",),
            programs=(),
            cohorts=(),
        )
        self._templates = [*self._templates, template]
        self._persist()
        logger.info("Created template %s (%s)", template.id, name)
        return template

    def update(self, template_id: str, name: str, data: Document) -> Template | None:
        """Replace a template's name and document, refreshing ``last_modified``.

        Unknown ids are ignored and return ``None``.
        """
        current = self.get(template_id)
        if current is None:
            logger.debug("Ignoring update for unknown template %s", template_id)
            return None
        updated = dc.replace(current, name=name, data=data, last_modified=self._clock())
        self._replace(updated)
        self._persist()
        return updated

    def patch_meta(self, template_id: str, **fields: object) -> Template | None:
        """Merge mapping metadata (``programs``, ``cohorts``, ``types``, ``name``).

        Setting ``cohorts`` removes each of the new cohorts from every other
        template, so that no cohort is ever claimed twice.

        Raises
        ------
        TypeError
            If ``fields`` names something other than the patchable fields.
        ValueError
            If ``types`` contains a value other than ``transcript`` or
            ``term-report``.
        """
        unknown = set(fields) - _PATCHABLE_FIELDS
        if unknown:
            msg = f"Cannot patch template field(s): {', '.join(sorted(unknown))}"
            raise TypeError(msg)
        current = self.get(template_id)
        if current is None:
            logger.debug("Ignoring metadata patch for unknown template %s", template_id)
            return None

        changes: dict[str, typ.Any] = {}
        if "name" in fields:
            changes["name"] = str(fields["name"])
        for key in ("programs", "cohorts", "types"):
            if key in fields:
                changes[key] = _string_tuple(list(typ.cast("typ.Iterable[str]", fields[key])))
        if "types" in changes:
            invalid = [t for t in changes["types"] if t not in DOC_TYPES]
            if invalid:
                msg = f"Unknown template type(s): {', '.join(invalid)}"
                raise ValueError(msg)

        patched = dc.replace(current, **changes)
        if "cohorts" in changes:
            claimed = set(patched.cohorts)
            self._templates = [
                template
                if template.id == template_id
                else dc.replace(
                    template,
                    cohorts=tuple(c for c in template.cohorts if c not in claimed),
                )
                for template in self._templates
            ]
        self._replace(patched)
        self._persist()
        return patched

    def find_for(self, program: str, cohort: str, doc_type: str) -> Template | None:
        """Return the template mapped to ``program``/``cohort`` for ``doc_type``."""
        return next(
            (t for t in self._templates if t.matches(program, cohort, doc_type)), None
        )

    def _replace(self, updated: Template) -> None:
        self._templates = [
            updated if template.id == updated.id else template
            for template in self._templates
        ]


class Preferences:
    """Advisory UI preferences; any stored value may be dropped safely."""

    def __init__(self, storage: StoragePort) -> None:
        self._storage = storage

    def _read(self, key: str) -> str | None:
        raw = self._storage.load(key)
        if raw is None:
            return None
        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable preference %s", key)
            return None
        return value if isinstance(value, str) else None

    @property
    def active_template_id(self) -> str | None:
        """Identifier of the template last selected for editing."""
        return self._read(ACTIVE_TEMPLATE_KEY)

    @active_template_id.setter
    def active_template_id(self, value: str | None) -> None:
        self._storage.save(ACTIVE_TEMPLATE_KEY, json.dumps(value))

    @property
    def view(self) -> str | None:
        """Name of the last opened view (``dashboard`` or ``editor``)."""
        return self._read(VIEW_KEY)

    @view.setter
    def view(self, value: str | None) -> None:
        self._storage.save(VIEW_KEY, json.dumps(value))


__all__ = ["Preferences", "TemplateStore"]
